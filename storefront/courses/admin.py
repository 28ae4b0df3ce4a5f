from django.contrib import admin
from .models import Course, Video


class VideoInline(admin.TabularInline):
    model = Video
    extra = 0
    fields = ['priority', 'title', 'url', 'duration']
    ordering = ['priority']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['title', 'instructor', 'price', 'sale_enabled', 'sale_price', 'is_featured',
                    'difficulty_level', 'rating', 'reviews', 'created_at']
    list_filter = ['is_featured', 'difficulty_level', 'sale_enabled', 'category']
    search_fields = ['title', 'description', 'instructor']
    readonly_fields = ['rating', 'reviews', 'created_at', 'updated_at']
    inlines = [VideoInline]


@admin.register(Video)
class VideoAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'priority', 'duration']
    list_filter = ['course']
    search_fields = ['title', 'course__title']
    ordering = ['course', 'priority']
