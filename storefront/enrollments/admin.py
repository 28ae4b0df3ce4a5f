from django.contrib import admin
from .models import Enrollment, LessonProgress


class LessonProgressInline(admin.TabularInline):
    model = LessonProgress
    extra = 0


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['user', 'course', 'status', 'payment_status', 'progress', 'price_paid', 'enrolled_at']
    list_filter = ['status', 'payment_status', 'enrolled_at']
    search_fields = ['user__email', 'user__name', 'course__title']
    ordering = ['-enrolled_at']
    inlines = [LessonProgressInline]
