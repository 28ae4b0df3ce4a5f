from django.contrib import admin
from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'reviewable_type', 'reviewable_id', 'rating', 'created_at']
    list_filter = ['reviewable_type', 'rating', 'created_at']
    search_fields = ['name', 'comment', 'user__email']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
