from django.contrib import admin
from .models import Ad, Theme, Policy


@admin.register(Ad)
class AdAdmin(admin.ModelAdmin):
    list_display = ['title', 'template_id', 'category', 'priority', 'start_date', 'end_date', 'ad_prod_type']
    list_filter = ['template_id', 'category', 'ad_prod_type']
    search_fields = ['title', 'subtitle', 'description']
    ordering = ['-priority', '-created_at']


@admin.register(Theme)
class ThemeAdmin(admin.ModelAdmin):
    list_display = ['id', 'updated_at']


@admin.register(Policy)
class PolicyAdmin(admin.ModelAdmin):
    list_display = ['policy_type', 'updated_at']
