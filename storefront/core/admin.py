from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Config, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['email', 'name', 'role', 'purchases_count', 'reviews_count', 'is_active', 'date_joined']
    list_filter = ['role', 'is_active', 'is_staff', 'is_superuser', 'date_joined']
    search_fields = ['email', 'name', 'username', 'phone']
    ordering = ['email']
    readonly_fields = ['purchases_count', 'reviews_count']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Storefront', {'fields': ('name', 'role', 'phone', 'address', 'profile_image', 'cover_image',
                                   'purchases_count', 'reviews_count')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Storefront', {'fields': ('email', 'name', 'role')}),
    )


@admin.register(Config)
class ConfigAdmin(admin.ModelAdmin):
    list_display = ['key', 'updated_at']
    search_fields = ['key', 'description']
    ordering = ['key']
    readonly_fields = ['updated_at']


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_id', 'ip_address', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__email', 'model_name', 'object_id', 'object_name']
    ordering = ['-created_at']
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_name', 'changes', 'ip_address', 'created_at']
