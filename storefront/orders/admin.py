from django.contrib import admin
from .models import Cart, CartItem, Order, OrderItem


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ['user', 'total_price', 'updated_at']
    search_fields = ['user__email']
    inlines = [CartItemInline]


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'exam_name', 'subject_name', 'subject_code', 'price', 'image', 'quantity']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'total_price', 'payment_method', 'is_paid', 'status', 'created_at']
    list_filter = ['status', 'is_paid', 'payment_method', 'created_at']
    search_fields = ['user__email', 'user__name', 'items__exam_name']
    ordering = ['-created_at']
    readonly_fields = ['payment_result', 'created_at', 'updated_at']
    inlines = [OrderItemInline]
