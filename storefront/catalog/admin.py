from django.contrib import admin
from .models import Product, Favourite
from .pricing import effective_price


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'subject_code', 'product_type', 'price', 'sale_enabled', 'sale_price',
                    'current_price', 'ratings', 'number_of_reviews', 'created_at']
    list_filter = ['product_type', 'sale_enabled', 'created_at']
    search_fields = ['name', 'subject_name', 'subject_code', 'description']
    ordering = ['name']
    readonly_fields = ['ratings', 'number_of_reviews', 'created_at', 'updated_at']

    def current_price(self, obj):
        """Price after sale resolution"""
        return effective_price(obj)
    current_price.short_description = 'Effective price'


@admin.register(Favourite)
class FavouriteAdmin(admin.ModelAdmin):
    list_display = ['user', 'product', 'created_at']
    search_fields = ['user__email', 'product__name']
    ordering = ['-created_at']
