from rest_framework import serializers

from .models import Product, Favourite
from .pricing import effective_price, discount_percentage


class ProductSerializer(serializers.ModelSerializer):
    effective_price = serializers.SerializerMethodField()
    discount_percentage = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ['id', 'name', 'subject_name', 'subject_code', 'price', 'image', 'description',
                  'product_type', 'pdf_link', 'ratings', 'number_of_reviews', 'sale_enabled',
                  'sale_price', 'effective_price', 'discount_percentage', 'created_at', 'updated_at']
        read_only_fields = ['ratings', 'number_of_reviews', 'created_at', 'updated_at']

    def get_effective_price(self, obj):
        return str(effective_price(obj))

    def get_discount_percentage(self, obj):
        return discount_percentage(obj)

    def to_internal_value(self, data):
        # Types are stored lowercase; accept "Exam", " notes " etc. from the admin panel
        if hasattr(data, 'get') and isinstance(data.get('product_type'), str):
            data = data.copy()
            data['product_type'] = data['product_type'].strip().lower()
        return super().to_internal_value(data)


class ProductSummarySerializer(serializers.ModelSerializer):
    """Compact product shape embedded in carts, favourites and reviews"""
    effective_price = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = ['id', 'name', 'subject_name', 'subject_code', 'price', 'sale_enabled', 'sale_price',
                  'effective_price', 'image', 'product_type']

    def get_effective_price(self, obj):
        return str(effective_price(obj))


class FavouriteSerializer(serializers.ModelSerializer):
    product_detail = ProductSummarySerializer(source='product', read_only=True)

    class Meta:
        model = Favourite
        fields = ['id', 'product', 'product_detail', 'created_at']


class FavouriteAddSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
