from django.db import transaction
from rest_framework import serializers

from storefront.catalog.models import Product
from storefront.catalog.pricing import effective_price, discount_percentage, line_total, cart_total
from storefront.catalog.serializers import ProductSummarySerializer
from .models import Cart, CartItem, Order, OrderItem


class CartItemSerializer(serializers.ModelSerializer):
    product_detail = ProductSummarySerializer(source='product', read_only=True)
    effective_price = serializers.SerializerMethodField()
    discount_percentage = serializers.SerializerMethodField()
    line_total = serializers.SerializerMethodField()

    class Meta:
        model = CartItem
        fields = ['id', 'product', 'product_detail', 'quantity', 'effective_price',
                  'discount_percentage', 'line_total', 'added_at']
        read_only_fields = ['added_at']

    def get_effective_price(self, obj):
        return str(effective_price(obj.product))

    def get_discount_percentage(self, obj):
        return discount_percentage(obj.product)

    def get_line_total(self, obj):
        return str(line_total(obj.product, obj.quantity))


class CartSerializer(serializers.ModelSerializer):
    items = serializers.SerializerMethodField()
    total_price = serializers.SerializerMethodField()
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = ['id', 'items', 'item_count', 'total_price', 'updated_at']

    def _items(self, obj):
        if not hasattr(self, '_item_cache'):
            self._item_cache = {}
        if obj.pk not in self._item_cache:
            self._item_cache[obj.pk] = list(obj.items.select_related('product'))
        return self._item_cache[obj.pk]

    def get_items(self, obj):
        return CartItemSerializer(self._items(obj), many=True).data

    def get_item_count(self, obj):
        return sum(item.quantity for item in self._items(obj))

    def get_total_price(self, obj):
        return str(cart_total([(item.product, item.quantity) for item in self._items(obj)]))


class CartItemAddSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    quantity = serializers.IntegerField(min_value=1, default=1)


class CartItemUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class OrderItemSerializer(serializers.ModelSerializer):
    pdf_link = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'exam_name', 'subject_name', 'subject_code', 'price',
                  'image', 'quantity', 'pdf_link']

    def get_pdf_link(self, obj):
        return obj.pdf_link


class OrderSerializer(serializers.ModelSerializer):
    order_items = OrderItemSerializer(many=True, source='items')
    user_detail = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = ['id', 'user', 'user_detail', 'order_items', 'total_price', 'payment_method', 'is_paid',
                  'paid_at', 'payment_result', 'status', 'created_at', 'updated_at']
        read_only_fields = ['user', 'status', 'created_at', 'updated_at']

    def get_user_detail(self, obj):
        return {
            'id': obj.user.id,
            'name': obj.user.name,
            'email': obj.user.email,
        }

    def validate_order_items(self, value):
        if not value:
            raise serializers.ValidationError('No order items')
        return value

    @transaction.atomic
    def create(self, validated_data):
        items_data = validated_data.pop('items')
        order = Order.objects.create(status='completed', **validated_data)
        OrderItem.objects.bulk_create([OrderItem(order=order, **item) for item in items_data])
        return order
