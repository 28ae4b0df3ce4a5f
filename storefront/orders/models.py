from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal

from storefront.catalog.pricing import cart_total


class Cart(models.Model):
    """Server-side shopping cart, one per user"""
    user = models.OneToOneField('core.User', on_delete=models.CASCADE, related_name='cart')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Cart of {self.user.email}"

    @property
    def total_price(self):
        """Total with sale-price resolution"""
        return cart_total([(item.product, item.quantity) for item in self.items.select_related('product')])

    class Meta:
        db_table = 'carts'


class CartItem(models.Model):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='cart_items')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    added_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.product.name} x{self.quantity}"

    class Meta:
        db_table = 'cart_items'
        unique_together = [['cart', 'product']]
        ordering = ['added_at', 'id']


class Order(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    user = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='orders')
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'),
                                      validators=[MinValueValidator(Decimal('0.00'))])
    payment_method = models.CharField(max_length=50, blank=True, default='')
    is_paid = models.BooleanField(default=False)
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_result = models.JSONField(default=dict, blank=True)
    # Provider intent that paid this order; an intent settles at most one order
    payment_intent_id = models.CharField(max_length=255, null=True, blank=True, unique=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='completed', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Order #{self.id} - {self.user.email}"

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']


class OrderItem(models.Model):
    """Snapshot of a purchased line; survives product deletion"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='order_items')
    exam_name = models.CharField(max_length=200)
    subject_name = models.CharField(max_length=200, blank=True, default='')
    subject_code = models.CharField(max_length=50, blank=True, default='')
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    image = models.URLField(max_length=500, blank=True, default='')
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    def __str__(self):
        return f"{self.exam_name} x{self.quantity}"

    @property
    def pdf_link(self):
        return self.product.pdf_link if self.product else None

    class Meta:
        db_table = 'order_items'
