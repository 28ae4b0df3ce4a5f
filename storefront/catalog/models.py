from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from decimal import Decimal

image_url_validator = RegexValidator(
    regex=r'(?i)^https?://.*\.(png|jpg|jpeg|gif|svg|webp)$',
    message='Please enter a valid image URL.',
)

pdf_url_validator = RegexValidator(
    regex=r'(?i)^https?://.*\.pdf$',
    message='Please enter a valid PDF URL.',
)


class Product(models.Model):
    """Exam-prep product (certificate, notes or exam)"""
    PRODUCT_TYPE_CHOICES = [
        ('certificate', 'Certificate'),
        ('notes', 'Notes'),
        ('exam', 'Exam'),
    ]

    name = models.CharField(max_length=200, db_index=True)
    subject_name = models.CharField(max_length=200)
    subject_code = models.CharField(max_length=50, db_index=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    image = models.URLField(max_length=500, validators=[image_url_validator])
    description = models.TextField()
    product_type = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES, db_index=True)
    pdf_link = models.URLField(max_length=500, validators=[pdf_url_validator])
    ratings = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    number_of_reviews = models.PositiveIntegerField(default=0)
    sale_enabled = models.BooleanField(default=False)
    sale_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True,
                                     validators=[MinValueValidator(Decimal('0.00'))])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.subject_code})"

    def save(self, *args, **kwargs):
        self.product_type = (self.product_type or '').strip().lower()
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']


class Favourite(models.Model):
    """Products a user has saved for later"""
    user = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='favourites')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='favourited_by')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'favourites'
        unique_together = [['user', 'product']]
        ordering = ['-created_at']
