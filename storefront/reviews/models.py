from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class Review(models.Model):
    """
    Review of a product or a course
    The target is addressed by (reviewable_type, reviewable_id) rather than a foreign key,
    so one table serves both catalogs.
    """
    PRODUCT = 'Product'
    COURSE = 'Course'
    REVIEWABLE_TYPE_CHOICES = [
        (PRODUCT, 'Product'),
        (COURSE, 'Course'),
    ]

    user = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='reviews')
    reviewable_type = models.CharField(max_length=20, choices=REVIEWABLE_TYPE_CHOICES)
    reviewable_id = models.PositiveIntegerField()
    name = models.CharField(max_length=150)
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} on {self.reviewable_type} #{self.reviewable_id}: {self.rating}"

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']
        unique_together = [['user', 'reviewable_type', 'reviewable_id']]
        indexes = [
            models.Index(fields=['reviewable_type', 'reviewable_id'], name='reviews_target_idx'),
        ]
