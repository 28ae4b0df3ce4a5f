"""
Keep denormalized ratings in sync with reviews
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from storefront.catalog.models import Product
from storefront.courses.models import Course
from .models import Review
from .ratings import recalculate_ratings

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Review)
def review_post_save(sender, instance, created, **kwargs):
    """Recompute the reviewable's average after a review is written"""
    recalculate_ratings(instance.reviewable_type, instance.reviewable_id)


@receiver(post_delete, sender=Review)
def review_post_delete(sender, instance, **kwargs):
    """Recompute the reviewable's average after a review is removed"""
    recalculate_ratings(instance.reviewable_type, instance.reviewable_id)


@receiver(post_delete, sender=Product)
def product_post_delete(sender, instance, **kwargs):
    """Remove reviews of a deleted product"""
    deleted, _ = Review.objects.filter(reviewable_type=Review.PRODUCT, reviewable_id=instance.pk).delete()
    if deleted:
        logger.info(f"Removed {deleted} reviews for deleted product {instance.pk}")


@receiver(post_delete, sender=Course)
def course_post_delete(sender, instance, **kwargs):
    """Remove reviews of a deleted course"""
    deleted, _ = Review.objects.filter(reviewable_type=Review.COURSE, reviewable_id=instance.pk).delete()
    if deleted:
        logger.info(f"Removed {deleted} reviews for deleted course {instance.pk}")
