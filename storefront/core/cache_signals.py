"""
Cache invalidation signals
Automatically invalidate listing caches when catalog data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import invalidate_products_cache, invalidate_courses_cache

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend cache invalidation signals during bulk operations.
    Invalidate the cache manually after the block.
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete])
def invalidate_catalog_cache(sender, instance, **kwargs):
    """Invalidate product/course listings when they or their reviews change"""
    if is_suspended():
        return

    model_name = sender.__name__

    try:
        if model_name == 'Product':
            invalidate_products_cache()
        elif model_name in ('Course', 'Video'):
            invalidate_courses_cache()
        elif model_name == 'Review':
            # Ratings are denormalized onto the reviewable
            if getattr(instance, 'reviewable_type', None) == 'Course':
                invalidate_courses_cache()
            else:
                invalidate_products_cache()
    except Exception as e:
        logger.warning(f"Error in invalidate_catalog_cache signal: {e}")
