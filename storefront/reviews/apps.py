from django.apps import AppConfig


class ReviewsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'storefront.reviews'

    def ready(self):
        from . import signals  # noqa: F401
