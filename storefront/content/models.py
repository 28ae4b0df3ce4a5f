import copy

from django.db import models
from django.db.models import Q
from django.utils import timezone

DEFAULT_LIGHT_PALETTE = {
    'backgroundHeaderColor': '#0033CC',
    'backgroundColor': '#FFFFFF',
    'primaryColor': '#0033CC',
    'secondaryColor': '#001A80',
    'textColor': '#000000',
    'headerBackground': ['#0033CC', '#7db6ff'],
    'placeholderTextColor': '#BDBDBD',
    'cardBackground': '#FFFFFF',
    'cardTextColor': '#0033CC',
    'overlayColor': 'rgba(0, 51, 204, 0.8)',
    'tabBarActiveTintColor': '#0033CC',
    'tabBarInactiveTintColor': 'gray',
    'statusBarStyle': 'light-content',
    'switchTrackColorFalse': '#BDBDBD',
    'switchTrackColorTrue': '#80AFFF',
    'switchThumbColor': '#FFFFFF',
    'switchIosBackgroundColor': '#BDBDBD',
    'borderColor': '#80AFFF',
    'priceColor': '#E91E63',
    'headerTextColor': '#FFFFFF',
    'arrowColor': '#FFFFFF',
}

DEFAULT_DARK_PALETTE = {
    'backgroundHeaderColor': '#002A9E',
    'backgroundColor': '#121212',
    'primaryColor': '#0033CC',
    'secondaryColor': '#001A80',
    'textColor': '#E0E0E0',
    'headerBackground': ['#1E1E1E', '#002A9E'],
    'placeholderTextColor': '#A5A5A5',
    'cardBackground': '#1E1E1E',
    'cardTextColor': '#0088CC',
    'overlayColor': 'rgba(0, 51, 204, 0.75)',
    'tabBarActiveTintColor': '#0033CC',
    'tabBarInactiveTintColor': '#757575',
    'statusBarStyle': 'light-content',
    'switchTrackColorFalse': '#616161',
    'switchTrackColorTrue': '#3399FF',
    'switchThumbColor': '#FFFFFF',
    'switchIosBackgroundColor': '#424242',
    'borderColor': '#CCD6FF',
    'priceColor': '#FF4081',
    'headerTextColor': '#E0E0E0',
    'arrowColor': '#0033CC',
}

# Keys every palette must define
PALETTE_KEYS = frozenset(DEFAULT_LIGHT_PALETTE)


def default_light_palette():
    return copy.deepcopy(DEFAULT_LIGHT_PALETTE)


def default_dark_palette():
    return copy.deepcopy(DEFAULT_DARK_PALETTE)


class AdQuerySet(models.QuerySet):
    def active(self, at=None):
        """Ads whose date window contains `at` (open-ended when a bound is unset)"""
        at = at or timezone.now()
        return self.filter(
            Q(start_date__isnull=True) | Q(start_date__lte=at),
            Q(end_date__isnull=True) | Q(end_date__gte=at),
        )


class Ad(models.Model):
    """Promotional card shown in the app's ad carousel"""
    TEMPLATE_CHOICES = [
        ('promo', 'Promo'),
        ('newCourse', 'New course'),
        ('sale', 'Sale'),
        ('event', 'Event'),
    ]
    PROD_TYPE_CHOICES = [
        ('Product', 'Product'),
        ('Course', 'Course'),
    ]

    image = models.URLField(max_length=500)
    title = models.CharField(max_length=200)
    subtitle = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    link = models.URLField(max_length=500, blank=True, default='')
    category = models.CharField(max_length=100)
    template_id = models.CharField(max_length=20, choices=TEMPLATE_CHOICES, default='newCourse')
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    target_audience = models.CharField(max_length=100, blank=True, default='')
    cta_text = models.CharField(max_length=100, blank=True, default='')
    priority = models.IntegerField(default=0, db_index=True)
    card_design = models.CharField(max_length=50, default='basic')

    # promo
    promo_code = models.CharField(max_length=50, blank=True, default='')
    limited_offer = models.BooleanField(default=False)
    # newCourse
    instructor = models.CharField(max_length=200, blank=True, default='')
    course_info = models.CharField(max_length=255, blank=True, default='')
    rating = models.DecimalField(max_digits=3, decimal_places=2, null=True, blank=True)
    # sale
    original_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    sale_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    discount_percentage = models.PositiveSmallIntegerField(null=True, blank=True)
    sale_ends = models.DateTimeField(null=True, blank=True)
    # event
    event_date = models.DateTimeField(null=True, blank=True)
    event_location = models.CharField(max_length=255, blank=True, default='')

    custom_styles = models.JSONField(default=dict, blank=True)
    ad_prod_type = models.CharField(max_length=10, choices=PROD_TYPE_CHOICES, default='Product')
    ad_prod_id = models.CharField(max_length=50, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AdQuerySet.as_manager()

    def __str__(self):
        return f"{self.title} ({self.template_id})"

    class Meta:
        db_table = 'ads'
        ordering = ['-priority', '-created_at']


class Theme(models.Model):
    """App colour palettes; a single row is used"""
    light = models.JSONField(default=default_light_palette)
    dark = models.JSONField(default=default_dark_palette)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @classmethod
    def get_solo(cls):
        theme = cls.objects.order_by('id').first()
        if theme is None:
            theme = cls.objects.create()
        return theme

    def __str__(self):
        return f"Theme (updated {self.updated_at:%Y-%m-%d})"

    class Meta:
        db_table = 'themes'


class Policy(models.Model):
    POLICY_TYPE_CHOICES = [
        ('privacy', 'Privacy policy'),
        ('terms', 'Terms of service'),
    ]

    policy_type = models.CharField(max_length=20, choices=POLICY_TYPE_CHOICES, unique=True)
    content = models.TextField()
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.get_policy_type_display()

    class Meta:
        db_table = 'policies'
        verbose_name_plural = 'policies'
