from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from decimal import Decimal

from storefront.catalog.models import image_url_validator

video_url_validator = RegexValidator(
    regex=r'(?i)^https?://.*\.(mp4|webm|ogg)$',
    message='Please enter a valid video URL.',
)


class Course(models.Model):
    """AI course sold in the app, with ordered lesson videos"""
    DIFFICULTY_CHOICES = [
        ('Beginner', 'Beginner'),
        ('Intermediate', 'Intermediate'),
        ('Advanced', 'Advanced'),
    ]

    title = models.CharField(max_length=200, db_index=True)
    description = models.TextField()
    instructor = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))])
    image = models.URLField(max_length=500, validators=[image_url_validator])
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))
    reviews = models.PositiveIntegerField(default=0)
    is_featured = models.BooleanField(default=False, db_index=True)
    short_video_link = models.URLField(max_length=500, blank=True, default='', validators=[video_url_validator])
    difficulty_level = models.CharField(max_length=20, choices=DIFFICULTY_CHOICES, default='Beginner')
    language = models.CharField(max_length=50, default='English')
    topics = models.JSONField(default=list, blank=True)
    total_duration = models.PositiveIntegerField(default=0)
    number_of_lectures = models.PositiveIntegerField(default=0)
    category = models.CharField(max_length=100, blank=True, default='')
    tags = models.JSONField(default=list, blank=True)
    requirements = models.JSONField(default=list, blank=True)
    what_you_will_learn = models.JSONField(default=list, blank=True)
    sale_enabled = models.BooleanField(default=False)
    sale_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True,
                                     validators=[MinValueValidator(Decimal('0.00'))])
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'courses'
        ordering = ['-created_at']


class Video(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='videos')
    title = models.CharField(max_length=200)
    url = models.URLField(max_length=500, validators=[video_url_validator])
    cover_image = models.URLField(max_length=500, blank=True, default='', validators=[image_url_validator])
    description = models.TextField(blank=True, default='')
    duration = models.PositiveIntegerField(default=0)
    # Lower number plays first
    priority = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.course.title} - {self.title}"

    class Meta:
        db_table = 'videos'
        ordering = ['priority', 'id']
