from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal, ROUND_HALF_UP


class Enrollment(models.Model):
    """A user's enrollment in a course, with payment and progress tracking"""
    PAYMENT_STATUS_CHOICES = [
        ('not_required', 'Not required'),
        ('paid', 'Paid'),
        ('pending', 'Pending'),
        ('refunded', 'Refunded'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('paused', 'Paused'),
    ]

    user = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='enrollments')
    course = models.ForeignKey('courses.Course', on_delete=models.CASCADE, related_name='enrollments')
    enrolled_at = models.DateTimeField(default=timezone.now)

    # Payment
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='not_required')
    payment_method = models.CharField(max_length=50, blank=True, default='')
    transaction_id = models.CharField(max_length=100, blank=True, default='')
    price_paid = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'),
                                     validators=[MinValueValidator(Decimal('0.00'))])
    discount_code = models.CharField(max_length=50, blank=True, default='')

    # Progress
    progress = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'),
                                   validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))])
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active', db_index=True)
    last_accessed = models.DateTimeField(default=timezone.now)
    completion_date = models.DateTimeField(null=True, blank=True)
    certificate_url = models.URLField(max_length=500, blank=True, default='')
    notes = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.email} -> {self.course.title}"

    def recalculate_progress(self):
        """
        Completed lessons over total lessons, as a percentage
        Total is the course's video count, or the number of tracked lessons for a course without videos.
        """
        entries = list(self.lessons_progress.all())
        total_lessons = self.course.videos.count() or len(entries)
        completed = sum(1 for entry in entries if entry.completed)
        if total_lessons == 0:
            progress = Decimal('0.00')
        else:
            progress = (Decimal(completed) / Decimal(total_lessons) * 100).quantize(
                Decimal('0.01'), rounding=ROUND_HALF_UP
            )
        self.progress = min(progress, Decimal('100.00'))
        return self.progress

    class Meta:
        db_table = 'enrollments'
        unique_together = [['user', 'course']]
        ordering = ['-enrolled_at']


class LessonProgress(models.Model):
    enrollment = models.ForeignKey(Enrollment, on_delete=models.CASCADE, related_name='lessons_progress')
    lesson_id = models.CharField(max_length=100)
    watched_duration = models.PositiveIntegerField(default=0)
    completed = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.enrollment_id}:{self.lesson_id} ({'done' if self.completed else self.watched_duration})"

    class Meta:
        db_table = 'lesson_progress'
        unique_together = [['enrollment', 'lesson_id']]
        ordering = ['id']
