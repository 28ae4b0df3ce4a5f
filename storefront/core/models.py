import hashlib
import hmac
import random
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import F
from django.utils import timezone


class User(AbstractUser):
    """Storefront customer or administrator"""
    ROLE_CHOICES = [
        ('user', 'User'),
        ('admin', 'Admin'),
    ]

    name = models.CharField(max_length=50)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='user', db_index=True)
    phone = models.CharField(max_length=20, blank=True, default='')
    address = models.CharField(max_length=255, blank=True, default='')
    profile_image = models.URLField(blank=True, default='')
    cover_image = models.URLField(blank=True, default='')
    purchases_count = models.PositiveIntegerField(default=0)
    reviews_count = models.PositiveIntegerField(default=0)
    otp_hash = models.CharField(max_length=64, blank=True, default='')
    otp_expires_at = models.DateTimeField(null=True, blank=True)
    otp_attempts = models.PositiveSmallIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    def __str__(self):
        return f"{self.name or self.username} <{self.email}>"

    @property
    def is_admin(self):
        return self.role == 'admin' or self.is_staff or self.is_superuser

    @staticmethod
    def hash_otp(otp):
        return hashlib.sha256(otp.encode()).hexdigest()

    def generate_otp(self):
        """Create a 6-digit OTP, store its hash and return the plain value"""
        otp = str(random.randint(100000, 999999))
        self.otp_hash = self.hash_otp(otp)
        self.otp_expires_at = timezone.now() + timedelta(minutes=settings.OTP_TTL_MINUTES)
        self.otp_attempts = 0
        self.save(update_fields=['otp_hash', 'otp_expires_at', 'otp_attempts', 'updated_at'])
        return otp

    def check_otp(self, otp):
        """
        Validate an OTP against the stored hash

        Each wrong guess is counted; after OTP_MAX_ATTEMPTS the OTP is discarded
        and a new one must be requested.
        """
        if not self.otp_hash or not self.otp_expires_at or not otp:
            return False
        if self.otp_expires_at < timezone.now():
            return False
        if hmac.compare_digest(self.otp_hash, self.hash_otp(str(otp))):
            return True

        self.otp_attempts += 1
        if self.otp_attempts >= settings.OTP_MAX_ATTEMPTS:
            self.clear_otp()
        self.save(update_fields=['otp_hash', 'otp_expires_at', 'otp_attempts', 'updated_at'])
        return False

    def clear_otp(self):
        self.otp_hash = ''
        self.otp_expires_at = None
        self.otp_attempts = 0

    # Counters are updated with F() so concurrent checkouts don't lose increments
    def increment_purchases(self):
        User.objects.filter(pk=self.pk).update(purchases_count=F('purchases_count') + 1)
        self.refresh_from_db(fields=['purchases_count'])

    def decrement_purchases(self):
        User.objects.filter(pk=self.pk, purchases_count__gt=0).update(purchases_count=F('purchases_count') - 1)
        self.refresh_from_db(fields=['purchases_count'])

    def increment_reviews(self):
        User.objects.filter(pk=self.pk).update(reviews_count=F('reviews_count') + 1)
        self.refresh_from_db(fields=['reviews_count'])

    def decrement_reviews(self):
        User.objects.filter(pk=self.pk, reviews_count__gt=0).update(reviews_count=F('reviews_count') - 1)
        self.refresh_from_db(fields=['reviews_count'])

    class Meta:
        db_table = 'users'


class Config(models.Model):
    """Runtime key/value configuration (payment keys etc.)"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    @classmethod
    def get_value(cls, key, default=None):
        entry = cls.objects.filter(key=key).first()
        return entry.value if entry else default

    class Meta:
        db_table = 'configs'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('order_create', 'Order Created'),
        ('order_delete', 'Order Deleted'),
        ('checkout', 'Checkout'),
        ('payment_intent', 'Payment Intent Created'),
        ('review_create', 'Review Created'),
        ('review_update', 'Review Updated'),
        ('review_delete', 'Review Deleted'),
        ('enroll', 'Enrolled'),
        ('unenroll', 'Unenrolled'),
        ('password_change', 'Password Changed'),
        ('password_reset', 'Password Reset'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name, order reference)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_idx'),
            models.Index(fields=['action'], name='audit_logs_action_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_idx'),
        ]
