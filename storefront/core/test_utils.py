"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from storefront.core.models import Config
from storefront.catalog.models import Product
from storefront.courses.models import Course, Video
from storefront.reviews.models import Review
from storefront.orders.models import Cart, CartItem, Order, OrderItem
from storefront.enrollments.models import Enrollment
from storefront.content.models import Ad, Policy
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(email=None, name=None, password='testpass123', role='user', **extra):
        """Create a test user"""
        if not email:
            email = f'user_{TestDataFactory.random_string(6).lower()}@test.com'
        return User.objects.create_user(
            username=email,
            email=email,
            password=password,
            name=name or 'Test User',
            role=role,
            **extra
        )

    @staticmethod
    def create_admin(email=None, password='testpass123'):
        """Create a user with the admin role"""
        return TestDataFactory.create_user(email=email, name='Admin User', password=password, role='admin')

    @staticmethod
    def create_product(name=None, price=Decimal('100.00'), product_type='exam', sale_enabled=False, sale_price=None):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        return Product.objects.create(
            name=name,
            subject_name='Mathematics',
            subject_code=f'MATH{random.randint(100, 999)}',
            price=price,
            image='https://cdn.test.com/images/product.png',
            description=f'Test product {name}',
            product_type=product_type,
            pdf_link='https://cdn.test.com/files/product.pdf',
            sale_enabled=sale_enabled,
            sale_price=sale_price
        )

    @staticmethod
    def create_course(title=None, price=Decimal('50.00'), is_featured=False, sale_enabled=False, sale_price=None):
        """Create a test course"""
        if not title:
            title = f'Course_{TestDataFactory.random_string(6)}'
        return Course.objects.create(
            title=title,
            description=f'Learn {title}',
            instructor='Jane Instructor',
            price=price,
            image='https://cdn.test.com/images/course.jpg',
            is_featured=is_featured,
            short_video_link='https://cdn.test.com/videos/reel.mp4' if is_featured else '',
            sale_enabled=sale_enabled,
            sale_price=sale_price
        )

    @staticmethod
    def create_video(course, title=None, priority=0):
        """Create a test video for a course"""
        return Video.objects.create(
            course=course,
            title=title or f'Lesson_{TestDataFactory.random_string(4)}',
            url=f'https://cdn.test.com/videos/{TestDataFactory.random_string(8)}.mp4',
            priority=priority,
            duration=300
        )

    @staticmethod
    def create_review(user, reviewable, rating=5, comment='Great material'):
        """Create a test review on a product or course"""
        reviewable_type = Review.COURSE if isinstance(reviewable, Course) else Review.PRODUCT
        return Review.objects.create(
            user=user,
            reviewable_type=reviewable_type,
            reviewable_id=reviewable.pk,
            name=user.name,
            rating=rating,
            comment=comment
        )

    @staticmethod
    def create_cart_item(user, product, quantity=1):
        """Add a product to the user's cart"""
        cart, _ = Cart.objects.get_or_create(user=user)
        return CartItem.objects.create(cart=cart, product=product, quantity=quantity)

    @staticmethod
    def create_order(user, products=None, is_paid=True):
        """Create a completed order with one line per product"""
        products = products or [TestDataFactory.create_product()]
        order = Order.objects.create(
            user=user,
            total_price=sum((p.price for p in products), Decimal('0.00')),
            payment_method='card',
            is_paid=is_paid,
            status='completed'
        )
        for product in products:
            OrderItem.objects.create(
                order=order,
                product=product,
                exam_name=product.name,
                subject_name=product.subject_name,
                subject_code=product.subject_code,
                price=product.price,
                image=product.image,
                quantity=1
            )
        return order

    @staticmethod
    def create_enrollment(user, course, **extra):
        """Enroll a user in a course"""
        return Enrollment.objects.create(user=user, course=course, price_paid=course.price, **extra)

    @staticmethod
    def create_config(key, value, description=''):
        """Create a runtime config entry"""
        return Config.objects.create(key=key, value=value, description=description)

    @staticmethod
    def create_ad(title=None, priority=0, start_date=None, end_date=None, template_id='promo'):
        """Create a test ad"""
        return Ad.objects.create(
            image='https://cdn.test.com/images/ad.png',
            title=title or f'Ad_{TestDataFactory.random_string(6)}',
            subtitle='Limited time',
            category='Promotion',
            template_id=template_id,
            priority=priority,
            start_date=start_date,
            end_date=end_date
        )

    @staticmethod
    def create_policy(policy_type='privacy', content='We respect your privacy.'):
        """Create a policy document"""
        return Policy.objects.create(policy_type=policy_type, content=content)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
