"""
Test suite for products, favourites and sale-price resolution
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from storefront.catalog.models import Product, Favourite
from storefront.catalog.pricing import (
    has_active_sale, effective_price, discount_percentage, cart_total, to_cents
)
from storefront.core.models import AuditLog
from storefront.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from storefront.reviews.models import Review


class PricingTests(TestCase):
    """Test sale-price resolution rules"""

    def test_no_sale(self):
        item = {'price': '100.00', 'sale_enabled': False, 'sale_price': '80.00'}
        self.assertFalse(has_active_sale(item))
        self.assertEqual(effective_price(item), Decimal('100.00'))
        self.assertEqual(discount_percentage(item), 0)

    def test_active_sale(self):
        item = {'price': '100.00', 'sale_enabled': True, 'sale_price': '75.00'}
        self.assertTrue(has_active_sale(item))
        self.assertEqual(effective_price(item), Decimal('75.00'))
        self.assertEqual(discount_percentage(item), 25)

    def test_sale_not_cheaper_is_ignored(self):
        """Test a sale price at or above the base price does not apply"""
        item = {'price': '50.00', 'sale_enabled': True, 'sale_price': '60.00'}
        self.assertFalse(has_active_sale(item))
        self.assertEqual(effective_price(item), Decimal('50.00'))

    def test_sale_without_price(self):
        item = {'price': '0', 'sale_enabled': True, 'sale_price': '0'}
        self.assertFalse(has_active_sale(item))
        self.assertEqual(discount_percentage(item), 0)

    def test_sale_enabled_without_sale_price(self):
        item = {'price': '20.00', 'sale_enabled': True, 'sale_price': None}
        self.assertEqual(effective_price(item), Decimal('20.00'))

    def test_discount_rounding(self):
        item = {'price': '30.00', 'sale_enabled': True, 'sale_price': '20.00'}
        self.assertEqual(discount_percentage(item), 33)

    def test_cart_total_mixed_lines(self):
        """Test cart total over sale and regular items with quantities"""
        regular = TestDataFactory.create_product(price=Decimal('10.00'))
        on_sale = TestDataFactory.create_product(price=Decimal('40.00'), sale_enabled=True,
                                                 sale_price=Decimal('29.99'))
        total = cart_total([(regular, 3), (on_sale, 2)])
        self.assertEqual(total, Decimal('89.98'))

    def test_cart_total_bare_items(self):
        self.assertEqual(cart_total([{'price': '1.10'}, {'price': '2.20'}]), Decimal('3.30'))
        self.assertEqual(cart_total([]), Decimal('0.00'))

    def test_to_cents(self):
        self.assertEqual(to_cents(Decimal('19.99')), 1999)
        self.assertEqual(to_cents('0.005'), 1)
        self.assertEqual(to_cents(12), 1200)


class ProductModelTests(TestCase):

    def test_product_type_lowercased(self):
        product = TestDataFactory.create_product(product_type='Notes')
        self.assertEqual(product.product_type, 'notes')

    def test_str(self):
        product = TestDataFactory.create_product(name='Algebra Notes')
        self.assertIn('Algebra Notes', str(product))


class ProductAPITests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)
        self.product_data = {
            'name': 'Physics Past Papers',
            'subject_name': 'Physics',
            'subject_code': 'PHY101',
            'price': '25.00',
            'image': 'https://cdn.test.com/img/physics.PNG',
            'description': 'Ten years of papers',
            'product_type': 'Exam',
            'pdf_link': 'https://cdn.test.com/files/physics.pdf',
        }

    def test_create_product(self):
        """Test admin creates a product; type is normalized"""
        response = self.client.post('/api/v1/products/', self.product_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product_type'], 'exam')
        self.assertEqual(response.data['effective_price'], '25.00')
        self.assertTrue(AuditLog.objects.filter(model_name='Product', action='create').exists())

    def test_create_product_invalid_image(self):
        self.product_data['image'] = 'https://cdn.test.com/img/physics.bmp'
        response = self.client.post('/api/v1/products/', self.product_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('image', response.data)

    def test_create_product_invalid_pdf(self):
        self.product_data['pdf_link'] = 'https://cdn.test.com/files/physics.doc'
        response = self.client.post('/api/v1/products/', self.product_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_product_requires_admin(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/products/', self.product_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_products_public(self):
        TestDataFactory.create_product()
        TestDataFactory.create_product()
        response = APIClient().get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_list_products_filters(self):
        """Test search, type and on-sale filters"""
        TestDataFactory.create_product(name='Calculus Exam', product_type='exam')
        TestDataFactory.create_product(name='Calculus Notes', product_type='notes', price=Decimal('20.00'),
                                       sale_enabled=True, sale_price=Decimal('10.00'))
        TestDataFactory.create_product(name='Biology Notes', product_type='notes')

        response = APIClient().get('/api/v1/products/?search=calculus')
        self.assertEqual(len(response.data), 2)

        response = APIClient().get('/api/v1/products/?product_type=NOTES')
        self.assertEqual(len(response.data), 2)

        response = APIClient().get('/api/v1/products/?on_sale=true')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['discount_percentage'], 50)

    def test_list_cache_invalidated_on_change(self):
        """Test a cached listing is refreshed after a product is added"""
        TestDataFactory.create_product()
        self.assertEqual(len(APIClient().get('/api/v1/products/').data), 1)
        TestDataFactory.create_product()
        self.assertEqual(len(APIClient().get('/api/v1/products/').data), 2)

    def test_update_sale_price(self):
        product = TestDataFactory.create_product(price=Decimal('100.00'))
        response = self.client.patch(f'/api/v1/products/{product.id}/',
                                     {'sale_enabled': True, 'sale_price': '60.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['effective_price'], '60.00')
        self.assertEqual(response.data['discount_percentage'], 40)

    def test_ratings_read_only(self):
        product = TestDataFactory.create_product()
        self.client.patch(f'/api/v1/products/{product.id}/', {'ratings': '5.00'}, format='json')
        product.refresh_from_db()
        self.assertEqual(product.ratings, Decimal('0.00'))

    def test_delete_product_removes_reviews(self):
        product = TestDataFactory.create_product()
        TestDataFactory.create_review(self.user, product)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.pk).exists())
        self.assertFalse(Review.objects.filter(reviewable_type='Product', reviewable_id=product.pk).exists())

    def test_get_missing_product(self):
        response = APIClient().get('/api/v1/products/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_top_products(self):
        low = TestDataFactory.create_product(name='Low')
        high = TestDataFactory.create_product(name='High')
        TestDataFactory.create_review(self.user, low, rating=2)
        TestDataFactory.create_review(self.user, high, rating=5)
        response = APIClient().get('/api/v1/products/top/?limit=1')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['id'], high.id)


class FavouriteAPITests(TestCase):
    """Test favourites endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_add_favourite_idempotent(self):
        response = self.client.post('/api/v1/favourites/', {'product': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/favourites/', {'product': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Favourite.objects.filter(user=self.user).count(), 1)

    def test_add_favourite_missing_product(self):
        response = self.client.post('/api/v1/favourites/', {'product': 99999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('product', response.data)

    def test_add_favourite_invalid_product_id(self):
        response = self.client.post('/api/v1/favourites/', {'product': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('product', response.data)

    def test_add_favourite_without_product(self):
        response = self.client.post('/api/v1/favourites/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Favourite.objects.count(), 0)

    def test_list_only_own_favourites(self):
        other = TestDataFactory.create_user()
        Favourite.objects.create(user=other, product=self.product)
        Favourite.objects.create(user=self.user, product=self.product)
        response = self.client.get('/api/v1/favourites/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['product_detail']['id'], self.product.id)

    def test_remove_favourite(self):
        Favourite.objects.create(user=self.user, product=self.product)
        response = self.client.delete(f'/api/v1/favourites/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        response = self.client.delete(f'/api/v1/favourites/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_favourites_require_auth(self):
        response = APIClient().get('/api/v1/favourites/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
