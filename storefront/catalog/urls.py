from django.urls import path
from .views import (
    product_list_create, product_top, product_detail,
    favourite_list_create, favourite_remove
)

urlpatterns = [
    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/top/', product_top, name='product-top'),
    path('products/<int:pk>/', product_detail, name='product-detail'),

    # Favourite endpoints
    path('favourites/', favourite_list_create, name='favourite-list-create'),
    path('favourites/<int:product_id>/', favourite_remove, name='favourite-remove'),
]
