import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from storefront.core.cache_utils import get_cached_list, cache_list, PRODUCTS_LIST_PREFIX, PRODUCTS_LIST_CACHE_TTL
from storefront.core.permissions import IsAdminRoleOrReadOnly
from storefront.core.utils import create_audit_log, parse_positive_int
from .filters import ProductFilter
from .models import Product, Favourite
from .serializers import ProductSerializer, FavouriteSerializer, FavouriteAddSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRoleOrReadOnly])
def product_list_create(request):
    """List products (public, cached) or create a product (admin)"""
    if request.method == 'GET':
        filters_dict = {key: request.query_params.get(key) for key in sorted(request.query_params.keys())}
        cached_data, cache_key = get_cached_list(PRODUCTS_LIST_PREFIX, filters_dict)
        if cached_data is not None:
            return Response(cached_data)

        queryset = Product.objects.all().order_by('-created_at')
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

        data = ProductSerializer(filterset.qs, many=True).data
        cache_list(cache_key, data, PRODUCTS_LIST_CACHE_TTL)
        return Response(data)
    else:  # POST
        serializer = ProductSerializer(data=request.data)
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='Product',
                object_id=str(product.id),
                object_name=product.name,
                changes={'price': str(product.price), 'product_type': product.product_type}
            )
            return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAdminRoleOrReadOnly])
def product_top(request):
    """Best-rated products"""
    limit = parse_positive_int(request.query_params.get('limit'), 5)
    products = Product.objects.order_by('-ratings', '-number_of_reviews', '-created_at')[:limit]
    return Response(ProductSerializer(products, many=True).data)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRoleOrReadOnly])
def product_detail(request, pk):
    """Retrieve (public), update or delete (admin) a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        old_price = str(product.price)
        old_sale = str(product.sale_price) if product.sale_price is not None else None
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Product',
                object_id=str(product.id),
                object_name=product.name,
                changes={
                    'price': {'old': old_price, 'new': str(product.price)},
                    'sale_price': {'old': old_sale, 'new': str(product.sale_price) if product.sale_price is not None else None},
                }
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        # Reviews for the product are removed by storefront.reviews.signals
        create_audit_log(request=request, action='delete', model_name='Product',
                         object_id=str(product.id), object_name=product.name)
        product.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Favourite views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def favourite_list_create(request):
    """List or add the current user's favourite products"""
    if request.method == 'GET':
        favourites = Favourite.objects.filter(user=request.user).select_related('product')
        return Response(FavouriteSerializer(favourites, many=True).data)

    serializer = FavouriteAddSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    product = serializer.validated_data['product']

    favourite, created = Favourite.objects.get_or_create(user=request.user, product=product)
    return Response(
        FavouriteSerializer(favourite).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def favourite_remove(request, product_id):
    """Remove a product from the current user's favourites"""
    deleted, _ = Favourite.objects.filter(user=request.user, product_id=product_id).delete()
    if not deleted:
        return Response({'error': 'Favourite not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(status=status.HTTP_204_NO_CONTENT)
