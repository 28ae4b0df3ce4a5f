import django_filters
from django.db.models import Q, F

from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Filter for the public product listing"""

    # Basic search - name, subject name, subject code
    search = django_filters.CharFilter(method='filter_search', label='Search')

    product_type = django_filters.CharFilter(field_name='product_type', lookup_expr='iexact')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')
    on_sale = django_filters.CharFilter(method='filter_on_sale', label='On Sale')

    class Meta:
        model = Product
        fields = ['search', 'product_type', 'min_price', 'max_price', 'on_sale']

    def filter_search(self, queryset, name, value):
        """Every word must appear in the name, subject name or subject code"""
        if not value or not value.strip():
            return queryset

        for word in value.split():
            queryset = queryset.filter(
                Q(name__icontains=word) |
                Q(subject_name__icontains=word) |
                Q(subject_code__icontains=word)
            )
        return queryset

    def filter_on_sale(self, queryset, name, value):
        """Products whose sale price actually applies (see pricing.has_active_sale)"""
        active_sale = Q(sale_enabled=True, sale_price__isnull=False, price__gt=0, sale_price__lt=F('price'))
        if str(value).lower() in ('true', '1', 'yes'):
            return queryset.filter(active_sale)
        if str(value).lower() in ('false', '0', 'no'):
            return queryset.exclude(active_sale)
        return queryset
