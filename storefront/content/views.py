import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from storefront.core.permissions import IsAdminRoleOrReadOnly
from storefront.core.utils import create_audit_log
from .models import Ad, Theme, Policy
from .serializers import AdSerializer, ThemeSerializer, PolicySerializer

logger = logging.getLogger(__name__)


# Ad views
@api_view(['GET', 'POST'])
@permission_classes([IsAdminRoleOrReadOnly])
def ad_list_create(request):
    """
    GET: ads active now, highest priority first (?all=true lists every ad for admins)
    POST: create an ad (admin)
    """
    if request.method == 'GET':
        ads = Ad.objects.all()
        show_all = request.query_params.get('all', '').lower() == 'true'
        if not (show_all and request.user.is_authenticated and request.user.is_admin):
            ads = ads.active()
        ads = ads.order_by('-priority', '-created_at')
        return Response({'success': True, 'data': AdSerializer(ads, many=True).data})

    serializer = AdSerializer(data=request.data)
    if serializer.is_valid():
        ad = serializer.save()
        create_audit_log(request=request, action='create', model_name='Ad',
                         object_id=str(ad.id), object_name=ad.title)
        return Response(AdSerializer(ad).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRoleOrReadOnly])
def ad_detail(request, pk):
    ad = get_object_or_404(Ad, pk=pk)

    if request.method == 'GET':
        return Response(AdSerializer(ad).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = AdSerializer(ad, data=request.data, partial=True)
        if serializer.is_valid():
            ad = serializer.save()
            create_audit_log(request=request, action='update', model_name='Ad', object_id=str(ad.id),
                             object_name=ad.title, changes={'fields': sorted(request.data.keys())})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:
        create_audit_log(request=request, action='delete', model_name='Ad',
                         object_id=str(ad.id), object_name=ad.title)
        ad.delete()
        return Response({'message': 'Ad removed'}, status=status.HTTP_200_OK)


# Theme views
@api_view(['GET', 'PUT'])
@permission_classes([IsAdminRoleOrReadOnly])
def theme_detail(request):
    """GET creates the theme with default palettes on first use; PUT replaces given palettes"""
    theme = Theme.get_solo()

    if request.method == 'GET':
        return Response(ThemeSerializer(theme).data)

    serializer = ThemeSerializer(theme, data=request.data, partial=True)
    if serializer.is_valid():
        theme = serializer.save()
        create_audit_log(request=request, action='update', model_name='Theme', object_id=str(theme.id),
                         changes={'palettes': sorted(k for k in ('light', 'dark') if k in request.data)})
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Policy views
@api_view(['GET', 'PUT'])
@permission_classes([IsAdminRoleOrReadOnly])
def policy_detail(request, policy_type):
    valid_types = dict(Policy.POLICY_TYPE_CHOICES)
    if policy_type not in valid_types:
        return Response({'error': 'Policy not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        policy = get_object_or_404(Policy, policy_type=policy_type)
        return Response(PolicySerializer(policy).data)

    policy = Policy.objects.filter(policy_type=policy_type).first()
    serializer = PolicySerializer(policy, data=request.data)
    if serializer.is_valid():
        created = policy is None
        policy = serializer.save(policy_type=policy_type)
        create_audit_log(request=request, action='create' if created else 'update', model_name='Policy',
                         object_id=str(policy.id), object_name=valid_types[policy_type])
        return Response(serializer.data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
