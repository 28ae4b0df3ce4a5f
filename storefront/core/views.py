import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.core.mail import send_mail
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .models import Config, AuditLog
from .permissions import IsAdminRole
from .serializers import (
    UserSerializer, ProfileSerializer, UserCreateSerializer, RegisterSerializer,
    ChangePasswordSerializer, ForgotPasswordSerializer, VerifyOTPSerializer, ResetPasswordSerializer,
    ConfigSerializer, AuditLogSerializer
)
from .throttles import OTPRateThrottle
from .utils import create_audit_log, paginate

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that rejects tokens of deleted users"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def _token_payload(user):
    token = CustomTokenObtainPairSerializer.get_token(user)
    return {
        'user': UserSerializer(user).data,
        'access': str(token.access_token),
        'refresh': str(token),
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = RegisterSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        return Response(_token_payload(user), status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def verify_token(request):
    """Confirm that the bearer token is valid and return its user"""
    return Response({'success': True, 'user': UserSerializer(request.user).data})


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([OTPRateThrottle])
def forgot_password(request):
    """Send a one-time password to the account's email"""
    serializer = ForgotPasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    email = serializer.validated_data['email']
    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user:
        otp = user.generate_otp()
        try:
            send_mail(
                subject='Your password reset code',
                message=f'Your password reset code is {otp}. It expires in {settings.OTP_TTL_MINUTES} minutes.',
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[user.email],
            )
        except Exception as e:
            logger.error(f"Failed to send OTP email to user {user.id}: {str(e)}")
            return Response({'success': False, 'message': 'Email could not be sent'},
                            status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    # Same response whether or not the account exists
    return Response({'success': True, 'message': 'If the email is registered, a code has been sent'})


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([OTPRateThrottle])
def verify_otp(request):
    """Check an OTP without consuming it"""
    serializer = VerifyOTPSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = User.objects.filter(email__iexact=serializer.validated_data['email']).first()
    if not user or not user.check_otp(serializer.validated_data['otp']):
        return Response({'success': False, 'message': 'Invalid or expired OTP'},
                        status=status.HTTP_400_BAD_REQUEST)
    return Response({'success': True, 'message': 'OTP verified'})


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([OTPRateThrottle])
def reset_password(request):
    """Set a new password using a valid OTP"""
    serializer = ResetPasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = User.objects.filter(email__iexact=serializer.validated_data['email']).first()
    if not user or not user.check_otp(serializer.validated_data['otp']):
        return Response({'success': False, 'message': 'Invalid or expired OTP'},
                        status=status.HTTP_400_BAD_REQUEST)

    user.set_password(serializer.validated_data['new_password'])
    user.clear_otp()
    user.save()

    create_audit_log(request=request, action='password_reset', model_name='User',
                     object_id=user.id, object_name=user.email, user=user)
    return Response({'success': True, 'message': 'Password has been reset'})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Retrieve, update or delete the current user's profile"""
    user = request.user

    if request.method == 'GET':
        return Response(UserSerializer(user).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProfileSerializer(user, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        # Reviews, orders, cart and enrollments cascade with the user
        user_id = user.id
        user.delete()
        logger.info(f"User {user_id} deleted their account")
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """Change password after checking the current one"""
    serializer = ChangePasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = request.user
    if not user.check_password(serializer.validated_data['old_password']):
        return Response({'error': 'Old password is incorrect'}, status=status.HTTP_400_BAD_REQUEST)

    user.set_password(serializer.validated_data['new_password'])
    user.save()
    create_audit_log(request=request, action='password_change', model_name='User',
                     object_id=user.id, object_name=user.email)
    return Response({'success': True, 'message': 'Password updated'})


# User views (admin)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.all().order_by('-created_at')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method == 'PUT':
        serializer = UserSerializer(user, data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    elif request.method == 'PATCH':
        serializer = UserSerializer(user, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='User',
                         object_id=user.id, object_name=user.email)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Config views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def config_list_create(request):
    """List all config entries or create a new one"""
    if request.method == 'GET':
        configs = Config.objects.all().order_by('key')
        serializer = ConfigSerializer(configs, many=True)
        return Response(serializer.data)
    else:
        serializer = ConfigSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def config_detail(request, pk):
    """Retrieve, update or delete a config entry"""
    config = get_object_or_404(Config, pk=pk)

    if request.method == 'GET':
        serializer = ConfigSerializer(config)
        return Response(serializer.data)
    elif request.method == 'PUT':
        serializer = ConfigSerializer(config, data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    elif request.method == 'PATCH':
        serializer = ConfigSerializer(config, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        config.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([AllowAny])
def stripe_publishable_key(request):
    """Publishable payment key for the mobile payment sheet"""
    value = Config.get_value('stripePublishableKey')
    if not value:
        return Response({'error': 'Stripe configuration not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response({'publishableKey': value})


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user').all()

    action = request.query_params.get('action')
    model_name = request.query_params.get('model_name')
    user_id = request.query_params.get('user')

    if action:
        queryset = queryset.filter(action=action)
    if model_name:
        queryset = queryset.filter(model_name=model_name)
    if user_id:
        queryset = queryset.filter(user_id=user_id)

    return Response(paginate(request, queryset.order_by('-created_at'), AuditLogSerializer))
