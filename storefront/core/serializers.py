from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import User, Config, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'phone', 'address', 'profile_image', 'cover_image',
                  'purchases_count', 'reviews_count', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['purchases_count', 'reviews_count', 'created_at', 'updated_at']


class ProfileSerializer(UserSerializer):
    """Self-service profile updates: role and counters stay untouched"""

    class Meta(UserSerializer.Meta):
        read_only_fields = ['email', 'role', 'purchases_count', 'reviews_count', 'is_active',
                            'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True, required=False)

    class Meta:
        model = User
        fields = ['name', 'email', 'password', 'password_confirm', 'phone', 'address', 'role']

    def validate(self, attrs):
        confirm = attrs.get('password_confirm')
        if confirm is not None and attrs['password'] != confirm:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm', None)
        password = validated_data.pop('password')
        email = validated_data.pop('email')
        return User.objects.create_user(
            username=email[:150],
            email=email,
            password=password,
            is_active=True,
            **validated_data
        )


class RegisterSerializer(UserCreateSerializer):
    """Public registration never grants the admin role"""

    class Meta(UserCreateSerializer.Meta):
        fields = ['name', 'email', 'password', 'password_confirm', 'phone', 'address']


class ChangePasswordSerializer(serializers.Serializer):
    old_password = serializers.CharField()
    new_password = serializers.CharField(validators=[validate_password])


class ForgotPasswordSerializer(serializers.Serializer):
    email = serializers.EmailField()


class VerifyOTPSerializer(serializers.Serializer):
    email = serializers.EmailField()
    otp = serializers.CharField(max_length=6)


class ResetPasswordSerializer(VerifyOTPSerializer):
    new_password = serializers.CharField(validators=[validate_password])


class ConfigSerializer(serializers.ModelSerializer):
    class Meta:
        model = Config
        fields = ['id', 'key', 'value', 'description', 'updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
