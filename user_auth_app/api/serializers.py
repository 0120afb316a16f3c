"""Auth API serializers.

Registration creates a buyer account after Django's password validators have
run; login accepts either the username or the email address.
"""

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers
from rest_framework.validators import UniqueValidator

User = get_user_model()


class RegistrationSerializer(serializers.ModelSerializer):
    username = serializers.CharField(
        max_length=150,
        validators=[UniqueValidator(User.objects.all(), _("Username already taken."), lookup="iexact")],
    )
    email = serializers.EmailField(
        validators=[UniqueValidator(User.objects.all(), _("Email already in use."), lookup="iexact")],
    )
    password = serializers.CharField(write_only=True, min_length=8, style={"input_type": "password"})
    repeated_password = serializers.CharField(write_only=True, style={"input_type": "password"})

    class Meta:
        model = User
        fields = ["username", "email", "password", "repeated_password", "first_name", "last_name"]
        extra_kwargs = {
            "first_name": {"required": False},
            "last_name": {"required": False},
        }

    def validate_email(self, value):
        return value.lower()

    def validate(self, attrs):
        password = attrs["password"]
        if password != attrs.pop("repeated_password"):
            raise serializers.ValidationError({"repeated_password": _("Passwords do not match.")})
        candidate = User(username=attrs["username"], email=attrs["email"])
        try:
            validate_password(password, user=candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({"password": list(exc.messages)})
        return attrs

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


def _username_for(login):
    if "@" not in login:
        return login
    account = User.objects.filter(email__iexact=login).only("username").first()
    return account.get_username() if account else login


class LoginSerializer(serializers.Serializer):
    """Resolve the credentials to an active user and expose it as `user`."""

    username = serializers.CharField()
    password = serializers.CharField(write_only=True, style={"input_type": "password"})

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get("request"),
            username=_username_for(attrs["username"]),
            password=attrs["password"],
        )
        if user is None:
            raise serializers.ValidationError({"detail": _("Invalid Credentials")})
        attrs["user"] = user
        return attrs
