"""
Serializers for authentication models.

Related files:
    - models.py: User model
    - views.py: Views that use these serializers
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """Serializer for the authenticated user's own record (read only)."""

    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "is_staff",
            "date_joined",
        ]
        read_only_fields = fields
