"""
Permission classes for entitlement endpoints.

- IsSelfOrStaff: the ``user_id`` URL kwarg must be the requester, unless staff
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsSelfOrStaff(permissions.BasePermission):
    """
    Allows access when the URL's user_id is the authenticated user.

    Staff may read any user's entitlements.
    """

    message = "You can only view your own purchases."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if user.is_staff:
            return True
        return str(view.kwargs.get("user_id")) == str(user.pk)
