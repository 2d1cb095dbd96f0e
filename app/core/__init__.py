"""
Shared infrastructure for the domain apps.

- core.services: ServiceResult, BaseService
- core.exceptions: BaseApplicationError and its HTTP-mapped subclasses
- core.models / core.model_mixins: BaseModel, UUIDPrimaryKeyMixin
- core.serializer_mixins: FieldAliasMixin
- core.views: health_check, service_error_response

Models are not re-exported here; importing them before the app registry is
ready raises AppRegistryNotReady.
"""

from .exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .services import BaseService, ServiceResult

__all__ = [
    "BaseApplicationError",
    "BaseService",
    "ConflictError",
    "NotFoundError",
    "PermissionDeniedError",
    "ServiceResult",
    "ValidationError",
]
