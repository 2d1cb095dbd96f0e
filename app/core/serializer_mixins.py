"""
Serializer mixins providing reusable functionality for DRF serializers.

This module contains mixin classes that can be combined with
DRF serializers to add specific functionality.

Available Mixins:
    FieldAliasMixin: Accept alternative input keys for canonical fields

Usage:
    from core.serializer_mixins import FieldAliasMixin

    class OrderSerializer(FieldAliasMixin, serializers.Serializer):
        field_aliases = {"paymentType": "kind", "paymentForId": "target_id"}

        kind = serializers.ChoiceField(choices=PaymentKind.choices)
        target_id = serializers.IntegerField(min_value=1)

Note:
    - These are generic infrastructure patterns, not domain-specific
    - For model mixins, see core.model_mixins
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class FieldAliasMixin:
    """
    Map alternative input keys onto canonical serializer fields.

    Clients in the wild send the same payload with different key names
    (camelCase vs snake_case, legacy names). Declare ``field_aliases`` as
    ``{alias: canonical}``; the alias value is used only when the
    canonical key is absent, and alias keys never reach validation.

    Usage:
        class SubmissionSerializer(FieldAliasMixin, serializers.Serializer):
            field_aliases = {"userAnswers": "answers", "testId": "test_id"}
    """

    field_aliases: dict[str, str] = {}

    def normalize_aliases(self, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        if hasattr(data, "dict"):
            # QueryDict: collapse to plain values before remapping
            data = data.dict()
        normalized = dict(data)
        for alias, canonical in self.field_aliases.items():
            if alias not in normalized:
                continue
            value = normalized.pop(alias)
            normalized.setdefault(canonical, value)
        return normalized

    def to_internal_value(self, data: Any) -> Any:
        return super().to_internal_value(self.normalize_aliases(data))  # type: ignore[misc]
