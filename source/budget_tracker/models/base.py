"""This module defines the shared building blocks of the Pydantic models."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

CENTS = Decimal("0.01")
MAX_AMOUNT = Decimal("999999999999.99")

Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
"""A decimal that stays exact in Python and is rendered as a JSON number."""


def quantize(value: Decimal | int | float | str | None) -> Decimal:
    """Rounds a monetary value or percentage to two decimal places.

    Args:
        value: The value to round. None is treated as zero, and floats are
            converted through their string form to avoid binary noise.

    Returns:
        The value as a Decimal with two decimal places, rounded half up.
    """
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class CamelModel(BaseModel):
    """Base model whose JSON field names are camelCase.

    Python attributes stay snake_case and both spellings are accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
