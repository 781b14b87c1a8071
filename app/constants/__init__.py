"""Shared constants for the application."""

from app.constants.promotions import (
    PROMOTION_TYPES,
    VALID_DURATIONS,
    ACCOUNT_TYPES,
    CURRENCY,
    PROMOTION_PRICING,
    normalize_promotion_type,
)

__all__ = [
    'PROMOTION_TYPES',
    'VALID_DURATIONS',
    'ACCOUNT_TYPES',
    'CURRENCY',
    'PROMOTION_PRICING',
    'normalize_promotion_type',
]
