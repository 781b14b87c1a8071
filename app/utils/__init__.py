"""Shared utilities for the marketplace backend.

This package contains reusable utilities that are shared across
multiple route and service files.
"""

from app.utils.auth import token_required
from app.utils.dates import utcnow, to_naive_utc, utc_isoformat

__all__ = [
    'token_required',
    'utcnow',
    'to_naive_utc',
    'utc_isoformat',
]
