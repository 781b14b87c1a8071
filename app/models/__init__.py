"""Database models for the marketplace application."""

from .user import User
from .listing import Listing
from .ad_promotion import AdPromotion

__all__ = ['User', 'Listing', 'AdPromotion']
