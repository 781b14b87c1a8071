"""Service for selling listing promotions (featured, urgent, sticky).

Promotion types:
- featured: homepage + search + category visibility
- urgent: priority placement for quick sales
- sticky: kept at the top of listings; also sets the bump flag

Activation is the only place boosts are created. Expiry is handled by
app.services.promotion_state.
"""

import logging
from datetime import timedelta

from app import db
from app.constants.promotions import (
    PROMOTION_PRICING,
    VALID_DURATIONS,
    CURRENCY,
    normalize_promotion_type,
)
from app.models import AdPromotion
from app.utils.dates import utcnow, to_naive_utc

logger = logging.getLogger(__name__)

PROMOTABLE_STATUSES = ('active',)


class PromotionError(ValueError):
    """Invalid promotion request. status_code is the HTTP status to return."""

    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.status_code = status_code


def get_pricing():
    """Return the full pricing table."""
    return PROMOTION_PRICING


def get_account_type(user):
    """Determine account type based on user verification status."""
    if user.business_verification_status in ('approved', 'verified'):
        return 'business'
    if user.individual_verified:
        return 'individual_verified'
    return 'individual'


def _validate(promotion_type, duration_days):
    canonical = normalize_promotion_type(promotion_type)
    if canonical is None:
        raise PromotionError(f'Invalid promotion type: {promotion_type}')

    try:
        duration_days = int(duration_days)
    except (TypeError, ValueError):
        raise PromotionError(f'Invalid duration: {duration_days}')

    if duration_days not in VALID_DURATIONS:
        allowed = ', '.join(str(d) for d in VALID_DURATIONS)
        raise PromotionError(f'Invalid duration: {duration_days}. Must be one of {allowed} days.')

    return canonical, duration_days


def calculate_price(promotion_type, duration_days, user):
    """Calculate promotion price for a user's account type.

    Raises:
        PromotionError: on unknown type or unsupported duration
    """
    promotion_type, duration_days = _validate(promotion_type, duration_days)
    account_type = get_account_type(user)

    return {
        'promotion_type': promotion_type,
        'duration_days': duration_days,
        'account_type': account_type,
        'price': PROMOTION_PRICING[promotion_type][duration_days][account_type],
        'currency': CURRENCY,
    }


def activate_promotion(listing, user, promotion_type, duration_days,
                       payment_reference=None, payment_method='manual', now=None):
    """Apply a purchased promotion to a listing.

    Only one promotion is live per listing: any other active promotion
    record is deactivated and all boost flags are reset before the
    purchased one is set.

    Args:
        listing: Listing being promoted (must belong to user)
        user: Purchasing User
        promotion_type: 'featured', 'urgent', 'sticky' (or 'bump_up')
        duration_days: One of VALID_DURATIONS
        payment_reference: Optional external payment id
        payment_method: How it was paid for
        now: Activation time (defaults to current UTC time)

    Returns:
        The created AdPromotion

    Raises:
        PromotionError: on validation failure (status_code 400/403)
    """
    quote = calculate_price(promotion_type, duration_days, user)
    promotion_type = quote['promotion_type']
    duration_days = quote['duration_days']

    if listing.seller_id != user.id:
        raise PromotionError('You can only promote your own listings', status_code=403)

    if listing.status not in PROMOTABLE_STATUSES:
        raise PromotionError(f'Cannot promote a listing with status {listing.status}')

    starts_at = utcnow() if now is None else to_naive_utc(now)
    expires_at = starts_at + timedelta(days=duration_days)

    try:
        promotion = AdPromotion(
            listing_id=listing.id,
            user_id=user.id,
            promotion_type=promotion_type,
            duration_days=duration_days,
            price_paid=quote['price'],
            account_type=quote['account_type'],
            payment_reference=payment_reference or '',
            payment_method=payment_method or 'manual',
            starts_at=starts_at,
            expires_at=expires_at,
            is_active=True,
        )
        db.session.add(promotion)
        db.session.flush()

        # Deactivate any existing active promotions for this listing
        AdPromotion.query.filter(
            AdPromotion.listing_id == listing.id,
            AdPromotion.is_active == True,  # noqa: E712
            AdPromotion.id != promotion.id,
        ).update({'is_active': False}, synchronize_session=False)

        listing.is_featured = False
        listing.featured_until = None
        listing.is_urgent = False
        listing.urgent_until = None
        listing.is_sticky = False
        listing.sticky_until = None
        listing.is_bumped = False
        listing.bump_expires_at = None

        if promotion_type == 'featured':
            listing.is_featured = True
            listing.featured_until = expires_at
        elif promotion_type == 'urgent':
            listing.is_urgent = True
            listing.urgent_until = expires_at
        elif promotion_type == 'sticky':
            listing.is_sticky = True
            listing.sticky_until = expires_at
            listing.is_bumped = True
            listing.bump_expires_at = expires_at

        listing.promoted_at = starts_at
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        f'Listing {listing.id} promoted as {promotion_type} until '
        f'{expires_at.isoformat()} by user {user.id}'
    )
    return promotion


def list_promotions(user_id, page=1, per_page=50):
    """Get a user's promotion history, newest first."""
    return AdPromotion.query.filter_by(user_id=user_id).order_by(
        AdPromotion.created_at.desc(),
        AdPromotion.id.desc()
    ).paginate(page=page, per_page=min(per_page, 100), error_out=False)


def deactivate_expired_promotions(now=None) -> int:
    """Mark promotion records whose period has ended as inactive.

    Same conditional-update approach as the boost cleanup, so it is safe
    to run from several places at once.

    Returns:
        Number of promotion records deactivated
    """
    now = utcnow() if now is None else to_naive_utc(now)

    try:
        count = AdPromotion.query.filter(
            AdPromotion.is_active == True,  # noqa: E712
            AdPromotion.expires_at < now,
        ).update({'is_active': False}, synchronize_session=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    if count:
        logger.info(f'Deactivated {count} expired promotion record(s)')
    return count
