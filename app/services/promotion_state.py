"""Promotion state manager for listing boosts.

Listings carry three independent, time-bounded boosts (featured, urgent,
sticky) plus a bump flag that rides on sticky. This module:

1. Expires stale boosts with conditional bulk updates
   (`flag = true AND until < now`), one per boost, dispatched concurrently.
   The predicate makes the update safe to race: a second run over the same
   rows matches nothing, so request-time and scheduled callers need no lock.
2. Computes the display tier and sort key used to order listings.

Call `expire_boosts_safely()` (or `cleanup_expired_boosts()`) before any
query that sorts or filters by boost status.
"""

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from enum import IntEnum

from flask import current_app
from sqlalchemy import and_, case, or_

from app import db
from app.models import Listing
from app.utils.dates import utcnow, to_naive_utc

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1)
_MISSING = object()


class PromotionStateError(Exception):
    """Base error for the promotion state manager."""


class StorageUnavailable(PromotionStateError):
    """Every cleanup pass failed; the listings store could not be reached."""


class InvalidListing(PromotionStateError, ValueError):
    """A record passed for ranking is missing required boost fields."""


class BoostTier(IntEnum):
    """Display priority bucket. Lower sorts first."""

    FEATURED = 0
    URGENT = 1
    STICKY = 2
    NONE = 3

    @property
    def label(self):
        return self.name.lower()


# boost name -> (flag field, expiry field, extra fields cleared with it)
BOOSTS = {
    'featured': ('is_featured', 'featured_until', {}),
    'urgent': ('is_urgent', 'urgent_until', {}),
    'sticky': ('is_sticky', 'sticky_until', {'is_bumped': False, 'bump_expires_at': None}),
}

# Highest priority first
_TIER_ORDER = (
    (BoostTier.FEATURED, 'is_featured', 'featured_until'),
    (BoostTier.URGENT, 'is_urgent', 'urgent_until'),
    (BoostTier.STICKY, 'is_sticky', 'sticky_until'),
)


def expiry_statement(boost, now):
    """
    Build the conditional bulk update that clears one expired boost.

    Matches rows whose flag is set and whose expiry is past (or missing),
    so the statement is idempotent.
    """
    flag_name, until_name, extra = BOOSTS[boost]
    table = Listing.__table__
    flag = table.c[flag_name]
    until = table.c[until_name]

    values = {flag_name: False, until_name: None}
    values.update(extra)

    return (
        table.update()
        .where(flag == True, or_(until < now, until.is_(None)))  # noqa: E712
        .values(**values)
    )


class PromotionStateManager:
    """Keeps boost flags consistent with their expiry timestamps."""

    def __init__(self, engine, max_workers=3):
        self.engine = engine
        self.max_workers = max(1, int(max_workers))

    def _clear_expired(self, boost, now):
        """Run one cleanup pass in its own transaction. Returns rows cleared."""
        with self.engine.begin() as conn:
            result = conn.execute(expiry_statement(boost, now))
        return result.rowcount

    def cleanup_expired_boosts(self, now=None):
        """
        Clear every expired featured, urgent and sticky boost.

        The three passes are independent and run concurrently; this call
        returns once all of them have settled. A failed pass is logged and
        does not stop the others.

        Args:
            now: Reference time (datetime or ISO string). Defaults to the
                 current UTC time.

        Returns:
            dict: rows cleared per boost, e.g. {'featured': 2, 'urgent': 0,
                  'sticky': 1}. A failed pass maps to None.

        Raises:
            StorageUnavailable: if every pass failed
        """
        now = utcnow() if now is None else to_naive_utc(now)

        results = {}
        last_error = None

        with ThreadPoolExecutor(max_workers=self.max_workers,
                                thread_name_prefix='boost-cleanup') as pool:
            futures = {
                boost: pool.submit(self._clear_expired, boost, now)
                for boost in BOOSTS
            }
            for boost, future in futures.items():
                try:
                    results[boost] = future.result()
                except Exception as e:
                    logger.warning(f"Boost cleanup pass '{boost}' failed: {e}")
                    results[boost] = None
                    last_error = e

        if all(count is None for count in results.values()):
            raise StorageUnavailable(f'All boost cleanup passes failed: {last_error}') from last_error

        cleared = sum(count for count in results.values() if count)
        if cleared:
            logger.info(f'Expired {cleared} boost(s) at {now.isoformat()}: {results}')
        else:
            logger.debug(f'No expired boosts at {now.isoformat()}')

        return results


def get_promotion_manager():
    """Build a manager bound to the app's database engine."""
    return PromotionStateManager(
        db.engine,
        max_workers=current_app.config.get('BOOST_CLEANUP_WORKERS', 3),
    )


def expire_boosts_safely(now=None):
    """
    Request-time cleanup that never fails the surrounding read.

    Returns the per-boost counts, or None when the store was unreachable
    (stale boost flags are served until the next successful pass).

    Call before touching the session in a request: when rows were cleared,
    loaded instances are expired so they reload the cleared flags.
    """
    try:
        results = get_promotion_manager().cleanup_expired_boosts(now)
    except StorageUnavailable as e:
        logger.warning(f'Boost cleanup skipped, serving possibly stale boost flags: {e}')
        return None

    if any(results.values()):
        db.session.expire_all()
    return results


# ============ Ranking ============

def _field(listing, name):
    if isinstance(listing, Mapping):
        value = listing.get(name, _MISSING)
    else:
        value = getattr(listing, name, _MISSING)
    if value is _MISSING:
        raise InvalidListing(f"Listing is missing required field '{name}'")
    return value


def _timestamp(listing, name):
    try:
        return to_naive_utc(_field(listing, name))
    except ValueError as e:
        if isinstance(e, InvalidListing):
            raise
        raise InvalidListing(f"Listing field '{name}' is not a valid timestamp") from e


def is_boost_active(listing, flag_name, until_name, now):
    """A boost is active iff its flag is set and its expiry is strictly after now."""
    flag = _field(listing, flag_name)
    until = _timestamp(listing, until_name)
    return bool(flag) and until is not None and until > now


def active_tier(listing, now=None):
    """Return the BoostTier of the highest-priority active boost."""
    now = utcnow() if now is None else to_naive_utc(now)

    # Every boost is checked so a malformed record fails whatever its tier
    active = [
        tier for tier, flag_name, until_name in _TIER_ORDER
        if is_boost_active(listing, flag_name, until_name, now)
    ]
    return active[0] if active else BoostTier.NONE


def rank_key(listing, now=None):
    """
    Sort key for display order: tier ascending, then newest first.

    Works on Listing instances and on plain dicts (e.g. to_dict() output).
    Activity is time-dependent, so evaluate on every read.

    Raises:
        InvalidListing: if a boost field or created_at is missing/invalid
    """
    tier = active_tier(listing, now)
    created_at = _timestamp(listing, 'created_at')
    if created_at is None:
        raise InvalidListing("Listing is missing required field 'created_at'")
    return (int(tier), -(created_at - _EPOCH).total_seconds())


def rank_listings(listings, now=None):
    """Return listings ordered by rank_key."""
    now = utcnow() if now is None else to_naive_utc(now)
    return sorted(listings, key=lambda listing: rank_key(listing, now))


def tier_expression(now=None):
    """SQL CASE expression computing the same tier as active_tier()."""
    now = utcnow() if now is None else to_naive_utc(now)
    return case(
        (and_(Listing.is_featured == True, Listing.featured_until > now), int(BoostTier.FEATURED)),  # noqa: E712
        (and_(Listing.is_urgent == True, Listing.urgent_until > now), int(BoostTier.URGENT)),  # noqa: E712
        (and_(Listing.is_sticky == True, Listing.sticky_until > now), int(BoostTier.STICKY)),  # noqa: E712
        else_=int(BoostTier.NONE),
    )
