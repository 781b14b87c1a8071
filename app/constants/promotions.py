"""Promotion constants: single source of truth for boost pricing.

Prices are in NPR, keyed by promotion type, duration (days) and the
seller's account type.
"""

PROMOTION_TYPES = ('featured', 'urgent', 'sticky')

# 'bump_up' is sold as sticky (sticky always carries the bump flag)
PROMOTION_TYPE_ALIASES = {
    'bump_up': 'sticky',
}

VALID_DURATIONS = (3, 7, 15)

ACCOUNT_TYPES = ('individual', 'individual_verified', 'business')

CURRENCY = 'NPR'

PROMOTION_PRICING = {
    'featured': {
        3: {'individual': 1000, 'individual_verified': 800, 'business': 600},
        7: {'individual': 2000, 'individual_verified': 1600, 'business': 1200},
        15: {'individual': 3500, 'individual_verified': 2800, 'business': 2100},
    },
    'urgent': {
        3: {'individual': 500, 'individual_verified': 400, 'business': 300},
        7: {'individual': 1000, 'individual_verified': 800, 'business': 600},
        15: {'individual': 1750, 'individual_verified': 1400, 'business': 1050},
    },
    'sticky': {
        3: {'individual': 100, 'individual_verified': 85, 'business': 70},
        7: {'individual': 200, 'individual_verified': 170, 'business': 140},
        15: {'individual': 350, 'individual_verified': 297, 'business': 245},
    },
}


def normalize_promotion_type(promotion_type):
    """Map legacy/alias promotion keys to a canonical type.

    Returns None if the key is unknown.
    """
    if not promotion_type:
        return None
    key = promotion_type.strip().lower()
    key = PROMOTION_TYPE_ALIASES.get(key, key)
    return key if key in PROMOTION_TYPES else None
