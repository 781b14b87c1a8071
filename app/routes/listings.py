"""Listing routes for classifieds buy/sell marketplace.

Every read expires stale boosts first so that an expired promotion is
never ordered or rendered as active.
"""

from flask import Blueprint, request, jsonify
from app import db
from app.models import Listing, User
from app.services.promotion_state import (
    BoostTier,
    expire_boosts_safely,
    rank_listings,
    tier_expression,
)
from app.utils.dates import utcnow

listings_bp = Blueprint('listings', __name__)

SORT_OPTIONS = ('newest', 'price_low', 'price_high', 'popular')


@listings_bp.route('', methods=['GET'])
def get_listings():
    """Get listings with filtering and pagination.

    Query params:
    - page, per_page: Pagination (per_page max 100)
    - category: Filter by category
    - status: Listing status (default: active)
    - sort: 'newest' (promoted first) | 'price_low' | 'price_high' | 'popular'
    - boosted_only: Only listings with an active boost
    """
    try:
        page = request.args.get('page', 1, type=int)
        per_page = min(request.args.get('per_page', 20, type=int), 100)
        category = request.args.get('category')
        status = request.args.get('status', 'active')
        sort = request.args.get('sort', 'newest')
        boosted_only = request.args.get('boosted_only', 'false').lower() == 'true'

        if sort not in SORT_OPTIONS:
            return jsonify({'error': f'Invalid sort. Must be one of: {", ".join(SORT_OPTIONS)}'}), 400

        now = utcnow()
        expire_boosts_safely(now)

        tier = tier_expression(now)
        query = Listing.query.filter_by(status=status)

        if category:
            query = query.filter_by(category=category)

        if boosted_only:
            query = query.filter(tier < int(BoostTier.NONE))

        if sort == 'price_low':
            query = query.order_by(Listing.price.asc(), Listing.id.desc())
        elif sort == 'price_high':
            query = query.order_by(Listing.price.desc(), Listing.id.desc())
        elif sort == 'popular':
            query = query.order_by(Listing.views_count.desc(), Listing.id.desc())
        else:
            # Promoted first (featured, urgent, sticky), then newest
            query = query.order_by(tier.asc(), Listing.created_at.desc(), Listing.id.desc())

        listings = query.paginate(page=page, per_page=per_page, error_out=False)

        return jsonify({
            'listings': [listing.to_dict(now) for listing in listings.items],
            'total': listings.total,
            'pages': listings.pages,
            'current_page': page
        }), 200
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@listings_bp.route('/<int:listing_id>', methods=['GET'])
def get_listing(listing_id):
    """Get a specific listing by ID."""
    try:
        now = utcnow()
        expire_boosts_safely(now)

        listing = Listing.query.get(listing_id)
        if not listing:
            return jsonify({'error': 'Listing not found'}), 404

        listing.views_count += 1
        db.session.commit()

        return jsonify(listing.to_dict(now)), 200
    except Exception as e:
        db.session.rollback()
        return jsonify({'error': str(e)}), 500


@listings_bp.route('/seller/<int:user_id>', methods=['GET'])
def get_seller_listings(user_id):
    """Get a seller's active listings, promoted first then newest."""
    try:
        seller = User.query.get(user_id)
        if not seller:
            return jsonify({'error': 'User not found'}), 404

        now = utcnow()
        expire_boosts_safely(now)

        listings = Listing.query.filter_by(seller_id=user_id, status='active').all()
        ranked = rank_listings(listings, now)

        return jsonify({
            'seller': seller.to_dict(),
            'listings': [listing.to_dict(now) for listing in ranked],
            'total': len(ranked)
        }), 200
    except Exception as e:
        return jsonify({'error': str(e)}), 500
