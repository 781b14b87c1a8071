"""Routes for buying and reviewing listing promotions."""

from flask import Blueprint, request, jsonify, g

from app.constants.promotions import CURRENCY, VALID_DURATIONS
from app.models import Listing
from app.services.promotions import (
    PromotionError,
    activate_promotion,
    calculate_price,
    get_pricing,
    list_promotions,
)
from app.utils.auth import token_required

promotions_bp = Blueprint('promotions', __name__)


@promotions_bp.route('/pricing', methods=['GET'])
def get_promotion_pricing():
    """Get the promotion pricing table (public)."""
    return jsonify({
        'pricing': get_pricing(),
        'durations': list(VALID_DURATIONS),
        'currency': CURRENCY
    }), 200


@promotions_bp.route('/calculate', methods=['GET'])
@token_required
def calculate_promotion_price():
    """Price a promotion for the current user's account type."""
    try:
        quote = calculate_price(
            request.args.get('promotion_type'),
            request.args.get('duration_days'),
            g.current_user
        )
        return jsonify(quote), 200
    except PromotionError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@promotions_bp.route('', methods=['POST'])
@token_required
def promote_listing():
    """Apply a promotion to one of the current user's listings.

    Body:
    - listing_id: int (required)
    - promotion_type: 'featured' | 'urgent' | 'sticky' | 'bump_up' (required)
    - duration_days: 3, 7 or 15 (required)
    - payment_reference, payment_method: optional
    """
    try:
        data = request.get_json() or {}

        if not all(data.get(k) for k in ['listing_id', 'promotion_type', 'duration_days']):
            return jsonify({'error': 'listing_id, promotion_type and duration_days are required'}), 400

        listing = Listing.query.get(data['listing_id'])
        if not listing:
            return jsonify({'error': 'Listing not found'}), 404

        promotion = activate_promotion(
            listing,
            g.current_user,
            data['promotion_type'],
            data['duration_days'],
            payment_reference=data.get('payment_reference'),
            payment_method=data.get('payment_method', 'manual'),
        )

        return jsonify({
            'message': 'Listing promoted successfully',
            'promotion': promotion.to_dict(),
            'listing': listing.to_dict()
        }), 201
    except PromotionError as e:
        return jsonify({'error': str(e)}), e.status_code
    except Exception as e:
        return jsonify({'error': str(e)}), 500


@promotions_bp.route('', methods=['GET'])
@token_required
def get_my_promotions():
    """Get the current user's promotion history."""
    try:
        page = request.args.get('page', 1, type=int)
        per_page = request.args.get('per_page', 50, type=int)

        promotions = list_promotions(g.current_user.id, page=page, per_page=per_page)

        return jsonify({
            'promotions': [p.to_dict() for p in promotions.items],
            'total': promotions.total,
            'pages': promotions.pages,
            'current_page': page
        }), 200
    except Exception as e:
        return jsonify({'error': str(e)}), 500
