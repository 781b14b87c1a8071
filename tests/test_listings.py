"""
Tests for listings endpoints.
"""

from datetime import timedelta

from app.services.promotion_state import PromotionStateManager
from app.utils.dates import utcnow
from conftest import reload_listing
from sqlalchemy.exc import OperationalError


def _ids(response):
    return [item['id'] for item in response.json['listings']]


def _break_store(monkeypatch):
    def unreachable(self, boost, now):
        raise OperationalError('UPDATE listings', {}, Exception('could not connect to server'))

    monkeypatch.setattr(PromotionStateManager, '_clear_expired', unreachable)


class TestListListings:
    """Tests for GET /api/listings"""

    def test_list_listings_empty(self, client, db_session):
        """Test listing when no listings exist."""
        response = client.get('/api/listings')

        assert response.status_code == 200
        assert response.json['listings'] == []
        assert response.json['total'] == 0

    def test_list_listings_with_data(self, client, test_listing):
        """Test listing when listings exist."""
        response = client.get('/api/listings')

        assert response.status_code == 200
        assert _ids(response) == [test_listing['id']]
        assert response.json['listings'][0]['boost_tier'] == 'none'

    def test_list_listings_filter_category(self, client, make_listing):
        """Test filtering listings by category."""
        phone = make_listing(category='electronics')
        make_listing(category='vehicles')

        response = client.get('/api/listings?category=electronics')

        assert response.status_code == 200
        assert _ids(response) == [phone]

    def test_list_listings_pagination(self, client, make_listing):
        """Test listings pagination."""
        for _ in range(3):
            make_listing()

        response = client.get('/api/listings?page=2&per_page=2')

        assert response.status_code == 200
        assert response.json['total'] == 3
        assert response.json['pages'] == 2
        assert len(response.json['listings']) == 1

    def test_list_listings_invalid_sort(self, client, db_session):
        """Test an unknown sort order is rejected."""
        response = client.get('/api/listings?sort=random')

        assert response.status_code == 400

    def test_list_listings_sort_by_price(self, client, make_listing):
        """Test sorting listings by price."""
        cheap = make_listing(price=10)
        pricey = make_listing(price=900)

        response = client.get('/api/listings?sort=price_high')

        assert _ids(response) == [pricey, cheap]


class TestPromotedOrdering:
    """Boosted listings come first, expired boosts never do."""

    def test_newest_sort_orders_by_tier(self, client, make_listing):
        """Test the default sort puts boosted listings first by tier."""
        now = utcnow()
        urgent = make_listing(is_urgent=True, urgent_until=now + timedelta(days=2),
                              created_at=now - timedelta(days=5))
        plain = make_listing(created_at=now - timedelta(hours=1))
        featured = make_listing(is_featured=True, featured_until=now + timedelta(days=2),
                                created_at=now - timedelta(days=10))
        sticky = make_listing(is_sticky=True, sticky_until=now + timedelta(days=2),
                              is_bumped=True, bump_expires_at=now + timedelta(days=2),
                              created_at=now - timedelta(days=3))

        response = client.get('/api/listings')

        assert response.status_code == 200
        assert _ids(response) == [featured, urgent, sticky, plain]
        assert [item['boost_tier'] for item in response.json['listings']] == [
            'featured', 'urgent', 'sticky', 'none'
        ]

    def test_expired_boost_is_cleared_before_read(self, client, make_listing):
        """Test an expired boost is cleared before listings are read."""
        now = utcnow()
        expired = make_listing(is_featured=True, featured_until=now - timedelta(days=1),
                               created_at=now - timedelta(days=10))
        newer = make_listing(created_at=now - timedelta(days=1))

        response = client.get('/api/listings')

        assert _ids(response) == [newer, expired]
        item = response.json['listings'][1]
        assert item['is_featured'] is False
        assert item['featured_until'] is None
        assert reload_listing(expired).is_featured is False

    def test_boosted_only(self, client, make_listing):
        """Test filtering to listings with an active boost."""
        now = utcnow()
        boosted = make_listing(is_urgent=True, urgent_until=now + timedelta(days=1))
        make_listing(is_urgent=True, urgent_until=now - timedelta(days=1))
        make_listing()

        response = client.get('/api/listings?boosted_only=true')

        assert _ids(response) == [boosted]

    def test_cleanup_failure_does_not_fail_request(self, client, make_listing, monkeypatch):
        """Test listings are still served when the cleanup cannot reach the store."""
        listing_id = make_listing(is_featured=True, featured_until=utcnow() - timedelta(days=1))
        _break_store(monkeypatch)

        response = client.get('/api/listings')

        assert response.status_code == 200
        item = response.json['listings'][0]
        assert item['id'] == listing_id
        # Stale flag is served, but it no longer ranks as featured
        assert item['is_featured'] is True
        assert item['boost_tier'] == 'none'


class TestGetListing:
    """Tests for GET /api/listings/:id"""

    def test_get_listing_success(self, client, test_listing):
        """Test getting a specific listing."""
        response = client.get(f'/api/listings/{test_listing["id"]}')

        assert response.status_code == 200
        assert 'title' in response.json
        assert response.json['views_count'] == 1

    def test_get_listing_not_found(self, client, db_session):
        """Test getting non-existent listing."""
        response = client.get('/api/listings/99999')

        assert response.status_code == 404

    def test_get_listing_clears_expired_sticky(self, client, make_listing):
        """Test reading a listing clears its expired sticky boost and bump."""
        now = utcnow()
        listing_id = make_listing(is_sticky=True, sticky_until=now - timedelta(minutes=5),
                                  is_bumped=True, bump_expires_at=now + timedelta(days=1))

        response = client.get(f'/api/listings/{listing_id}')

        assert response.status_code == 200
        assert response.json['is_sticky'] is False
        assert response.json['is_bumped'] is False
        assert response.json['bump_expires_at'] is None


class TestSellerListings:
    """Tests for GET /api/listings/seller/:id"""

    def test_seller_listings_ranked(self, client, test_user, make_listing):
        """Test a seller's listings are ordered by boost tier."""
        now = utcnow()
        plain = make_listing(created_at=now - timedelta(hours=1))
        sticky = make_listing(is_sticky=True, sticky_until=now + timedelta(days=1),
                              created_at=now - timedelta(days=4))
        make_listing(status='sold')

        response = client.get(f'/api/listings/seller/{test_user["id"]}')

        assert response.status_code == 200
        assert response.json['total'] == 2
        assert _ids(response) == [sticky, plain]

    def test_seller_not_found(self, client, db_session):
        """Test listings for an unknown seller."""
        response = client.get('/api/listings/seller/99999')

        assert response.status_code == 404
