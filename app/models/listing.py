"""Listing model for classifieds marketplace."""

from app import db
from app.utils.dates import utcnow, utc_isoformat


class Listing(db.Model):
    """Listing model for buy/sell classifieds segment."""

    __tablename__ = 'listings'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50), nullable=False, index=True)
    price = db.Column(db.Float, nullable=True, index=True)
    currency = db.Column(db.String(3), default='NPR', nullable=False)
    location = db.Column(db.String(255), nullable=True)
    seller_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    views_count = db.Column(db.Integer, default=0, nullable=False)
    status = db.Column(db.String(20), default='active', nullable=False, index=True)  # 'active', 'sold', 'expired', 'pending'

    # Boost/Premium visibility fields. A boost is active only while
    # its flag is set AND its expiry is strictly in the future.
    is_featured = db.Column(db.Boolean, default=False, nullable=False, index=True)
    featured_until = db.Column(db.DateTime, nullable=True)
    is_urgent = db.Column(db.Boolean, default=False, nullable=False, index=True)
    urgent_until = db.Column(db.DateTime, nullable=True)
    is_sticky = db.Column(db.Boolean, default=False, nullable=False, index=True)
    sticky_until = db.Column(db.DateTime, nullable=True)
    # Bump rides on sticky and is cleared together with it
    is_bumped = db.Column(db.Boolean, default=False, nullable=False)
    bump_expires_at = db.Column(db.DateTime, nullable=True)
    promoted_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def boost_tier(self, now=None):
        """Display tier of the listing's highest active boost."""
        from app.services.promotion_state import active_tier
        return active_tier(self, now)

    def to_dict(self, now=None):
        """Convert listing to dictionary."""
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'price': self.price,
            'currency': self.currency,
            'location': self.location,
            'seller_id': self.seller_id,
            'seller': self.seller.username if self.seller else None,
            'views_count': self.views_count,
            'status': self.status,
            'is_featured': self.is_featured,
            'featured_until': utc_isoformat(self.featured_until),
            'is_urgent': self.is_urgent,
            'urgent_until': utc_isoformat(self.urgent_until),
            'is_sticky': self.is_sticky,
            'sticky_until': utc_isoformat(self.sticky_until),
            'is_bumped': self.is_bumped,
            'bump_expires_at': utc_isoformat(self.bump_expires_at),
            'boost_tier': self.boost_tier(now).label,
            'promoted_at': utc_isoformat(self.promoted_at),
            'created_at': utc_isoformat(self.created_at),
            'updated_at': utc_isoformat(self.updated_at)
        }

    def __repr__(self):
        return f'<Listing {self.id}: {self.title}>'
