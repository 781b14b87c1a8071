"""AdPromotion model - purchase history for listing boosts."""

from app import db
from app.utils.dates import utcnow, utc_isoformat


class AdPromotion(db.Model):
    """A purchased boost on a listing (featured, urgent or sticky)."""

    __tablename__ = 'ad_promotions'

    id = db.Column(db.Integer, primary_key=True)
    listing_id = db.Column(db.Integer, db.ForeignKey('listings.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    promotion_type = db.Column(db.String(20), nullable=False)
    duration_days = db.Column(db.Integer, nullable=False)
    price_paid = db.Column(db.Float, nullable=False)
    account_type = db.Column(db.String(30), default='individual', nullable=False)
    payment_reference = db.Column(db.String(120), nullable=True)
    payment_method = db.Column(db.String(30), default='manual', nullable=False)
    starts_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    listing = db.relationship('Listing', backref=db.backref('promotions', lazy='dynamic', cascade='all, delete-orphan'))

    def to_dict(self):
        """Convert promotion to dictionary."""
        return {
            'id': self.id,
            'listing_id': self.listing_id,
            'user_id': self.user_id,
            'promotion_type': self.promotion_type,
            'duration_days': self.duration_days,
            'price_paid': self.price_paid,
            'account_type': self.account_type,
            'payment_reference': self.payment_reference,
            'payment_method': self.payment_method,
            'starts_at': utc_isoformat(self.starts_at),
            'expires_at': utc_isoformat(self.expires_at),
            'is_active': self.is_active,
            'created_at': utc_isoformat(self.created_at),
            'listing': {
                'id': self.listing.id,
                'title': self.listing.title,
                'status': self.listing.status,
            } if self.listing else None
        }

    def __repr__(self):
        return f'<AdPromotion {self.id}: {self.promotion_type} on listing {self.listing_id}>'
