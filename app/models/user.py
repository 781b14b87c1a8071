"""User model for sellers on the marketplace."""

from app import db
from app.utils.dates import utcnow


class User(db.Model):
    """User model for marketplace platform."""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(160), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Verification drives promotion pricing (see get_account_type)
    individual_verified = db.Column(db.Boolean, default=False, nullable=False)
    business_verification_status = db.Column(db.String(20), nullable=True)  # 'pending', 'approved', 'rejected'

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # Relationships
    listings = db.relationship('Listing', backref='seller', lazy=True, foreign_keys='Listing.seller_id')

    def to_dict(self):
        """Convert user to dictionary."""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'full_name': self.full_name,
            'is_active': self.is_active,
            'individual_verified': self.individual_verified,
            'business_verification_status': self.business_verification_status,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<User {self.username}>'
