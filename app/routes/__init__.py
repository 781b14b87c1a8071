"""Routes package for the marketplace application."""


def register_routes(app):
    """Register all route blueprints with the application."""
    from .listings import listings_bp
    from .promotions import promotions_bp

    app.register_blueprint(listings_bp, url_prefix='/api/listings')
    app.register_blueprint(promotions_bp, url_prefix='/api/promotions')
