"""
WebPoint - Routes
API endpoint registration
"""
from flask import Flask


def register_routes(app: Flask):
    """Register all API blueprints"""

    from webpoint.routes.auth import auth_bp
    from webpoint.routes.blog import blog_bp
    from webpoint.routes.portfolio import portfolio_bp
    from webpoint.routes.contact import contact_bp, submissions_bp
    from webpoint.routes.notifications import notifications_bp
    from webpoint.routes.analytics import analytics_bp
    from webpoint.routes.admin import admin_bp
    from webpoint.routes.seo import seo_bp

    # Public form endpoints: tighter limit than the app default
    app.limiter.limit("10 per hour")(submissions_bp)
    app.limiter.limit("10 per hour")(notifications_bp)

    # Tracking beacons fire on every route change and must never be refused
    app.limiter.exempt(analytics_bp)

    # Register with /api prefix
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(blog_bp, url_prefix='/api/blog')
    app.register_blueprint(portfolio_bp, url_prefix='/api/portfolio')
    app.register_blueprint(contact_bp, url_prefix='/api')
    app.register_blueprint(submissions_bp, url_prefix='/api')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(analytics_bp, url_prefix='/api/analytics')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    # Site root artifacts
    app.register_blueprint(seo_bp)
