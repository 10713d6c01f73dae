"""
Blueprint registration for the learning platform API.

Resource blueprints carry their own /api/... prefixes; core serves / and
the health checks.
"""

from __future__ import annotations


def register_blueprints(app):
    from auth import auth_bp
    from blueprints.core import bp as core_bp
    from blueprints.courses import bp as courses_bp
    from blueprints.educators import bp as educators_bp
    from blueprints.lessons import bp as lessons_bp
    from blueprints.live_classes import bp as live_classes_bp
    from blueprints.assessments import bp as assessments_bp
    from blueprints.progress import bp as progress_bp
    from blueprints.subscriptions import bp as subscriptions_bp

    app.register_blueprint(core_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(courses_bp)
    app.register_blueprint(educators_bp)
    app.register_blueprint(lessons_bp)
    app.register_blueprint(live_classes_bp)
    app.register_blueprint(assessments_bp)
    app.register_blueprint(progress_bp)
    app.register_blueprint(subscriptions_bp)
