from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

from petitions.config import Config
from petitions.services.counters import CounterStore

db = SQLAlchemy()
migrate = Migrate()
counters = CounterStore()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    counters.init_app(app)

    # Register blueprints
    from petitions.routes.signatures import bp as signatures_bp
    from petitions.routes.stats import bp as stats_bp

    app.register_blueprint(signatures_bp)
    app.register_blueprint(stats_bp, url_prefix="/stats")

    with app.app_context():
        from petitions.models import Petition, PetitionType, Signature, Settings  # noqa: F401

    # Start the reminder scheduler (reads schedule setting from DB)
    if app.config.get("SCHEDULER_ENABLED"):
        from petitions.services.scheduler import init_app as init_scheduler
        init_scheduler(app)

    return app
