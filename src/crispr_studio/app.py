from flask import Flask
from redis import Redis
from rq import Queue

from crispr_studio.config import config
from crispr_studio.experiment import ExperimentService
from crispr_studio.logging_setup import configure_logging


def create_app(experiment_service: ExperimentService = None) -> Flask:
    """Application factory."""
    configure_logging()
    app = Flask(__name__)

    # Configure Redis and RQ
    app.redis = Redis.from_url(config.redis_url)
    app.task_queue = Queue("default", connection=app.redis)

    app.experiment_service = experiment_service or ExperimentService()

    # Register blueprints
    from crispr_studio.api.experiments import bp as experiments_bp
    from crispr_studio.api.jobs import bp as jobs_bp

    app.register_blueprint(experiments_bp, url_prefix="/api/experiments")
    app.register_blueprint(jobs_bp, url_prefix="/api/jobs")

    @app.route("/api/health")
    def health():
        return {"status": "ok"}

    return app
