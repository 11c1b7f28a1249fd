import logging
import uuid

import psycopg
from flask import Blueprint, current_app, g, jsonify, request

from crispr_studio.errors import AggregationTimeout
from crispr_studio.jobs import export_experiment_job

logger = logging.getLogger(__name__)

bp = Blueprint("experiments", __name__)

# Set by the authentication layer in front of this service
USER_HEADER = "X-User-Id"
MAX_RECENT = 20


def not_found():
    return jsonify({"error": "Experiment not found"}), 404


def limit_arg(default: int = None) -> int | None:
    """Read ?limit=, rejecting values that are present but not integers."""
    raw = request.args.get("limit")
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"limit must be an integer, got {raw!r}") from None


@bp.before_request
def load_principal():
    """Reject requests without a valid principal."""
    raw = request.headers.get(USER_HEADER)
    try:
        g.user_id = uuid.UUID(raw)
    except (TypeError, ValueError):
        return jsonify({"error": "Authentication required"}), 401


@bp.errorhandler(ValueError)
def bad_request(e):
    return jsonify({"error": str(e)}), 400


@bp.errorhandler(AggregationTimeout)
def aggregation_timeout(e):
    return jsonify({"error": str(e)}), 504


@bp.errorhandler(psycopg.Error)
def storage_error(e):
    logger.error("Storage error: %s", e)
    return jsonify({"error": "Storage unavailable"}), 503


@bp.route("", methods=["GET"])
def list_experiments():
    """List the current user's experiments."""
    experiments = current_app.experiment_service.list_experiments(
        g.user_id,
        status=request.args.get("status"),
        limit=limit_arg(),
        order_by=request.args.get("order_by", "updated_at"),
    )
    return jsonify(experiments)


@bp.route("/recent", methods=["GET"])
def recent_experiments():
    """Recently updated experiments for the dashboard."""
    limit = limit_arg(default=5)
    if not 1 <= limit <= MAX_RECENT:
        raise ValueError(f"limit must be between 1 and {MAX_RECENT}")
    return jsonify(current_app.experiment_service.list_recent(g.user_id, limit=limit))


@bp.route("/<uuid:experiment_id>", methods=["GET"])
def get_experiment(experiment_id: uuid.UUID):
    """Get experiment by ID."""
    experiment = current_app.experiment_service.get_experiment(experiment_id, g.user_id)
    if experiment is None:
        return not_found()
    return jsonify(experiment)


@bp.route("/<uuid:experiment_id>/sequences", methods=["GET"])
def get_experiment_with_sequences(experiment_id: uuid.UUID):
    """Get experiment with its sequences."""
    experiment = current_app.experiment_service.get_experiment_with_sequences(
        experiment_id, g.user_id, limit=limit_arg()
    )
    if experiment is None:
        return not_found()
    return jsonify(experiment)


@bp.route("/<uuid:experiment_id>/details", methods=["GET"])
def get_experiment_details(experiment_id: uuid.UUID):
    """Get experiment with sequences, guide RNAs and off-target sites."""
    experiment = current_app.experiment_service.get_experiment_details(
        experiment_id, g.user_id, limit=limit_arg()
    )
    if experiment is None:
        return not_found()
    return jsonify(experiment)


@bp.route("/<uuid:experiment_id>/export", methods=["POST"])
def export_experiment(experiment_id: uuid.UUID):
    """Queue a CSV export of the fully expanded experiment."""
    experiment = current_app.experiment_service.get_experiment(experiment_id, g.user_id)
    if experiment is None:
        return not_found()

    job = current_app.task_queue.enqueue(
        export_experiment_job,
        experiment_id=str(experiment_id),
        user_id=str(g.user_id),
    )

    return jsonify(
        {
            "job_id": job.id,
            "status": "queued",
            "experiment_id": str(experiment_id),
        }
    ), 202
