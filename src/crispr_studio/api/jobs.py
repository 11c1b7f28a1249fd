from flask import Blueprint, current_app, jsonify
from rq.exceptions import NoSuchJobError
from rq.job import Job

bp = Blueprint("jobs", __name__)


@bp.route("/<job_id>", methods=["GET"])
def get_job_status(job_id: str):
    """Get status of a job."""
    try:
        job = Job.fetch(job_id, connection=current_app.redis)
    except NoSuchJobError:
        return jsonify({"error": "Job not found"}), 404

    response = {
        "job_id": job.id,
        "status": job.get_status(),
        "created_at": job.created_at.isoformat() if job.created_at else None,
        "started_at": job.started_at.isoformat() if job.started_at else None,
        "ended_at": job.ended_at.isoformat() if job.ended_at else None,
    }

    if job.is_finished:
        response["result"] = job.result
    elif job.is_failed:
        response["error"] = str(job.exc_info)

    return jsonify(response)
