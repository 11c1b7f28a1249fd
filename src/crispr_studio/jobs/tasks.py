"""RQ task definitions for background job processing."""
import uuid

from crispr_studio.experiment import ExperimentService
from crispr_studio.experiment.export import export_experiment


def export_experiment_job(experiment_id: str, user_id: str, export_path: str = None) -> dict:
    """Export a fully expanded experiment to CSV."""
    experiment_service = ExperimentService()

    return export_experiment(
        experiment_service,
        uuid.UUID(experiment_id),
        uuid.UUID(user_id),
        export_path,
    )
