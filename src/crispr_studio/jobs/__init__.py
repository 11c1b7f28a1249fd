from crispr_studio.jobs.tasks import export_experiment_job

__all__ = ["export_experiment_job"]
