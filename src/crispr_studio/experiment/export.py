"""Flatten an experiment tree into one CSV row per root-to-leaf path."""

import decimal
import logging
from pathlib import Path

import pandas as pd

from crispr_studio.config import config
from crispr_studio.experiment.tree import ExperimentTree

logger = logging.getLogger(__name__)

EXPERIMENT_COLUMNS = ["id", "name", "status", "experiment_type", "target_organism"]
SEQUENCE_COLUMNS = ["id", "name", "organism", "chromosome", "start_position", "end_position", "strand"]
GUIDE_COLUMNS = [
    "id",
    "guide_sequence",
    "pam_sequence",
    "target_position",
    "strand",
    "efficiency_score",
    "specificity_score",
    "on_target_score",
    "gc_content",
]
OFF_TARGET_COLUMNS = [
    "id",
    "sequence",
    "chromosome",
    "position",
    "strand",
    "mismatch_count",
    "binding_score",
    "cutting_score",
    "annotation",
]

_LEVELS = [
    ("experiment", EXPERIMENT_COLUMNS),
    ("sequence", SEQUENCE_COLUMNS),
    ("guide", GUIDE_COLUMNS),
    ("off_target", OFF_TARGET_COLUMNS),
]
COLUMNS = [f"{prefix}_{column}" for prefix, columns in _LEVELS for column in columns]


def _prefixed(prefix: str, columns: list[str], row: dict | None) -> dict:
    row = row or {}
    return {f"{prefix}_{column}": row.get(column) for column in columns}


def _row(experiment, sequence=None, guide=None, off_target=None) -> dict:
    return {
        **_prefixed("experiment", EXPERIMENT_COLUMNS, experiment),
        **_prefixed("sequence", SEQUENCE_COLUMNS, sequence),
        **_prefixed("guide", GUIDE_COLUMNS, guide),
        **_prefixed("off_target", OFF_TARGET_COLUMNS, off_target),
    }


def flatten_tree(tree: ExperimentTree) -> pd.DataFrame:
    """
    One row per path from the experiment to its deepest node.

    Sequences without guides and guides without off-target sites still
    produce a row, with the missing levels left empty.
    """
    experiment = tree.experiment
    rows = []

    for sequence in tree.sequences:
        guides = tree.guides_for(sequence["id"])
        if not guides:
            rows.append(_row(experiment, sequence))
        for guide in guides:
            sites = tree.off_targets_for(guide["id"])
            if not sites:
                rows.append(_row(experiment, sequence, guide))
            for site in sites:
                rows.append(_row(experiment, sequence, guide, site))

    if not rows:
        rows.append(_row(experiment))

    df = pd.DataFrame(rows, columns=COLUMNS)
    # Convert decimal.Decimal columns to float for numeric compatibility
    for col in df.columns:
        values = df[col].dropna()
        if len(values) and values.apply(lambda x: isinstance(x, decimal.Decimal)).all():
            df[col] = df[col].astype(float)
    return df


def export_experiment(service, experiment_id, user_id, export_path: Path = None) -> dict:
    """
    Write the fully expanded experiment to <export_path>/<experiment_id>.csv.
    """
    tree = service.aggregate(experiment_id, user_id)
    if tree is None:
        raise ValueError(f"Experiment {experiment_id} not found")

    export_path = Path(export_path or config.export_path)
    export_path.mkdir(parents=True, exist_ok=True)
    path = export_path / f"{tree.experiment['id']}.csv"

    df = flatten_tree(tree)
    df.to_csv(path, index=False)
    logger.info("Exported experiment %s (%d rows) to %s", experiment_id, len(df), path)

    return {
        "experiment_id": str(tree.experiment["id"]),
        "path": str(path),
        "rows": len(df),
    }
