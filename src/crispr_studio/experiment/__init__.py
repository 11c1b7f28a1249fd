"""
Experiment

This package resolves experiments for their owner and assembles them
with their sequences, guide RNAs and off-target sites.
"""

from crispr_studio.experiment.repository import ExperimentRepository
from crispr_studio.experiment.service import ExperimentService
from crispr_studio.experiment.tree import ExperimentTree, Shape

__all__ = ["ExperimentRepository", "ExperimentService", "ExperimentTree", "Shape"]
