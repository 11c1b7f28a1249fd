"""
Sequence

Input DNA sequences attached to an experiment.
"""

from crispr_studio.sequence.repository import SequenceRepository

__all__ = ["SequenceRepository"]
