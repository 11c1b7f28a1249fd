"""
Off-target

Predicted off-target binding sites of a guide RNA.
"""

from crispr_studio.off_target.repository import OffTargetSiteRepository

__all__ = ["OffTargetSiteRepository"]
