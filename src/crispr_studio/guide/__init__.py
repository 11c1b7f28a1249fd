"""
Guide

Candidate guide RNAs designed against a sequence.
"""

from crispr_studio.guide.repository import GuideRnaRepository

__all__ = ["GuideRnaRepository"]
