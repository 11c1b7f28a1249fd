"""
Experiment tree

An assembled experiment is kept flat: the experiment row, its ordered
sequence list, and the guide and off-target lists keyed by their parent
ID. The nested view is only built by ExperimentTree.to_dict() when the
result leaves the service.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class Shape(str, Enum):
    """How deep an experiment is expanded."""

    SHALLOW = "shallow"
    WITH_SEQUENCES = "sequences"
    FULL = "full"

    @classmethod
    def parse(cls, value) -> "Shape":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown shape: {value}. Valid: {[shape.value for shape in cls]}"
            ) from None


@dataclass
class ExperimentTree:
    experiment: dict
    shape: Shape = Shape.SHALLOW
    sequences: list[dict] = field(default_factory=list)
    guides_by_sequence: dict[Any, list[dict]] = field(default_factory=dict)
    off_targets_by_guide: dict[Any, list[dict]] = field(default_factory=dict)

    def guides_for(self, sequence_id) -> list[dict]:
        return self.guides_by_sequence.get(sequence_id, [])

    def off_targets_for(self, guide_rna_id) -> list[dict]:
        return self.off_targets_by_guide.get(guide_rna_id, [])

    def iter_guides(self) -> Iterator[tuple[dict, dict]]:
        """Yield (sequence, guide) pairs in tree order."""
        for sequence in self.sequences:
            for guide in self.guides_for(sequence["id"]):
                yield sequence, guide

    def iter_leaves(self) -> Iterator[tuple[dict, dict, dict]]:
        """Yield the (sequence, guide, off_target) path of every off-target site."""
        for sequence, guide in self.iter_guides():
            for off_target in self.off_targets_for(guide["id"]):
                yield sequence, guide, off_target

    @property
    def leaf_count(self) -> int:
        return sum(1 for _ in self.iter_leaves())

    def to_dict(self) -> dict:
        """Materialize the nested view for the requested shape."""
        result = dict(self.experiment)
        if self.shape is Shape.SHALLOW:
            return result

        if self.shape is Shape.WITH_SEQUENCES:
            result["sequences"] = [dict(sequence) for sequence in self.sequences]
            return result

        result["sequences"] = [
            {
                **sequence,
                "guide_rnas": [
                    {
                        **guide,
                        "off_target_sites": [
                            dict(site) for site in self.off_targets_for(guide["id"])
                        ],
                    }
                    for guide in self.guides_for(sequence["id"])
                ],
            }
            for sequence in self.sequences
        ]
        return result
