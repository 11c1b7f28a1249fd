from typing import List

from crispr_studio import db


class GuideRnaRepository:
    """
    Repository for guide RNA candidates.
    Encapsulates all queries for the guide_rnas table.
    """

    TABLE = "guide_rnas"
    # Unscored guides sort after every scored one
    ORDER_BY = [("efficiency_score", "desc"), ("id", "asc")]

    def __init__(self, store=db):
        self.store = store

    def list_for_sequence(self, sequence_id, limit: int = None) -> List[dict]:
        """List the guide candidates of a sequence, most efficient first."""
        return self.store.find_all_where(
            self.TABLE, {"sequence_id": sequence_id}, self.ORDER_BY, limit=limit
        )

    def create(
        self,
        sequence_id,
        guide_sequence: str,
        pam_sequence: str,
        target_position: int,
        strand: str,
        efficiency_score: float = None,
        specificity_score: float = None,
        on_target_score: float = None,
        gc_content: float = None,
        algorithm_used: str = None,
        algorithm_version: str = None,
    ) -> dict:
        """Insert a guide candidate and return the inserted row."""
        return db.fetch_one(
            """
            INSERT INTO guide_rnas (
                sequence_id, guide_sequence, pam_sequence, target_position, strand,
                efficiency_score, specificity_score, on_target_score, gc_content,
                algorithm_used, algorithm_version
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
            """,
            (
                sequence_id,
                guide_sequence,
                pam_sequence,
                target_position,
                strand,
                efficiency_score,
                specificity_score,
                on_target_score,
                gc_content,
                algorithm_used,
                algorithm_version,
            ),
        )
