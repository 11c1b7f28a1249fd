from typing import List

from crispr_studio import db


class OffTargetSiteRepository:
    """
    Repository for predicted off-target binding sites.
    Encapsulates all queries for the off_target_sites table.
    """

    TABLE = "off_target_sites"
    ORDER_BY = [("binding_score", "desc"), ("id", "asc")]

    def __init__(self, store=db):
        self.store = store

    def list_for_guide(self, guide_rna_id, limit: int = None) -> List[dict]:
        """List the off-target sites of a guide, highest binding risk first."""
        return self.store.find_all_where(
            self.TABLE, {"guide_rna_id": guide_rna_id}, self.ORDER_BY, limit=limit
        )

    def create(
        self,
        guide_rna_id,
        sequence: str,
        chromosome: str = None,
        position: int = None,
        strand: str = None,
        mismatch_count: int = 0,
        mismatch_positions: list[int] = None,
        binding_score: float = None,
        cutting_score: float = None,
        annotation: str = None,
    ) -> dict:
        """Insert an off-target site and return the inserted row."""
        return db.fetch_one(
            """
            INSERT INTO off_target_sites (
                guide_rna_id, chromosome, position, strand, sequence, mismatch_count,
                mismatch_positions, binding_score, cutting_score, annotation
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
            """,
            (
                guide_rna_id,
                chromosome,
                position,
                strand,
                sequence,
                mismatch_count,
                mismatch_positions,
                binding_score,
                cutting_score,
                annotation,
            ),
        )
