from datetime import datetime
from typing import List

from crispr_studio import db


class SequenceRepository:
    """
    Repository for sequence data access.
    Callers pass an experiment ID that has already passed the ownership check.
    """

    TABLE = "sequences"
    ORDER_BY = [("created_at", "asc"), ("id", "asc")]

    def __init__(self, store=db):
        self.store = store

    def list_for_experiment(self, experiment_id, limit: int = None) -> List[dict]:
        """List the sequences of an experiment, oldest first."""
        return self.store.find_all_where(
            self.TABLE, {"experiment_id": experiment_id}, self.ORDER_BY, limit=limit
        )

    def create(
        self,
        experiment_id,
        name: str,
        sequence: str,
        sequence_type: str = "genomic",
        organism: str = None,
        chromosome: str = None,
        start_position: int = None,
        end_position: int = None,
        strand: str = None,
        created_at: datetime = None,
    ) -> dict:
        """Add a sequence to an experiment."""
        return db.fetch_one(
            """
            INSERT INTO sequences (
                experiment_id, name, sequence, sequence_type, organism,
                chromosome, start_position, end_position, strand, created_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, COALESCE(%s, now()))
            RETURNING *
            """,
            (
                experiment_id,
                name,
                sequence.upper(),
                sequence_type,
                organism,
                chromosome,
                start_position,
                end_position,
                strand,
                created_at,
            ),
        )
