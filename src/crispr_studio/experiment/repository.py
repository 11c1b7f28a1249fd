from typing import List, Optional

from crispr_studio import db

EXPERIMENT_TYPES = ("knockout", "knockin", "screening")
EXPERIMENT_STATUSES = ("draft", "analyzing", "completed", "archived")


class ExperimentRepository:
    """
    Repository for experiment data access.
    Every read is scoped to the owning principal (created_by).
    """

    TABLE = "experiments"
    ORDER_COLUMNS = ("updated_at", "created_at")

    def __init__(self, store=db):
        self.store = store

    def get_for_owner(self, experiment_id, user_id) -> Optional[dict]:
        """
        Get an experiment by ID if and only if user_id owns it.

        A missing experiment and one owned by somebody else both
        return None.
        """
        return self.store.find_one_where(
            self.TABLE, {"id": experiment_id, "created_by": user_id}
        )

    def list_for_owner(
        self,
        user_id,
        status: str = None,
        limit: int = None,
        order_by: str = "updated_at",
    ) -> List[dict]:
        """List a user's experiments, most recent first."""
        if order_by not in self.ORDER_COLUMNS:
            raise ValueError(f"Cannot order experiments by {order_by}. Valid: {list(self.ORDER_COLUMNS)}")

        where = {"created_by": user_id}
        if status:
            where["status"] = status

        return self.store.find_all_where(
            self.TABLE, where, [(order_by, "desc"), ("id", "asc")], limit=limit
        )

    def create(
        self,
        name: str,
        created_by,
        description: str = None,
        target_organism: str = None,
        experiment_type: str = "knockout",
        status: str = "draft",
    ) -> dict:
        """Create a new experiment."""
        if experiment_type not in EXPERIMENT_TYPES:
            raise ValueError(f"Unknown experiment type: {experiment_type}. Valid: {list(EXPERIMENT_TYPES)}")
        if status not in EXPERIMENT_STATUSES:
            raise ValueError(f"Unknown status: {status}. Valid: {list(EXPERIMENT_STATUSES)}")

        return db.fetch_one(
            """
            INSERT INTO experiments
                (name, description, target_organism, created_by, experiment_type, status)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING *
            """,
            (name, description, target_organism, created_by, experiment_type, status),
        )
