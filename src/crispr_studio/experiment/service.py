import logging
import time
from concurrent.futures import ThreadPoolExecutor
from functools import partial

from crispr_studio import db
from crispr_studio.config import config
from crispr_studio.experiment.fanout import fan_out
from crispr_studio.experiment.repository import ExperimentRepository
from crispr_studio.experiment.tree import ExperimentTree, Shape
from crispr_studio.guide import GuideRnaRepository
from crispr_studio.off_target import OffTargetSiteRepository
from crispr_studio.sequence import SequenceRepository

logger = logging.getLogger(__name__)


class ExperimentService:
    """
    Assembles experiments with their sequences, guide RNAs and off-target sites.

    The ownership check on the experiment is the only authorization gate;
    child rows are only ever looked up by the ID of an already-authorized
    parent. Guide loads (one per sequence) and off-target loads (one per
    guide) run concurrently on a bounded pool. Any failed load aborts the
    whole aggregation, so callers get either a complete tree or nothing.
    """

    def __init__(self, store=db, max_workers: int = None, timeout: float = None):
        self.experiments = ExperimentRepository(store)
        self.sequences = SequenceRepository(store)
        self.guides = GuideRnaRepository(store)
        self.off_targets = OffTargetSiteRepository(store)
        self.max_workers = max_workers or config.fanout_workers
        self.timeout = timeout if timeout is not None else config.aggregation_timeout

    # Tree expansion

    def aggregate(
        self,
        experiment_id,
        user_id,
        shape: Shape | str = Shape.FULL,
        limit: int = None,
        timeout: float = None,
    ) -> ExperimentTree | None:
        """
        Build the experiment tree for one of the three shapes.

        Args:
            experiment_id: Experiment to expand
            user_id: Requesting principal; must own the experiment
            shape: Shape.SHALLOW, Shape.WITH_SEQUENCES or Shape.FULL
            limit: Optional cap applied to every child list
            timeout: Seconds allowed for the whole aggregation, defaults to the
                service timeout

        Returns:
            ExperimentTree, or None if the experiment is missing or not owned by user_id

        Raises:
            AggregationTimeout: The deadline passed while sequence, guide or
                off-target loads were outstanding. The ownership lookup runs on
                the calling thread before the pool exists and is bounded only by
                the driver's own timeouts.
        """
        shape = Shape.parse(shape)
        db.check_limit(limit)
        budget = timeout if timeout is not None else self.timeout
        deadline = time.monotonic() + budget if budget else None

        experiment = self.experiments.get_for_owner(experiment_id, user_id)
        if experiment is None:
            logger.debug("Experiment %s not found for user %s", experiment_id, user_id)
            return None

        tree = ExperimentTree(experiment=experiment, shape=shape)
        if shape is Shape.SHALLOW:
            return tree

        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="fanout")
        try:
            tree.sequences = fan_out(
                partial(self.sequences.list_for_experiment, limit=limit),
                [experiment["id"]],
                executor,
                deadline,
                budget,
            )[experiment["id"]]
            logger.debug("Loaded %d sequence(s) for experiment %s", len(tree.sequences), experiment_id)
            if shape is Shape.WITH_SEQUENCES:
                return tree

            tree.guides_by_sequence = fan_out(
                partial(self.guides.list_for_sequence, limit=limit),
                [sequence["id"] for sequence in tree.sequences],
                executor,
                deadline,
                budget,
            )
            tree.off_targets_by_guide = fan_out(
                partial(self.off_targets.list_for_guide, limit=limit),
                [guide["id"] for _, guide in tree.iter_guides()],
                executor,
                deadline,
                budget,
            )
        except Exception:
            logger.warning("Aggregation of experiment %s aborted", experiment_id)
            raise
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        logger.debug(
            "Assembled experiment %s: %d guide list(s), %d off-target list(s)",
            experiment_id,
            len(tree.guides_by_sequence),
            len(tree.off_targets_by_guide),
        )
        return tree

    def get_experiment(self, experiment_id, user_id) -> dict | None:
        """Experiment row only."""
        return _materialize(self.aggregate(experiment_id, user_id, Shape.SHALLOW))

    def get_experiment_with_sequences(self, experiment_id, user_id, limit: int = None) -> dict | None:
        """Experiment with its sequences, no guides."""
        return _materialize(
            self.aggregate(experiment_id, user_id, Shape.WITH_SEQUENCES, limit=limit)
        )

    def get_experiment_details(self, experiment_id, user_id, limit: int = None) -> dict | None:
        """Experiment with sequences, guide RNAs and off-target sites fully expanded."""
        return _materialize(self.aggregate(experiment_id, user_id, Shape.FULL, limit=limit))

    # Listing

    def list_experiments(
        self,
        user_id,
        status: str = None,
        limit: int = None,
        order_by: str = "updated_at",
    ) -> list[dict]:
        """Flat list of the user's experiments, newest first."""
        return self.experiments.list_for_owner(
            user_id, status=status, limit=limit, order_by=order_by
        )

    def list_all(self, user_id) -> list[dict]:
        """All experiments of a user by creation time."""
        return self.list_experiments(user_id, order_by="created_at")

    def list_recent(self, user_id, limit: int = 5) -> list[dict]:
        """Recently updated experiments for the dashboard."""
        return self.list_experiments(user_id, limit=limit)

    def list_by_status(self, user_id, status: str) -> list[dict]:
        return self.list_experiments(user_id, status=status)


def _materialize(tree: ExperimentTree | None) -> dict | None:
    return tree.to_dict() if tree is not None else None
