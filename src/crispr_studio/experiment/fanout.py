"""Concurrent sibling loads with first-fault-wins semantics."""

import logging
import time
from concurrent.futures import FIRST_EXCEPTION, Executor, wait
from typing import Callable, Hashable, Iterable, TypeVar

from crispr_studio.errors import AggregationTimeout

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
R = TypeVar("R")


def fan_out(
    load: Callable[[K], R],
    keys: Iterable[K],
    executor: Executor,
    deadline: float | None = None,
    budget: float | None = None,
) -> dict[K, R]:
    """
    Run load(key) for every key on the executor and join the results.

    Results are keyed by the key they were loaded for, so the order in
    which siblings complete never leaks into the result.

    Args:
        load: Function performing one independent read
        keys: Parent IDs to load children for
        executor: Pool the loads are submitted to
        deadline: time.monotonic() value after which the join gives up
        budget: Total seconds the caller allowed, reported on timeout

    Returns:
        Dict of key to load result

    Raises:
        The first exception raised by any load, with its original type.
        Every sibling still pending is cancelled; running ones are abandoned.
        AggregationTimeout if the deadline passes first.
    """
    futures = {executor.submit(load, key): key for key in keys}
    if not futures:
        return {}

    remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
    done, pending = wait(futures, timeout=remaining, return_when=FIRST_EXCEPTION)

    for future in pending:
        future.cancel()

    failed = next((future for future in done if future.exception() is not None), None)
    if failed is not None:
        logger.warning(
            "Load for %s failed, abandoning %d sibling load(s)",
            futures[failed],
            len(pending),
        )
        raise failed.exception()

    if pending:
        raise AggregationTimeout(
            pending=len(pending),
            timeout=budget if budget is not None else remaining,
        )

    return {futures[future]: future.result() for future in done}
