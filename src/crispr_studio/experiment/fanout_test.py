import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from crispr_studio.errors import AggregationError, AggregationTimeout
from crispr_studio.experiment.fanout import fan_out


class LoadFailed(Exception):
    pass


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=4)
    yield pool
    pool.shutdown(wait=False, cancel_futures=True)


class TestFanOut:
    def test_results_keyed_by_input(self, executor):
        def load(key):
            # Later keys finish first
            time.sleep((5 - key) * 0.01)
            return [key] * key

        result = fan_out(load, [1, 2, 3, 4], executor)

        assert result == {1: [1], 2: [2, 2], 3: [3, 3, 3], 4: [4, 4, 4, 4]}

    def test_no_keys(self, executor):
        assert fan_out(lambda key: key, [], executor) == {}

    def test_loads_run_concurrently(self, executor):
        barrier = threading.Barrier(3, timeout=2)

        def load(key):
            barrier.wait()
            return key

        assert fan_out(load, ["a", "b", "c"], executor) == {"a": "a", "b": "b", "c": "c"}

    def test_first_fault_wins(self, executor):
        def load(key):
            if key == 3:
                raise LoadFailed(f"load {key} failed")
            return key

        with pytest.raises(LoadFailed, match="load 3 failed"):
            fan_out(load, range(8), executor)

    def test_fault_kind_preserved_among_many_faults(self, executor):
        def load(key):
            raise LoadFailed(key)

        with pytest.raises(LoadFailed):
            fan_out(load, range(8), executor)

    def test_deadline_raises_timeout(self, executor):
        release = threading.Event()

        def load(key):
            if key == "slow":
                release.wait(1)
            return key

        with pytest.raises(AggregationTimeout) as exc_info:
            fan_out(load, ["fast", "slow"], executor, deadline=time.monotonic() + 0.05)
        release.set()

        assert exc_info.value.pending == 1
        assert isinstance(exc_info.value, AggregationError)

    def test_timeout_reports_budget_not_remaining_time(self, executor):
        release = threading.Event()

        def load(key):
            release.wait(1)
            return key

        with pytest.raises(AggregationTimeout) as exc_info:
            fan_out(load, [1], executor, deadline=time.monotonic() + 0.02, budget=30)
        release.set()

        assert exc_info.value.timeout == 30
        assert "after 30s" in str(exc_info.value)

    def test_expired_deadline(self, executor):
        release = threading.Event()

        def load(key):
            release.wait(1)
            return key

        with pytest.raises(AggregationTimeout):
            fan_out(load, [1], executor, deadline=time.monotonic() - 1)
        release.set()
