"""Tests for the sequential, thread-pool and streaming schedulers."""

import threading
import time

import pytest
from engines.scheduler import StreamingScheduler, get_scheduler, run_parallel, run_sequential
from models.codec_params import CodecParams
from models.errors import PipelineCancelled


def test_streaming_preserves_fifo_order():
    for depth in (2, 3, 8):
        stored = []
        count = StreamingScheduler(queue_depth=depth).run(range(100), lambda x: x * x, stored.append)
        assert count == 100
        assert stored == [x * x for x in range(100)]


def test_streaming_stages_run_on_separate_threads():
    """Load and compute happen off the calling thread; store happens on it."""
    seen = {'load': set(), 'compute': set(), 'store': set()}

    def source():
        for i in range(10):
            seen['load'].add(threading.current_thread().name)
            yield i

    def compute(x):
        seen['compute'].add(threading.current_thread().name)
        return x

    def store(_):
        seen['store'].add(threading.current_thread().name)

    StreamingScheduler().run(source(), compute, store)
    assert seen['load'] == {'codec-load'}
    assert seen['compute'] == {'codec-compute'}
    assert seen['store'] == {threading.current_thread().name}


def test_streaming_propagates_compute_errors():
    def compute(x):
        if x == 5:
            raise ValueError("bad block")
        return x

    with pytest.raises(ValueError, match="bad block"):
        StreamingScheduler().run(range(50), compute, lambda _: None)


def test_streaming_propagates_store_errors():
    def store(x):
        if x == 3:
            raise RuntimeError("store failed")

    with pytest.raises(RuntimeError, match="store failed"):
        StreamingScheduler().run(range(50), lambda x: x, store)


def test_streaming_propagates_source_errors():
    def source():
        yield 1
        raise KeyError("load failed")

    with pytest.raises(KeyError):
        StreamingScheduler().run(source(), lambda x: x, lambda _: None)


def test_streaming_cancel_between_blocks():
    scheduler = StreamingScheduler(queue_depth=2)
    stored = []

    def store(x):
        stored.append(x)
        scheduler.cancel()

    with pytest.raises(PipelineCancelled):
        scheduler.run(range(1000), lambda x: x, store)
    assert 1 <= len(stored) < 1000
    assert stored == list(range(len(stored)))


def test_streaming_cancel_resets_on_next_run():
    scheduler = StreamingScheduler()
    scheduler.cancel()
    assert scheduler.run(range(5), lambda x: x, lambda _: None) == 5
    assert not scheduler.cancelled


def test_streaming_rejects_shallow_queue():
    with pytest.raises(ValueError):
        StreamingScheduler(queue_depth=1)


def test_parallel_stores_in_source_order():
    def compute(x):
        time.sleep(0.001 * (10 - x))
        return x

    stored = []
    assert run_parallel(range(10), compute, stored.append, workers=4) == 10
    assert stored == list(range(10))


def test_sequential_cancel_event():
    event = threading.Event()
    stored = []

    def store(x):
        stored.append(x)
        if x == 2:
            event.set()

    with pytest.raises(PipelineCancelled):
        run_sequential(range(10), lambda x: x, store, cancel_event=event)
    assert stored == [0, 1, 2]


def test_get_scheduler():
    assert get_scheduler(CodecParams()) is run_sequential
    assert get_scheduler(CodecParams(schedule='parallel', workers=2)).keywords == {'workers': 2}
    runner = get_scheduler(CodecParams(schedule='streaming', queue_depth=3))
    assert runner.__self__.queue_depth == 3
