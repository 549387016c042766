"""
Block schedulers.

Each scheduler drives the same three roles: a source yielding blocks of
work (load), a ``compute`` callable turning one item into a result, and a
``store`` callable consuming results. All of them hand results to
``store`` in source order, so their output is identical; only the overlap
of the stages differs.
"""

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, Iterable, Optional, TypeVar

from models.codec_params import CodecParams
from models.errors import PipelineCancelled

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')

Runner = Callable[[Iterable[T], Callable[[T], R], Callable[[R], None]], int]

_DONE = object()


def run_sequential(
    source: Iterable[T],
    compute: Callable[[T], R],
    store: Callable[[R], None],
    cancel_event: Optional[threading.Event] = None,
) -> int:
    """Process items one at a time in the calling thread."""
    stored = 0
    for item in source:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineCancelled(f"Cancelled after {stored} blocks")
        store(compute(item))
        stored += 1
    return stored


def run_parallel(
    source: Iterable[T],
    compute: Callable[[T], R],
    store: Callable[[R], None],
    workers: int = 4,
) -> int:
    """Compute items on a thread pool; store results in source order."""
    stored = 0
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='codec-block') as pool:
        for result in pool.map(compute, source):
            store(result)
            stored += 1
    return stored


class StreamingScheduler:
    """
    Load -> compute -> store pipeline over bounded queues.

    The source is drained by a load thread and the compute callable runs
    on a second thread, each handing work on through a queue of
    ``queue_depth`` slots; ``store`` runs in the calling thread. Results
    arrive in FIFO order. An exception in any stage stops the other
    stages and is re-raised from ``run``.

    ``cancel`` stops the load stage before its next block; blocks already
    in flight are still stored and ``run`` then raises PipelineCancelled.
    """

    def __init__(self, queue_depth: int = 2, poll_interval: float = 0.05):
        if queue_depth < 2:
            raise ValueError(f"Queue depth must be >= 2, got {queue_depth}")
        self.queue_depth = queue_depth
        self.poll_interval = poll_interval
        self._cancel = threading.Event()

    def cancel(self) -> None:
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def run(self, source: Iterable[T], compute: Callable[[T], R], store: Callable[[R], None]) -> int:
        self._cancel.clear()
        loaded = queue.Queue(maxsize=self.queue_depth)
        computed = queue.Queue(maxsize=self.queue_depth)
        stop = threading.Event()
        errors = []
        truncated = threading.Event()

        def put(q, item) -> bool:
            while not stop.is_set():
                try:
                    q.put(item, timeout=self.poll_interval)
                    return True
                except queue.Full:
                    continue
            return False

        def get(q):
            while True:
                try:
                    return q.get(timeout=self.poll_interval)
                except queue.Empty:
                    if stop.is_set():
                        return _DONE

        def load():
            try:
                for item in source:
                    if self._cancel.is_set():
                        truncated.set()
                        break
                    if not put(loaded, item):
                        return
            except Exception as e:
                errors.append(e)
                stop.set()
            finally:
                put(loaded, _DONE)

        def work():
            try:
                while True:
                    item = get(loaded)
                    if item is _DONE:
                        break
                    if not put(computed, compute(item)):
                        return
            except Exception as e:
                errors.append(e)
                stop.set()
            finally:
                put(computed, _DONE)

        threads = [
            threading.Thread(target=load, name='codec-load', daemon=True),
            threading.Thread(target=work, name='codec-compute', daemon=True),
        ]
        logger.debug("Streaming scheduler starting (queue depth %d)", self.queue_depth)
        for thread in threads:
            thread.start()

        stored = 0
        try:
            while True:
                result = get(computed)
                if result is _DONE:
                    break
                store(result)
                stored += 1
        except BaseException:
            stop.set()
            raise
        finally:
            for thread in threads:
                thread.join()

        if errors:
            raise errors[0]
        if truncated.is_set():
            raise PipelineCancelled(f"Cancelled after {stored} blocks")
        logger.debug("Streaming scheduler stored %d blocks", stored)
        return stored


def get_scheduler(params: CodecParams) -> Runner:
    """Resolve the configured scheduling strategy to a runner."""
    if params.schedule == 'parallel':
        return partial(run_parallel, workers=params.workers)
    if params.schedule == 'streaming':
        return StreamingScheduler(params.queue_depth).run
    return run_sequential
