from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from ptg_nav.core.generator import TrajectoryGenerator
from ptg_nav.core.locking import ReadWriteLock
from ptg_nav.core.params import GeneratorParameters
from ptg_nav.families.registry import ArcFamily


def _in_thread(fn) -> threading.Event:
    done = threading.Event()

    def run():
        fn()
        done.set()

    threading.Thread(target=run, daemon=True).start()
    return done


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    lock.acquire_read()
    done = _in_thread(lambda: (lock.acquire_read(), lock.release_read()))
    assert done.wait(timeout=2.0)
    lock.release_read()


def test_writer_waits_for_readers():
    lock = ReadWriteLock()
    lock.acquire_read()
    done = _in_thread(lambda: (lock.acquire_write(), lock.release_write()))
    assert not done.wait(timeout=0.1)
    lock.release_read()
    assert done.wait(timeout=2.0)


def test_waiting_writer_blocks_new_readers():
    lock = ReadWriteLock()
    lock.acquire_read()
    writer_done = _in_thread(lambda: (lock.acquire_write(), lock.release_write()))
    assert not writer_done.wait(timeout=0.1)

    reader_done = _in_thread(lambda: (lock.acquire_read(), lock.release_read()))
    assert not reader_done.wait(timeout=0.1)

    lock.release_read()
    assert writer_done.wait(timeout=2.0)
    assert reader_done.wait(timeout=2.0)


def test_unbalanced_release_raises():
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()


def test_context_managers_release_on_error():
    lock = ReadWriteLock()
    with pytest.raises(ValueError):
        with lock.write_locked():
            raise ValueError("boom")
    with lock.read_locked():
        pass
    with lock.write_locked():
        pass


def test_concurrent_projection_is_consistent():
    gen = TrajectoryGenerator(family=ArcFamily(), params=GeneratorParameters(31, 3.0))
    gen.initialize()
    rng = np.random.default_rng(3)
    obstacles = rng.uniform(-3.0, 3.0, size=(50, 2))
    expected = gen.compute_free_distances(obstacles)

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda _: gen.compute_free_distances(obstacles), range(16)))

    for tp in results:
        np.testing.assert_array_equal(tp, expected)
