"""Tests for sequential id generation."""

import threading

from jobqueue.ids import SequentialIdGenerator


def test_ids_increase_as_bytes_and_hex():
    """Test that each id sorts after the previous one."""
    generator = SequentialIdGenerator()
    ids = [generator.create() for _ in range(2000)]

    assert ids == sorted(ids, key=lambda i: i.bytes)
    assert ids == sorted(ids, key=lambda i: i.hex)
    assert len(set(ids)) == len(ids)


def test_ids_increase_within_same_millisecond():
    """Test monotonicity when the clock does not move."""
    generator = SequentialIdGenerator(clock=lambda: 1_700_000_000_000)
    first = generator.create()
    second = generator.create()

    assert second.int == first.int + 1


def test_ids_increase_when_clock_goes_backwards():
    """Test that a clock step back does not break ordering."""
    times = iter([2_000, 1_000, 1_000, 3_000])
    generator = SequentialIdGenerator(clock=lambda: next(times))

    ids = [generator.create() for _ in range(4)]

    assert ids == sorted(ids, key=lambda i: i.bytes)
    assert len(set(ids)) == 4


def test_ids_unique_across_threads():
    """Test uniqueness under concurrent callers."""
    generator = SequentialIdGenerator()
    results = []
    lock = threading.Lock()

    def work():
        local = [generator.create() for _ in range(500)]
        with lock:
            results.extend(local)

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 4000
    assert len(set(results)) == 4000
