"""
Unit tests for WorkerPool.
"""
import asyncio

import pytest

from subnet_scanner.discovery.worker_pool import WorkerPool


@pytest.mark.asyncio
async def test_runs_every_item_once():
    pool = WorkerPool(max_workers=4, name="test")
    seen = []

    async def job(item):
        await asyncio.sleep(0)
        seen.append(item)

    pool.map(job, range(20))
    await pool.join()

    assert sorted(seen) == list(range(20))
    assert pool.submitted == 20
    assert pool.completed == 20
    assert pool.failed == 0
    assert not pool.running


@pytest.mark.asyncio
async def test_jobs_start_in_item_order():
    pool = WorkerPool(max_workers=3)
    started = []

    async def job(item):
        started.append(item)
        await asyncio.sleep(0.001 * (item % 3))

    pool.map(job, range(12))
    await pool.join()

    assert started == list(range(12))


@pytest.mark.asyncio
async def test_concurrency_is_bounded():
    pool = WorkerPool(max_workers=5)
    in_flight = 0
    peak = 0

    async def job(item):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.005)
        in_flight -= 1

    pool.map(job, range(40))
    await pool.join()

    assert peak == 5


@pytest.mark.asyncio
async def test_worker_count_never_exceeds_item_count():
    pool = WorkerPool(max_workers=50)

    async def job(item):
        await asyncio.sleep(0)

    pool.map(job, [1, 2])
    assert len(pool._workers) == 2
    await pool.join()


@pytest.mark.asyncio
async def test_failing_job_does_not_stop_the_pool():
    pool = WorkerPool(max_workers=2)
    done = []

    async def job(item):
        if item == 3:
            raise RuntimeError("bad item")
        done.append(item)

    pool.map(job, range(6))
    await pool.join()

    assert sorted(done) == [0, 1, 2, 4, 5]
    assert pool.failed == 1
    assert pool.completed == 5


@pytest.mark.asyncio
async def test_cancel_all_abandons_in_flight_and_skips_pending():
    pool = WorkerPool(max_workers=2)
    started = []
    finished = []

    async def job(item):
        started.append(item)
        await asyncio.sleep(60)
        finished.append(item)

    pool.map(job, range(10))
    await asyncio.sleep(0.01)
    await asyncio.wait_for(pool.cancel_all(), timeout=2)

    assert started == [0, 1]
    assert finished == []
    assert pool.cancelled
    assert not pool.running
    await asyncio.wait_for(pool.join(), timeout=1)


@pytest.mark.asyncio
async def test_cancel_all_is_idempotent():
    pool = WorkerPool(max_workers=1)

    async def job(item):
        await asyncio.sleep(60)

    pool.map(job, range(3))
    await asyncio.sleep(0)
    await pool.cancel_all()
    await pool.cancel_all()
    assert pool.cancelled


@pytest.mark.asyncio
async def test_cancelled_pool_cannot_be_reused():
    pool = WorkerPool(max_workers=1)
    await pool.cancel_all()

    async def job(item):
        pass

    with pytest.raises(RuntimeError):
        pool.map(job, [1])


@pytest.mark.asyncio
async def test_pool_runs_one_batch():
    pool = WorkerPool(max_workers=1)

    async def job(item):
        pass

    pool.map(job, [1])
    with pytest.raises(RuntimeError):
        pool.map(job, [2])
    await pool.join()


@pytest.mark.asyncio
async def test_lazy_generator_input():
    pool = WorkerPool(max_workers=3)
    pulled = []

    def items():
        for i in range(100):
            pulled.append(i)
            yield i

    async def job(item):
        await asyncio.sleep(60)

    pool.map(job, items())
    await asyncio.sleep(0.01)
    assert pulled == [0, 1, 2]
    await pool.cancel_all()


def test_rejects_zero_workers():
    with pytest.raises(ValueError):
        WorkerPool(max_workers=0)


@pytest.mark.asyncio
async def test_worker_without_batch_raises():
    pool = WorkerPool(max_workers=1)
    with pytest.raises(RuntimeError):
        await pool._worker()
