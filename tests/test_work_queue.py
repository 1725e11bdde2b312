import asyncio
import pytest

from crawlcore.work_queue import WorkQueue


def test_respects_concurrency_limit():
    state = {"active": 0, "peak": 0, "done": 0}

    async def job():
        state["active"] += 1
        state["peak"] = max(state["peak"], state["active"])
        await asyncio.sleep(0.01)
        state["active"] -= 1
        state["done"] += 1

    async def main():
        q = WorkQueue(2)
        for _ in range(6):
            q.submit(job)
        await q.wait_idle()
        return q

    q = asyncio.run(main())
    assert state["done"] == 6
    assert state["peak"] == 2
    assert q.pending == 0 and q.is_idle


def test_wait_idle_covers_work_submitted_while_waiting():
    ran = []

    async def main():
        q = WorkQueue(1)

        def spawn(level: int):
            async def job():
                await asyncio.sleep(0)
                ran.append(level)
                if level < 3:
                    q.submit(spawn(level + 1))
                    q.submit(spawn(level + 1))
            return job

        q.submit(spawn(0))
        await q.wait_idle()

    asyncio.run(main())
    # 1 + 2 + 4 + 8 jobs across four levels
    assert len(ran) == 15
    assert ran.count(3) == 8


def test_failing_task_is_contained(caplog):
    done = []

    async def bad():
        raise RuntimeError("kaboom")

    async def good():
        await asyncio.sleep(0)
        done.append(1)

    async def main():
        q = WorkQueue(3)
        q.submit(good)
        q.submit(bad)
        q.submit(good)
        await q.wait_idle()
        return q

    q = asyncio.run(main())
    assert done == [1, 1]
    assert q.pending == 0
    assert "Queued task failed" in caplog.text


def test_wait_idle_returns_immediately_without_work():
    async def main():
        q = WorkQueue(4)
        await asyncio.wait_for(q.wait_idle(), timeout=1)
        return q.running

    assert asyncio.run(main()) == 0


def test_cancel_all_stops_outstanding_tasks():
    async def main():
        q = WorkQueue(1)
        q.submit(lambda: asyncio.sleep(60))
        q.submit(lambda: asyncio.sleep(60))
        await asyncio.sleep(0)
        await q.cancel_all()
        await asyncio.wait_for(q.wait_idle(), timeout=1)
        return q.pending

    assert asyncio.run(main()) == 0


def test_rejects_zero_concurrency():
    with pytest.raises(ValueError):
        WorkQueue(0)
