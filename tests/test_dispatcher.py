import asyncio

import pytest

from journal.feedback.dispatcher import FeedbackDispatcher


@pytest.mark.asyncio
async def test_dispatch_runs_detached_and_drain_waits():
    dispatcher = FeedbackDispatcher()
    release = asyncio.Event()
    done: list[str] = []

    async def job():
        await release.wait()
        done.append("finished")

    assert dispatcher.dispatch(job()) is None
    assert dispatcher.pending == 1
    assert done == []

    release.set()
    await dispatcher.drain()

    assert done == ["finished"]
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_failed_job_is_logged_not_raised(caplog):
    dispatcher = FeedbackDispatcher()

    async def job():
        raise RuntimeError("boom")

    dispatcher.dispatch(job(), name="feedback:test")
    await dispatcher.drain()
    await asyncio.sleep(0)

    assert dispatcher.pending == 0
    assert "feedback:test" in caplog.text
