"""Tests for SkillGenerationWatcher."""

import asyncio

from siteforge.client.poller import PollReconciler
from siteforge.client.skills import SkillGenerationWatcher
from siteforge.domain.status import SkillStatus


def _watcher(backend, **kwargs):
    return SkillGenerationWatcher(backend, "s1", reconciler=PollReconciler(interval=0), **kwargs)


def test_start_polls_until_ready(fake_backend):
    fake_backend.add_skill()
    fake_backend.skill_script["s1"] = [SkillStatus.GENERATING, SkillStatus.GENERATING, SkillStatus.READY]
    seen = []

    async def scenario():
        watcher = _watcher(fake_backend, on_change=lambda s: seen.append(s.status))
        await watcher.start()
        return watcher, await watcher.wait()

    watcher, snapshot = asyncio.run(scenario())

    assert snapshot.status == SkillStatus.READY
    assert snapshot.artifact == {"prompt": "generated"}
    assert watcher.done and not watcher.timed_out
    assert seen == [SkillStatus.GENERATING] * 3 + [SkillStatus.READY]
    assert fake_backend.count("fetch_skill_status") == 3


def test_failed_is_terminal(fake_backend):
    fake_backend.add_skill()
    fake_backend.skill_script["s1"] = [SkillStatus.FAILED]

    async def scenario():
        watcher = _watcher(fake_backend)
        await watcher.start()
        return await watcher.wait()

    assert asyncio.run(scenario()).status == SkillStatus.FAILED
    assert fake_backend.count("fetch_skill_status") == 1


def test_gives_up_after_max_attempts(fake_backend):
    fake_backend.add_skill()

    async def scenario():
        watcher = _watcher(fake_backend, max_attempts=5)
        await watcher.start()
        await watcher.wait()
        return watcher

    watcher = asyncio.run(scenario())

    assert watcher.timed_out
    assert watcher.done
    assert watcher.status == SkillStatus.GENERATING
    assert fake_backend.count("fetch_skill_status") == 5


def test_resume_does_not_poll_finished_skill(fake_backend):
    fake_backend.add_skill(status=SkillStatus.READY)

    async def scenario():
        watcher = _watcher(fake_backend)
        return await watcher.resume(), watcher

    snapshot, watcher = asyncio.run(scenario())

    assert snapshot.status == SkillStatus.READY
    assert fake_backend.count("fetch_skill_status") == 1
    assert fake_backend.count("start_skill_generation") == 0


def test_close_stops_watching(fake_backend):
    fake_backend.add_skill()

    async def scenario():
        watcher = _watcher(fake_backend)
        await watcher.start()
        await asyncio.sleep(0)
        watcher.close()
        settled = fake_backend.count("fetch_skill_status")
        for _ in range(5):
            await asyncio.sleep(0)
        return settled

    settled = asyncio.run(scenario())
    assert fake_backend.count("fetch_skill_status") == settled
