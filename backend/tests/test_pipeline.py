"""Tests for PipelineController against the in-memory backend."""

import asyncio
import logging

import pytest

from siteforge.client.errors import RemoteError
from siteforge.client.observation import Confirmed, Local
from siteforge.client.pipeline import PipelineController
from siteforge.client.poller import PollReconciler
from siteforge.client.records import Place
from siteforge.domain.invariants.exceptions import IllegalTransition, TemplateNotReady
from siteforge.domain.status import ProjectStatus


PLACE = Place(
    place_id="ChIJ-dental",
    name="Bright Smile Dental",
    website_url="https://brightsmile.example",
    formatted_address="1 Main St",
    rating=4.8,
    review_count=212,
    category="Dentist",
)

LATER_STAGES = [
    ProjectStatus.GBP_SCRAPED,
    ProjectStatus.WEBSITE_SCRAPED,
    ProjectStatus.IMAGES_ANALYZED,
    ProjectStatus.HTML_GENERATED,
    ProjectStatus.READY,
]


def _controller(backend, **kwargs):
    return PipelineController(backend, "p1", reconciler=PollReconciler(interval=0), **kwargs)


# ---------------------------------------------------------------------------
# Loading and polling
# ---------------------------------------------------------------------------

def test_created_project_is_not_polled(fake_backend):
    fake_backend.add_project(ProjectStatus.CREATED)

    async def scenario():
        controller = _controller(fake_backend)
        state = await controller.load()
        for _ in range(5):
            await asyncio.sleep(0)
        return controller, state

    controller, state = asyncio.run(scenario())

    assert state == Confirmed(ProjectStatus.CREATED)
    assert not controller.polling
    assert fake_backend.count("fetch_project_status") == 1


def test_ready_project_is_not_polled(fake_backend):
    fake_backend.add_project(ProjectStatus.READY)

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        await asyncio.sleep(0)
        return controller

    controller = asyncio.run(scenario())

    assert controller.status == ProjectStatus.READY
    assert fake_backend.count("fetch_project_status") == 1


def test_polls_once_per_stage_and_stops_at_ready(fake_backend):
    fake_backend.add_project(ProjectStatus.GBP_SELECTED)
    fake_backend.status_script["p1"] = [ProjectStatus.GBP_SELECTED] + LATER_STAGES
    observed = []

    async def scenario():
        controller = _controller(fake_backend, on_change=observed.append)
        await controller.load()
        await controller.settle()
        for _ in range(5):
            await asyncio.sleep(0)
        return controller

    controller = asyncio.run(scenario())

    assert fake_backend.count("fetch_project_status") == 1 + len(LATER_STAGES)
    assert controller.state == Confirmed(ProjectStatus.READY)
    assert [o.status for o in observed] == [ProjectStatus.GBP_SELECTED] + LATER_STAGES
    assert not controller.polling


def test_stale_observation_never_moves_status_backward(fake_backend):
    fake_backend.add_project(ProjectStatus.GBP_SCRAPED)
    fake_backend.status_script["p1"] = [
        ProjectStatus.WEBSITE_SCRAPED,
        ProjectStatus.GBP_SCRAPED,  # lagging replica
        ProjectStatus.WEBSITE_SCRAPED,
        ProjectStatus.READY,
    ]
    observed = []

    async def scenario():
        controller = _controller(fake_backend, on_change=observed.append)
        await controller.load()
        await controller.settle()
        return controller

    controller = asyncio.run(scenario())

    ranks = [o.status.rank for o in observed]
    assert ranks == sorted(ranks)
    assert ProjectStatus.GBP_SCRAPED not in [o.status for o in observed]
    assert controller.status == ProjectStatus.READY


def test_close_cancels_polling(fake_backend):
    fake_backend.add_project(ProjectStatus.IMAGES_ANALYZED)

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        await asyncio.sleep(0)
        controller.close()
        settled = fake_backend.count("fetch_project_status")
        for _ in range(5):
            await asyncio.sleep(0)
        return controller, settled

    controller, settled = asyncio.run(scenario())

    assert not controller.polling
    assert fake_backend.count("fetch_project_status") == settled


# ---------------------------------------------------------------------------
# Confirming a place
# ---------------------------------------------------------------------------

def test_confirm_is_optimistic_before_trigger_resolves(fake_backend):
    fake_backend.add_project(ProjectStatus.CREATED)
    fake_backend.add_template()

    async def scenario():
        fake_backend.gates["trigger_pipeline_start"] = asyncio.Event()
        controller = _controller(fake_backend)
        await controller.load()
        controller.select_place(PLACE)

        state = await controller.confirm("t1", primary_color="#0af")
        trigger_done = fake_backend.count("trigger_pipeline_start")

        controller.close()
        fake_backend.gates["trigger_pipeline_start"].set()
        await controller.settle()
        return controller, state, trigger_done

    controller, state, trigger_done = asyncio.run(scenario())

    assert state == Local(ProjectStatus.GBP_SELECTED)
    assert trigger_done in (0, 1)  # scheduled, not awaited
    assert fake_backend.count("save_selection") == 1
    assert fake_backend.count("trigger_pipeline_start") == 1
    assert controller.pending_place is None
    assert fake_backend.projects["p1"].selected_place_id == "ChIJ-dental"
    assert fake_backend.projects["p1"].primary_color == "#0af"


def test_confirm_then_poll_to_ready(fake_backend):
    fake_backend.add_project(ProjectStatus.CREATED)
    fake_backend.add_template()

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        fake_backend.status_script["p1"] = list(LATER_STAGES)
        await controller.confirm("t1", place=PLACE)
        await controller.settle()
        return controller

    controller = asyncio.run(scenario())

    assert controller.state == Confirmed(ProjectStatus.READY)
    assert fake_backend.count("fetch_project_status") == 1 + len(LATER_STAGES)


def test_failed_trigger_is_logged_and_keeps_transition(fake_backend, caplog):
    fake_backend.add_project(ProjectStatus.CREATED)
    fake_backend.add_template()
    fake_backend.failures["trigger_pipeline_start"] = RemoteError("webhook down", status_code=502)

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        await controller.confirm("t1", place=PLACE)
        controller.close()
        await controller.settle()
        return controller

    with caplog.at_level(logging.ERROR, logger="siteforge.client.pipeline"):
        controller = asyncio.run(scenario())

    assert controller.status == ProjectStatus.GBP_SELECTED
    assert "Pipeline trigger failed" in caplog.text


def test_template_without_pages_is_rejected(fake_backend):
    fake_backend.add_project(ProjectStatus.CREATED)
    fake_backend.add_template(pages=0)

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        await controller.confirm("t1", place=PLACE)

    with pytest.raises(TemplateNotReady):
        asyncio.run(scenario())

    assert fake_backend.count("save_selection") == 0


def test_missing_template_is_rejected(fake_backend):
    fake_backend.add_project(ProjectStatus.CREATED)

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        await controller.confirm("nope", place=PLACE)

    with pytest.raises(TemplateNotReady):
        asyncio.run(scenario())


def test_confirm_after_selection_is_illegal(fake_backend):
    fake_backend.add_project(ProjectStatus.GBP_SCRAPED)
    fake_backend.add_template()

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        controller.close()
        await controller.confirm("t1", place=PLACE)

    with pytest.raises(IllegalTransition):
        asyncio.run(scenario())

    assert fake_backend.count("fetch_template") == 0


def test_confirm_without_place_fails(fake_backend):
    fake_backend.add_project(ProjectStatus.CREATED)
    fake_backend.add_template()

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        controller.select_place(PLACE)
        controller.clear_selection()
        await controller.confirm("t1")

    with pytest.raises(ValueError):
        asyncio.run(scenario())


# ---------------------------------------------------------------------------
# Re-triggering
# ---------------------------------------------------------------------------

def test_start_pipeline_from_created_is_illegal(fake_backend):
    fake_backend.add_project(ProjectStatus.CREATED)

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        await controller.start_pipeline()

    with pytest.raises(IllegalTransition):
        asyncio.run(scenario())

    assert fake_backend.count("trigger_pipeline_start") == 0


def test_start_pipeline_can_be_repeated(fake_backend):
    fake_backend.add_project(ProjectStatus.WEBSITE_SCRAPED)

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        await controller.start_pipeline()
        await controller.start_pipeline()
        controller.close()
        return controller

    controller = asyncio.run(scenario())

    assert fake_backend.count("trigger_pipeline_start") == 2
    assert controller.status == ProjectStatus.WEBSITE_SCRAPED


def test_start_pipeline_surfaces_remote_errors(fake_backend):
    fake_backend.add_project(ProjectStatus.GBP_SELECTED)
    fake_backend.failures["trigger_pipeline_start"] = RemoteError("down", status_code=502)

    async def scenario():
        controller = _controller(fake_backend)
        await controller.load()
        try:
            await controller.start_pipeline()
        finally:
            controller.close()

    with pytest.raises(RemoteError):
        asyncio.run(scenario())
