"""
End-to-end tests: a DashboardSession talking to the in-process simulator
over httpx, with failures forced through the simulator's fault injector.
"""

import httpx
import pytest

from api.main import create_app
from client.overlay import OverlayStore
from client.session import DashboardSession
from core.errors import NotFoundError, TransientNetworkError
from core.models import VALID_STAGES
from core.ordering import is_contiguous


def _orders(jobs):
    return {job.id: job.order for job in jobs}


def _other_stage(stage: str) -> str:
    return next(candidate for candidate in VALID_STAGES if candidate != stage)


class TestReads:
    @pytest.mark.asyncio
    async def test_initialize_opens_gate(self, dashboard):
        assert await dashboard.initialize() is True
        assert dashboard.gate.is_ready

    @pytest.mark.asyncio
    async def test_load_jobs_and_candidates(self, dashboard):
        await dashboard.initialize()

        jobs = await dashboard.load_jobs()
        candidates = await dashboard.load_candidates()

        assert [job.order for job in jobs] == [1, 2, 3, 4, 5]
        assert len(candidates) == 12
        assert len(dashboard.jobs) == 5

    @pytest.mark.asyncio
    async def test_read_survives_transient_failures(self, dashboard, running_simulator):
        running_simulator.state.faults.fail_next("jobs.list", times=2)

        jobs = await dashboard.load_jobs()

        assert len(jobs) == 5

    @pytest.mark.asyncio
    async def test_exhausted_read_keeps_stale_board(self, dashboard, running_simulator):
        await dashboard.load_jobs()
        running_simulator.state.faults.fail_next("jobs.list", times=3)

        jobs = await dashboard.load_jobs()

        assert [job.id for job in jobs] == [f"job-{i}" for i in range(1, 6)]

    @pytest.mark.asyncio
    async def test_filters_are_sent(self, dashboard):
        jobs = await dashboard.load_jobs(search="stack")
        assert [job.title for job in jobs] == ["Full Stack Engineer"]

    @pytest.mark.asyncio
    async def test_cold_start(self, test_settings):
        slow = test_settings.model_copy(update={"simulator_startup_delay_seconds": 0.2})
        app = create_app(slow)

        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with DashboardSession(
                settings=slow, transport=transport, overlay=OverlayStore(":memory:")
            ) as session:
                assert not await session.backend.check_ready()

                await session.initialize(timeout=2.0, poll_interval=0.05)
                jobs = await session.load_jobs()

        assert len(jobs) == 5


class TestStageMoves:
    @pytest.mark.asyncio
    async def test_successful_move(self, dashboard):
        candidate = (await dashboard.load_candidates())[0]
        new_stage = _other_stage(candidate.stage)

        rendered = await dashboard.update_candidate_stage(candidate.id, new_stage)

        assert rendered.stage == new_stage
        assert dashboard.candidates.get(candidate.id).stage == new_stage
        assert [entry.stage for entry in await dashboard.load_timeline(candidate.id)] == [new_stage]

    @pytest.mark.asyncio
    async def test_failed_move_rolls_back_memory_but_renders_intent(
        self, dashboard, running_simulator
    ):
        candidate = (await dashboard.load_candidates())[0]
        new_stage = _other_stage(candidate.stage)
        running_simulator.state.faults.fail_next("candidates.update")

        rendered = await dashboard.update_candidate_stage(candidate.id, new_stage)

        assert rendered.stage == new_stage
        assert dashboard.candidates.get(candidate.id).stage == candidate.stage
        assert dashboard.get_persisted_stage_changes()[candidate.id] == new_stage

        # Backend still has the old stage; the overlay wins on reload
        reloaded = {c.id: c for c in await dashboard.load_candidates()}
        assert reloaded[candidate.id].stage == new_stage
        backend_copy = await dashboard.backend.get_candidate(candidate.id)
        assert backend_copy.stage == candidate.stage


    @pytest.mark.asyncio
    async def test_move_before_candidates_load(self, dashboard):
        backend_copy = (await dashboard.backend.list_candidates()).value.data[0]
        new_stage = _other_stage(backend_copy.stage)

        rendered = await dashboard.update_candidate_stage(backend_copy.id, new_stage)

        assert rendered.stage == new_stage
        assert dashboard.get_persisted_stage_changes()[backend_copy.id] == new_stage
        assert (await dashboard.backend.get_candidate(backend_copy.id)).stage == new_stage

    @pytest.mark.asyncio
    async def test_failed_move_before_candidates_load(self, dashboard, running_simulator):
        backend_copy = (await dashboard.backend.list_candidates()).value.data[0]
        new_stage = _other_stage(backend_copy.stage)
        running_simulator.state.faults.fail_next("candidates.update")

        rendered = await dashboard.update_candidate_stage(backend_copy.id, new_stage)

        assert rendered is None
        reloaded = {c.id: c for c in await dashboard.load_candidates()}
        assert reloaded[backend_copy.id].stage == new_stage


class TestReorder:
    @pytest.mark.asyncio
    async def test_successful_reorder(self, dashboard):
        await dashboard.load_jobs()

        outcome = await dashboard.reorder_jobs("job-1", 1, 3)

        assert outcome.committed
        assert _orders(dashboard.jobs) == {
            "job-2": 1, "job-3": 2, "job-1": 3, "job-4": 4, "job-5": 5,
        }
        assert dashboard.jobs.ids() == ["job-2", "job-3", "job-1", "job-4", "job-5"]

    @pytest.mark.asyncio
    async def test_failed_reorder_converges_to_backend(self, dashboard, running_simulator):
        await dashboard.load_jobs()
        running_simulator.state.faults.fail_next("jobs.reorder")

        outcome = await dashboard.reorder_jobs("job-1", 1, 5)

        assert not outcome.committed
        assert outcome.error.message == "Reorder operation failed - please retry"
        assert _orders(dashboard.jobs) == {f"job-{i}": i for i in range(1, 6)}

    @pytest.mark.asyncio
    async def test_stale_reorder_converges_to_backend(self, dashboard):
        await dashboard.load_jobs()

        outcome = await dashboard.reorder_jobs("job-2", 4, 1)

        assert not outcome.committed
        assert outcome.error.status_code == 409
        assert is_contiguous(_orders(dashboard.jobs))
        assert dashboard.jobs.get("job-2").order == 2

    @pytest.mark.asyncio
    async def test_reorder_on_title_sorted_board(self, dashboard):
        await dashboard.load_jobs(sort="title")
        titles_before = [job.title for job in dashboard.jobs]

        outcome = await dashboard.reorder_jobs("job-1", 1, 4)

        assert outcome.committed
        assert [job.title for job in dashboard.jobs] == titles_before
        assert dashboard.jobs.get("job-1").order == 4
        assert is_contiguous(_orders(dashboard.jobs))

    @pytest.mark.asyncio
    async def test_board_stays_contiguous(self, dashboard, running_simulator):
        await dashboard.load_jobs()
        running_simulator.state.faults.fail_next("jobs.reorder")

        for job_id, to_order in [("job-5", 1), ("job-2", 4), ("job-4", 2)]:
            current = dashboard.jobs.get(job_id).order
            await dashboard.reorder_jobs(job_id, current, to_order)
            assert is_contiguous(_orders(dashboard.jobs))


class TestOtherWrites:
    @pytest.mark.asyncio
    async def test_add_note(self, dashboard):
        candidate = (await dashboard.load_candidates())[0]

        note = await dashboard.add_note(candidate.id, "Great culture fit", "Priya")

        assert note.content == "Great culture fit"
        assert [n.content for n in await dashboard.load_notes(candidate.id)] == ["Great culture fit"]
        assert dashboard.get_persisted_notes(candidate.id)[0]["author"] == "Priya"

    @pytest.mark.asyncio
    async def test_failed_note_raises_but_is_journaled(self, dashboard, running_simulator):
        candidate = (await dashboard.load_candidates())[0]
        running_simulator.state.faults.fail_next("candidates.add_note")

        with pytest.raises(TransientNetworkError):
            await dashboard.add_note(candidate.id, "Lost in transit")

        assert await dashboard.load_notes(candidate.id) == []
        assert dashboard.get_persisted_notes(candidate.id)[0]["content"] == "Lost in transit"

    @pytest.mark.asyncio
    async def test_update_candidate_details(self, dashboard):
        candidate = (await dashboard.load_candidates())[0]

        updated = await dashboard.update_candidate(
            candidate.id, {"name": "Renamed Person", "jobId": "job-3"}
        )

        assert updated.name == "Renamed Person"
        assert updated.job_id == "job-3"
        assert dashboard.candidates.get(candidate.id).name == "Renamed Person"
        assert (await dashboard.backend.get_candidate(candidate.id)).job_id == "job-3"

    @pytest.mark.asyncio
    async def test_update_missing_candidate_raises(self, dashboard):
        with pytest.raises(NotFoundError):
            await dashboard.update_candidate("nobody", {"name": "Ghost"})

    @pytest.mark.asyncio
    async def test_toggle_job_status(self, dashboard):
        jobs = await dashboard.load_jobs()
        before = jobs[0].status

        jobs = await dashboard.toggle_job_status(jobs[0].id)

        assert jobs[0].status != before
        assert jobs[0].order == 1

    @pytest.mark.asyncio
    async def test_create_job(self, dashboard):
        job = await dashboard.create_job({"title": "Site Reliability Engineer"})

        assert job.order == 6
        assert is_contiguous(_orders(await dashboard.load_jobs()))

    @pytest.mark.asyncio
    async def test_create_and_delete_candidate(self, dashboard, running_simulator):
        await dashboard.load_candidates()
        candidate = await dashboard.create_candidate(
            {"name": "Grace Hopper", "email": "grace@example.com", "jobId": "job-1"}
        )
        running_simulator.state.faults.fail_next("candidates.update")
        await dashboard.update_candidate_stage(candidate.id, "offer")

        await dashboard.delete_candidate(candidate.id)

        assert candidate.id not in dashboard.candidates
        assert candidate.id not in dashboard.get_persisted_stage_changes()
        assert len(await dashboard.load_candidates()) == 12
