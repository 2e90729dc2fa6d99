import asyncio

import pytest

from models.job import JobStatus, CustomerInfo, can_transition
from services.errors import StatusTransitionError, NotFoundError
from services.finalization import FinalizationCoordinator
from services.job_number import JobNumber
from services.job_store import JobStore
from services.location_store import LocationStore


def _create_job(db_path, number=JobNumber(16, 1, 1)):
    async def run():
        location = await LocationStore(db_path).get("loc-lis")
        return await JobStore(db_path).create(
            job_number=number, location=location,
            customer=CustomerInfo(name="TAP"), form={"customer_name": "TAP"},
        )
    return asyncio.run(run())


def test_lifecycle_table():
    assert can_transition(JobStatus.SUBMITTED, JobStatus.IN_PROGRESS)
    assert not can_transition(JobStatus.SUBMITTED, JobStatus.COMPLETED)
    for status in (JobStatus.COMPLETED, JobStatus.ON_HOLD, JobStatus.NEEDS_REVIEW, JobStatus.REJECTED):
        assert can_transition(JobStatus.IN_PROGRESS, status)
    assert can_transition(JobStatus.ON_HOLD, JobStatus.IN_PROGRESS)
    assert can_transition(JobStatus.NEEDS_REVIEW, JobStatus.IN_PROGRESS)
    for terminal in (JobStatus.COMPLETED, JobStatus.REJECTED):
        for status in JobStatus:
            assert not can_transition(terminal, status)


def test_walk_through_hold_to_completion(seeded_db):
    job = _create_job(seeded_db)

    async def run():
        coordinator = FinalizationCoordinator(db_path=seeded_db)
        seen = []
        for status in (JobStatus.IN_PROGRESS, JobStatus.ON_HOLD,
                       JobStatus.IN_PROGRESS, JobStatus.COMPLETED):
            seen.append((await coordinator.transition(job.job_id, status)).status)
        return seen

    assert asyncio.run(run())[-1] == JobStatus.COMPLETED


def test_skipping_in_progress_is_rejected(seeded_db):
    job = _create_job(seeded_db)
    coordinator = FinalizationCoordinator(db_path=seeded_db)
    with pytest.raises(StatusTransitionError):
        asyncio.run(coordinator.transition(job.job_id, JobStatus.COMPLETED))
    assert asyncio.run(coordinator.jobs.get(job.job_id)).status == JobStatus.SUBMITTED


def test_terminal_status_cannot_reopen(seeded_db):
    job = _create_job(seeded_db)

    async def run():
        coordinator = FinalizationCoordinator(db_path=seeded_db)
        await coordinator.transition(job.job_id, JobStatus.IN_PROGRESS)
        await coordinator.transition(job.job_id, JobStatus.REJECTED)
        await coordinator.transition(job.job_id, JobStatus.IN_PROGRESS)

    with pytest.raises(StatusTransitionError):
        asyncio.run(run())


def test_unknown_job(seeded_db):
    coordinator = FinalizationCoordinator(db_path=seeded_db)
    with pytest.raises(NotFoundError):
        asyncio.run(coordinator.transition(999, JobStatus.IN_PROGRESS))


def test_list_jobs_filters(seeded_db):
    first = _create_job(seeded_db, JobNumber(16, 1, 1))
    _create_job(seeded_db, JobNumber(16, 2, 1))

    async def run():
        store = JobStore(seeded_db)
        await store.update_status(first.job_id, JobStatus.IN_PROGRESS)
        return (
            await store.list_jobs(status="in-progress"),
            await store.list_jobs(search="16-2"),
            await store.list_jobs(location_id="loc-opo"),
            await store.find_by_number("16-2-1"),
        )

    in_progress, searched, elsewhere, found = asyncio.run(run())
    assert [j.job_number for j in in_progress] == ["16-1-1"]
    assert [j.job_number for j in searched] == ["16-2-1"]
    assert elsewhere == []
    assert found.job_number == "16-2-1"
