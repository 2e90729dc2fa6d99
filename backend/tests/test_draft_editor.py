import asyncio

import pytest

from models.draft import DraftSave, JobForm
from models.identity import UserSession, UserRole
from services.draft_editor import DraftEditor
from services.draft_store import DraftStore
from services.errors import AllocationError, NotFoundError
from services.sequence_allocator import SequenceAllocator


class FailingAllocator(SequenceAllocator):
    async def next_sequence(self, facility_code):
        raise AllocationError(facility_code, "counter service offline")


class FailingDraftStore(DraftStore):
    async def save(self, owner_id, payload, draft_id=None):
        raise RuntimeError("disk full")


def test_only_emergency_procedures_is_never_saved(seeded_db, session):
    async def run():
        editor = DraftEditor(session, db_path=seeded_db, debounce_s=0.01)
        editor.update_form({"emergency_procedures": "Evacuate via gate 3"})
        await asyncio.sleep(0.1)
        result = await editor.change_tab("requirements")
        editor.close()
        return editor, result, await DraftStore(seeded_db).list_for_owner(session.user_id)

    editor, result, drafts = asyncio.run(run())
    assert result is None
    assert editor.draft_id is None
    assert editor.resume_query is None
    assert drafts == []


def test_first_save_captures_id_and_later_saves_update_in_place(seeded_db, session):
    async def run():
        store = DraftStore(seeded_db)
        editor = DraftEditor(session, store=store, db_path=seeded_db, debounce_s=0.01)
        editor.update_form({"customer_name": "TAP Air Portugal"})
        await asyncio.sleep(0.1)
        await editor.wait_idle()
        first_id = editor.draft_id

        editor.update_form({"contract_number": "C-2026-118"})
        await asyncio.sleep(0.1)
        await editor.wait_idle()
        editor.close()
        return editor, first_id, await store.list_for_owner(session.user_id), await store.get(first_id)

    editor, first_id, drafts, stored = asyncio.run(run())
    assert first_id is not None
    assert editor.draft_id == first_id
    assert editor.resume_query == f"?draft={first_id}"
    assert editor.last_saved_at is not None
    assert [d.draft_id for d in drafts] == [first_id]
    assert stored.form.contract_number == "C-2026-118"
    assert stored.title == "Job for TAP Air Portugal"


def test_tab_change_saves_immediately_with_new_tab(seeded_db, session):
    async def run():
        editor = DraftEditor(session, db_path=seeded_db, debounce_s=60)
        editor.update_form({"customer_name": "SATA"})
        saved = await editor.change_tab("requirements")
        editor.close()
        return saved

    saved = asyncio.run(run())
    assert saved.current_tab == "requirements"
    assert saved.form.customer_name == "SATA"


def test_load_restores_form_tab_and_candidates(seeded_db, session):
    async def run():
        store = DraftStore(seeded_db)
        stored = await store.save(session.user_id, DraftSave(
            current_tab="staff",
            form=JobForm(customer_name="Ryanair", location_id="loc-lis",
                         requirements=["visual", "dimensional"]),
        ))
        await store.set_job_number(stored.draft_id, session.user_id, "16-4-1")
        editor = DraftEditor(session, store=store, db_path=seeded_db)
        await editor.load(stored.draft_id)
        editor.close()
        return editor

    editor = asyncio.run(run())
    assert editor.current_tab == "staff"
    assert editor.form.customer_name == "Ryanair"
    assert editor.form.model_dump()["requirements"] == ["visual", "dimensional"]
    assert editor.job_number == "16-4-1"
    assert editor.candidates
    assert editor.candidates[0].location_matches


def test_load_rejects_other_users_draft(seeded_db, session):
    async def run():
        store = DraftStore(seeded_db)
        stored = await store.save("someone-else", DraftSave(form=JobForm(customer_name="X")))
        editor = DraftEditor(session, store=store, db_path=seeded_db)
        try:
            await editor.load(stored.draft_id)
        finally:
            editor.close()

    with pytest.raises(NotFoundError):
        asyncio.run(run())


def test_select_location_allocates_and_reallocates_on_facility_change(seeded_db, session):
    async def run():
        editor = DraftEditor(session, db_path=seeded_db, debounce_s=60)
        editor.update_form({"customer_name": "TAP", "inspector_ids": ["insp-001"]})
        first = await editor.select_location("loc-lis")
        cleared = list(editor.form.inspector_ids)
        same = await editor.select_location("loc-lis")
        other = await editor.select_location("loc-opo")
        saved = await editor.flush()
        editor.close()
        return editor, first, cleared, same, other, saved

    editor, first, cleared, same, other, saved = asyncio.run(run())
    assert first == "16-1-1"
    assert cleared == []
    assert same == "16-1-1"
    assert other == "21-1-1"
    assert editor.form.job_location == "Porto Line Station"
    assert saved.job_number == "21-1-1"
    assert saved.location_id == "loc-opo"


def test_allocation_failure_falls_back_to_placeholder(seeded_db, session):
    async def run():
        editor = DraftEditor(session, allocator=FailingAllocator(seeded_db),
                             db_path=seeded_db, debounce_s=60)
        number = await editor.select_location("loc-lis")
        saved = await editor.flush()
        editor.close()
        return editor, number, saved

    editor, number, saved = asyncio.run(run())
    assert number == "16-TEMP-1"
    assert editor.job_number_provisional
    assert "offline" in editor.allocation_warning
    assert saved.job_number == "16-TEMP-1"
    assert saved.job_number_provisional


def test_unknown_location_is_not_found(seeded_db, session):
    async def run():
        editor = DraftEditor(session, db_path=seeded_db)
        try:
            await editor.select_location("loc-nowhere")
        finally:
            editor.close()

    with pytest.raises(NotFoundError):
        asyncio.run(run())


def test_repeated_save_failures_raise_warning(seeded_db, session):
    async def run():
        editor = DraftEditor(session, store=FailingDraftStore(seeded_db),
                             db_path=seeded_db, debounce_s=0.01)
        editor.update_form({"customer_name": "TAP"})
        await asyncio.sleep(0.3)
        editor.close()
        await editor.wait_idle()
        return editor

    editor = asyncio.run(run())
    assert editor.save_warning is not None
    assert editor.draft_id is None


def test_closed_editor_does_not_save(seeded_db):
    owner = UserSession(user_id="user-closed", role=UserRole.INSPECTOR)

    async def run():
        editor = DraftEditor(owner, db_path=seeded_db, debounce_s=0.01)
        editor.close()
        editor.update_form({"customer_name": "Late edit"})
        await asyncio.sleep(0.1)
        return await DraftStore(seeded_db).list_for_owner(owner.user_id)

    assert asyncio.run(run()) == []


class SlowDraftStore(DraftStore):
    async def save(self, owner_id, payload, draft_id=None):
        await asyncio.sleep(0.1)
        return await super().save(owner_id, payload, draft_id=draft_id)


class SlowAllocator(SequenceAllocator):
    async def next_sequence(self, facility_code):
        await asyncio.sleep(0.1)
        return await super().next_sequence(facility_code)


def test_emptying_unsaved_form_drops_pending_save(seeded_db, session):
    async def run():
        editor = DraftEditor(session, db_path=seeded_db, debounce_s=0.05)
        editor.update_form({"customer_name": "TAP"})
        await asyncio.sleep(0.01)
        editor.update_form({"customer_name": ""})
        await asyncio.sleep(0.2)
        await editor.wait_idle()
        editor.close()
        return editor, await DraftStore(seeded_db).list_for_owner(session.user_id)

    editor, drafts = asyncio.run(run())
    assert editor.draft_id is None
    assert drafts == []


def test_save_keeps_allocated_number(seeded_db, session):
    async def run():
        editor = DraftEditor(session, db_path=seeded_db, debounce_s=60)
        editor.update_form({"customer_name": "TAP"})
        await editor.select_location("loc-lis")
        await editor.flush()
        editor.update_form({"contract_number": "C-7"})
        saved = await editor.flush()
        plain = await editor.store.save(session.user_id, DraftSave(form=saved.form), draft_id=saved.draft_id)
        editor.close()
        return saved, plain

    saved, plain = asyncio.run(run())
    assert saved.job_number == "16-1-1"
    assert saved.form.contract_number == "C-7"
    assert plain.job_number == "16-1-1"


def test_close_during_save_ignores_late_result(seeded_db, session):
    async def run():
        store = SlowDraftStore(seeded_db)
        editor = DraftEditor(session, store=store, db_path=seeded_db, debounce_s=0.01)
        editor.update_form({"customer_name": "TAP"})
        await asyncio.sleep(0.05)
        assert editor.is_saving
        editor.close()
        await editor.wait_idle()
        return editor, await store.list_for_owner(session.user_id)

    editor, drafts = asyncio.run(run())
    assert editor.draft_id is None
    assert editor.last_saved_at is None
    assert [d.title for d in drafts] == ["Job for TAP"]


def test_close_during_allocation_ignores_late_number(seeded_db, session):
    async def run():
        allocator = SlowAllocator(seeded_db)
        editor = DraftEditor(session, allocator=allocator, db_path=seeded_db, debounce_s=0.01)
        pending = asyncio.get_running_loop().create_task(editor.select_location("loc-lis"))
        await asyncio.sleep(0.05)
        editor.close()
        returned = await pending
        await asyncio.sleep(0.05)
        return (editor, returned, await allocator.peek(16),
                await DraftStore(seeded_db).list_for_owner(session.user_id))

    editor, returned, last_issued, drafts = asyncio.run(run())
    assert returned is None
    assert editor.job_number is None
    assert editor.candidates == []
    assert editor.draft_id is None
    assert last_issued == 1
    assert drafts == []
