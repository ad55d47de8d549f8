"""Tests for shared projects, membership flows and shortcut bookkeeping."""
import pytest

from lifedash.planning.errors import MembershipConflict, NotFound, ValidationFailed
from lifedash.planning.shared import SharedProjectRepository, shared_project_path, to_document
from lifedash.planning.shortcuts import ShortcutSynchronizer
from lifedash.schemas.project import ProjectCreate
from lifedash.schemas.shared import LeaveKind, LeaveRequest, Member, SharedProject
from lifedash.store import FieldFilter

from conftest import make_goal, make_shared, run


async def seed(store, project: SharedProject):
    await store.set(shared_project_path(project.id), to_document(project))


async def shortcuts_of(store, uid, shared_id="sp1"):
    return await store.query(f"users/{uid}/projects", FieldFilter("sharedProjectId", "==", shared_id))


class TestShortcutSynchronizer:

    def test_ensure_is_idempotent(self, store):
        async def scenario():
            sync = ShortcutSynchronizer(store)
            shared = make_shared()
            first = await sync.ensure("u2", shared)
            second = await sync.ensure("u2", shared)
            return first, second, await shortcuts_of(store, "u2")

        first, second, found = run(scenario())
        assert first == second
        assert len(found) == 1
        data = found[0].data
        assert data["isShared"] is True
        assert data["isPrivate"] is False
        assert data["sharedProjectId"] == "sp1"
        assert data["goals"] == []
        assert data["title"] == "Team project"

    def test_remove_all_tolerates_zero_matches(self, store):
        assert run(ShortcutSynchronizer(store).remove_all("u2", "sp1")) == 0

    def test_remove_all_deletes_every_duplicate(self, store):
        async def scenario():
            for _ in range(2):
                await store.add("users/u2/projects", {"sharedProjectId": "sp1", "isShared": True})
            await store.add("users/u2/projects", {"sharedProjectId": "other", "isShared": True})
            removed = await ShortcutSynchronizer(store).remove_all("u2", "sp1")
            return removed, await store.list_collection("users/u2/projects")

        removed, remaining = run(scenario())
        assert removed == 2
        assert [s.data["sharedProjectId"] for s in remaining] == ["other"]


class TestSave:

    def test_owner_is_repaired_into_member_uids(self, store):
        async def scenario():
            project = make_shared(owner="u1", members=("u1",))
            project.member_uids = []
            await seed(store, project)
            saved = await SharedProjectRepository(store).save(project)
            return saved, await store.get(shared_project_path("sp1"))

        saved, stored = run(scenario())
        assert "u1" in saved.member_uids
        assert stored["memberUids"] == ["u1"]

    def test_progress_is_recomputed(self, store):
        async def scenario():
            project = make_shared()
            await seed(store, project)
            project.goals = [make_goal("g1", [True, False])]
            project.progress = 99
            await SharedProjectRepository(store).save(project)
            return await store.get(shared_project_path("sp1"))

        assert run(scenario())["progress"] == 50

    def test_absent_fields_are_not_written(self, store):
        async def scenario():
            project = make_shared()
            await seed(store, project)
            await SharedProjectRepository(store).save(project)
            return await store.get(shared_project_path("sp1"))

        stored = run(scenario())
        assert "createdAt" not in stored
        assert "avatarUrl" not in stored["members"][0]
        assert "id" not in stored

    def test_save_of_deleted_project_is_not_found(self, store):
        with pytest.raises(NotFound):
            run(SharedProjectRepository(store).save(make_shared()))


class TestCreateAndJoin:

    def test_create_makes_owner_member_and_shortcut(self, store, alice):
        async def scenario():
            repo = SharedProjectRepository(store)
            owner = Member(id="u1", nickname="Alice")
            project, shortcut_id = await repo.create(alice, owner, ProjectCreate(title="Team", is_private=False))
            stored = await repo.get(project.id)
            shortcut = await store.get(f"users/u1/projects/{shortcut_id}")
            return stored, shortcut

        stored, shortcut = run(scenario())
        assert stored.owner_uid == "u1"
        assert stored.member_uids == ["u1"]
        assert stored.member_emails == ["alice@example.com"]
        assert [m.id for m in stored.members] == ["u1"]
        assert shortcut["ownerUid"] == "u1"
        assert shortcut["sharedProjectId"] == stored.id

    def test_create_requires_title(self, store, alice):
        with pytest.raises(ValidationFailed):
            run(SharedProjectRepository(store).create(alice, Member(id="u1"), ProjectCreate(title=" ")))

    def test_join_adds_member_and_one_shortcut(self, store, bob):
        async def scenario():
            await seed(store, make_shared(emails=("alice@example.com",)))
            repo = SharedProjectRepository(store)
            member = Member(id="u2", nickname="Bob")
            first = await repo.join("sp1", bob, member)
            second = await repo.join("sp1", bob, member)
            return first, second, await repo.get("sp1"), await shortcuts_of(store, "u2")

        first, second, stored, shortcuts = run(scenario())
        assert first.already_member is False
        assert second.already_member is True
        assert first.shortcut_id == second.shortcut_id
        assert stored.member_uids == ["u1", "u2"]
        assert stored.member_emails == ["alice@example.com", "bob@example.com"]
        assert [m.label for m in stored.members] == ["nick-u1", "Bob"]
        assert len(shortcuts) == 1

    def test_join_missing_project(self, store, bob):
        with pytest.raises(NotFound):
            run(SharedProjectRepository(store).join("nope", bob, Member(id="u2")))


class TestLeave:

    def test_requires_confirmation(self, store, alice):
        async def scenario():
            await seed(store, make_shared())
            await SharedProjectRepository(store).leave("sp1", alice, LeaveRequest(confirm=False))

        with pytest.raises(ValidationFailed):
            run(scenario())
        assert run(store.get(shared_project_path("sp1"))) is not None

    def test_last_member_leaving_deletes_project(self, store, alice):
        async def scenario():
            repo = SharedProjectRepository(store)
            await seed(store, make_shared(owner="u1", members=("u1",)))
            await repo.shortcuts.ensure("u1", make_shared())
            result = await repo.leave("sp1", alice, LeaveRequest(confirm=True))
            return result, await repo.find("sp1"), await shortcuts_of(store, "u1")

        result, found, shortcuts = run(scenario())
        assert result.kind == LeaveKind.DELETE_AS_LAST_MEMBER
        assert result.project_deleted is True
        assert result.redirect_to == "/projects"
        assert found is None
        assert shortcuts == []

    def test_fetch_after_last_leave_is_not_found(self, store, alice):
        async def scenario():
            repo = SharedProjectRepository(store)
            await seed(store, make_shared())
            await repo.leave("sp1", alice, LeaveRequest(confirm=True))
            await repo.get("sp1")

        with pytest.raises(NotFound):
            run(scenario())

    def test_member_leaves(self, store, bob):
        async def scenario():
            repo = SharedProjectRepository(store)
            await seed(store, make_shared(members=("u1", "u2"), emails=("alice@example.com", "bob@example.com")))
            await repo.shortcuts.ensure("u2", make_shared())
            result = await repo.leave("sp1", bob, LeaveRequest(confirm=True))
            return result, await repo.get("sp1"), await shortcuts_of(store, "u2")

        result, stored, shortcuts = run(scenario())
        assert result.kind == LeaveKind.LEAVE_AS_MEMBER
        assert result.shortcuts_removed == 1
        assert stored.member_uids == ["u1"]
        assert [m.id for m in stored.members] == ["u1"]
        assert stored.member_emails == ["alice@example.com"]
        assert shortcuts == []

    def test_owner_hands_off(self, store, alice):
        async def scenario():
            repo = SharedProjectRepository(store)
            await seed(store, make_shared(members=("u1", "u2"), emails=("alice@example.com", "bob@example.com")))
            await repo.shortcuts.ensure("u1", make_shared())
            await repo.shortcuts.ensure("u2", make_shared())
            result = await repo.leave("sp1", alice, LeaveRequest(confirm=True, new_owner_uid="u2"))
            return result, await repo.get("sp1"), await shortcuts_of(store, "u1"), await shortcuts_of(store, "u2")

        result, stored, owner_shortcuts, member_shortcuts = run(scenario())
        assert result.kind == LeaveKind.HANDOFF
        assert result.new_owner_uid == "u2"
        assert stored.owner_uid == "u2"
        assert [m.id for m in stored.members] == ["u2"]
        assert stored.member_uids == ["u2"]
        assert stored.member_emails == ["bob@example.com"]
        assert owner_shortcuts == []
        assert len(member_shortcuts) == 1

    def test_handoff_without_selection_changes_nothing(self, store, alice):
        async def scenario():
            await seed(store, make_shared(members=("u1", "u2")))
            await SharedProjectRepository(store).leave("sp1", alice, LeaveRequest(confirm=True))

        with pytest.raises(ValidationFailed):
            run(scenario())
        stored = run(store.get(shared_project_path("sp1")))
        assert stored["ownerUid"] == "u1"
        assert stored["memberUids"] == ["u1", "u2"]

    def test_non_member_cannot_leave(self, store, carol):
        async def scenario():
            await seed(store, make_shared())
            await SharedProjectRepository(store).leave("sp1", carol, LeaveRequest(confirm=True))

        with pytest.raises(MembershipConflict):
            run(scenario())


class TestOwnerDelete:

    def test_owner_deletes_for_everyone(self, store):
        async def scenario():
            repo = SharedProjectRepository(store)
            await seed(store, make_shared(members=("u1", "u2")))
            for uid in ("u1", "u2"):
                await repo.shortcuts.ensure(uid, make_shared())
            removed = await repo.delete("sp1", "u1", confirm=True)
            return removed, await repo.find("sp1")

        removed, found = run(scenario())
        assert removed == 2
        assert found is None

    def test_member_cannot_delete(self, store):
        async def scenario():
            await seed(store, make_shared(members=("u1", "u2")))
            await SharedProjectRepository(store).delete("sp1", "u2", confirm=True)

        with pytest.raises(MembershipConflict):
            run(scenario())


class TestProfileSync:

    def test_rewrites_only_changed_projects(self, store):
        async def scenario():
            await seed(store, make_shared("sp1", members=("u1", "u2")))
            await seed(store, make_shared("sp2", owner="u2", members=("u2",)))
            unchanged = make_shared("sp3", owner="u3", members=("u3", "u2"))
            unchanged.members[1] = Member(id="u2", nickname="Bobby", name="Bobby")
            await seed(store, unchanged)
            await seed(store, make_shared("sp4", owner="u3", members=("u3",)))

            synced = await SharedProjectRepository(store).sync_profile("u2", "Bobby")
            return synced, await store.get(shared_project_path("sp1"))

        synced, sp1 = run(scenario())
        assert synced == 2
        assert sp1["members"][1]["nickname"] == "Bobby"
        assert sp1["members"][0]["nickname"] == "nick-u1"


class TestView:

    def test_non_member_must_join(self, store):
        view = SharedProjectRepository(store).view(make_shared(), "u9")
        assert view.join_required is True
        assert view.can_edit is False
        assert view.share_url.endswith("/shared/sp1")

    def test_member_view_lists_other_members(self, store):
        view = SharedProjectRepository(store).view(make_shared(members=("u1", "u2")), "u2")
        assert view.can_edit is True
        assert [m.id for m in view.other_members] == ["u1"]
