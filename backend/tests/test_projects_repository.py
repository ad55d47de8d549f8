"""Tests for the private project list and per-user settings."""
import math

import pytest

from lifedash.planning.errors import NotFound, ValidationFailed
from lifedash.planning.identity import Identity
from lifedash.planning.profiles import CapacityRepository, ProfileRepository, capacity_path, profile_path
from lifedash.planning.projects import ProjectRepository, project_path
from lifedash.planning.shared import shared_project_path
from lifedash.schemas.profile import ProfileUpdate
from lifedash.schemas.project import ProjectCreate, ProjectUpdate
from lifedash.schemas.shared import Member
from lifedash.store import LocalBlobStore, StoreError

from conftest import make_goal, run


class TestCreateAndList:

    def test_private_project(self, store, alice):
        async def scenario():
            repo = ProjectRepository(store)
            project = await repo.create(alice, ProjectCreate(title=" Thesis ", deadline="2024-09-01"))
            return project, await store.get(project_path("u1", project.id))

        project, stored = run(scenario())
        assert project.title == "Thesis"
        assert project.is_private is True
        assert stored["goals"] == []
        assert stored["progress"] == 0
        assert stored["deadline"] == "2024-09-01"

    def test_title_required(self, store, alice):
        with pytest.raises(ValidationFailed):
            run(ProjectRepository(store).create(alice, ProjectCreate(title="")))

    def test_shared_project_returns_shortcut(self, store, alice):
        async def scenario():
            repo = ProjectRepository(store)
            shortcut = await repo.create(
                alice, ProjectCreate(title="Team", is_private=False), Member(id="u1", nickname="Alice")
            )
            shared = await repo.shared.get(shortcut.shared_project_id)
            return shortcut, shared

        shortcut, shared = run(scenario())
        assert shortcut.is_shared is True
        assert shortcut.is_private is False
        assert shortcut.owner_uid == "u1"
        assert shared.owner_uid == "u1"
        assert shared.members[0].nickname == "Alice"

    def test_list_is_newest_first_with_live_owner(self, store):
        async def scenario():
            await store.set("users/u2/projects/old", {"title": "Old", "createdAt": "2024-01-01T00:00:00"})
            await store.set("users/u2/projects/new", {"title": "New", "createdAt": "2024-05-01T00:00:00"})
            await store.set("users/u2/projects/link", {
                "title": "Team", "createdAt": "2024-03-01T00:00:00",
                "isShared": True, "sharedProjectId": "sp1", "ownerUid": "u1",
            })
            await store.set("users/u2/projects/dangling", {
                "title": "Gone", "createdAt": "2023-01-01T00:00:00",
                "isShared": True, "sharedProjectId": "missing", "ownerUid": "u5",
            })
            await store.set(shared_project_path("sp1"), {"ownerUid": "u2", "memberUids": ["u2"]})
            return await ProjectRepository(store).list("u2")

        projects = run(scenario())
        assert [p.id for p in projects] == ["new", "link", "old", "dangling"]
        assert projects[1].owner_uid == "u2"
        assert projects[3].owner_uid == "u5"

    def test_missing_project(self, store):
        with pytest.raises(NotFound):
            run(ProjectRepository(store).get("u1", "nope"))


class TestUpdate:

    def test_edit_private_card(self, store, alice):
        async def scenario():
            repo = ProjectRepository(store)
            project = await repo.create(alice, ProjectCreate(title="A"))
            await repo.update("u1", project.id, ProjectUpdate(title="B", allocated_hours_per_week=4))
            return await repo.get("u1", project.id)

        updated = run(scenario())
        assert updated.title == "B"
        assert updated.allocated_hours_per_week == 4

    def test_shortcut_edit_reaches_shared_project(self, store, alice):
        async def scenario():
            repo = ProjectRepository(store)
            shortcut = await repo.create(alice, ProjectCreate(title="Team", is_private=False))
            await repo.update(
                "u1", shortcut.id,
                ProjectUpdate(title="Renamed", deadline="2024-08-01", is_private=True),
            )
            return await repo.get("u1", shortcut.id), await repo.shared.get(shortcut.shared_project_id)

        shortcut, shared = run(scenario())
        assert shortcut.title == "Renamed"
        assert shortcut.is_private is False
        assert shared.title == "Renamed"
        assert shared.deadline == "2024-08-01"

    def test_shortcut_edit_after_shared_delete_writes_nothing(self, store, alice):
        async def scenario():
            repo = ProjectRepository(store)
            shortcut = await repo.create(alice, ProjectCreate(title="Team", is_private=False))
            await store.delete(shared_project_path(shortcut.shared_project_id))
            with pytest.raises(NotFound):
                await repo.update("u1", shortcut.id, ProjectUpdate(title="Renamed"))
            return await repo.get("u1", shortcut.id)

        assert run(scenario()).title == "Team"

    def test_save_recomputes_progress(self, store, alice):
        async def scenario():
            repo = ProjectRepository(store)
            project = await repo.create(alice, ProjectCreate(title="A"))
            project.goals = [make_goal("g1", [True, True, True])]
            await repo.save("u1", project)
            return await store.get(project_path("u1", project.id))

        stored = run(scenario())
        assert stored["progress"] == 100
        assert "completedAt" not in stored["goals"][0]["tasks"][0]


class TestDelete:

    def test_requires_confirmation(self, store, alice):
        async def scenario():
            repo = ProjectRepository(store)
            project = await repo.create(alice, ProjectCreate(title="A"))
            await repo.delete("u1", project.id, confirm=False)

        with pytest.raises(ValidationFailed):
            run(scenario())

    def test_private_delete(self, store, alice):
        async def scenario():
            repo = ProjectRepository(store)
            project = await repo.create(alice, ProjectCreate(title="A"))
            await repo.delete("u1", project.id, confirm=True)
            return await repo.list("u1")

        assert run(scenario()) == []

    def test_owner_deleting_shortcut_deletes_shared_project(self, store, alice, bob):
        async def scenario():
            repo = ProjectRepository(store)
            shortcut = await repo.create(alice, ProjectCreate(title="Team", is_private=False))
            await repo.shared.join(shortcut.shared_project_id, bob, Member(id="u2", nickname="Bob"))
            await repo.delete("u1", shortcut.id, confirm=True)
            return (
                await repo.shared.find(shortcut.shared_project_id),
                await repo.list("u1"),
                await repo.list("u2"),
            )

        shared, mine, theirs = run(scenario())
        assert shared is None
        assert mine == []
        assert theirs == []

    def test_member_deleting_shortcut_keeps_membership(self, store, alice, bob):
        async def scenario():
            repo = ProjectRepository(store)
            shortcut = await repo.create(alice, ProjectCreate(title="Team", is_private=False))
            joined = await repo.shared.join(shortcut.shared_project_id, bob, Member(id="u2"))
            await repo.delete("u2", joined.shortcut_id, confirm=True)
            return await repo.shared.get(shortcut.shared_project_id), await repo.list("u2")

        shared, theirs = run(scenario())
        assert "u2" in shared.member_uids
        assert theirs == []


class TestProfiles:

    def test_ensure_creates_once(self, store, alice):
        async def scenario():
            repo = ProfileRepository(store)
            created = await repo.ensure(alice)
            await store.set(profile_path("u1"), {"displayName": "changed"}, merge=True)
            again = await repo.ensure(alice)
            return created, again

        created, again = run(scenario())
        assert created.display_name == "alice"
        assert created.created_at
        assert again.display_name == "changed"

    def test_ensure_without_email(self, store):
        profile = run(ProfileRepository(store).ensure(Identity(uid="u4")))
        assert profile.display_name == "user"

    def test_member_for_uses_preference_first(self, store, alice):
        async def scenario():
            repo = ProfileRepository(store)
            await repo.ensure(alice)
            await repo.save(alice, ProfileUpdate(nickname="Ally", photo_url="https://img/a.png"))
            before = await repo.member_for(alice)
            await repo.set_display_name("u1", "Al")
            after = await repo.member_for(alice)
            return before, after

        before, after = run(scenario())
        assert before.nickname == "Ally"
        assert before.avatar_url == "https://img/a.png"
        assert after.nickname == "Al"

    def test_avatar_upload_and_delete(self, store, tmp_path):
        async def scenario():
            repo = ProfileRepository(store, LocalBlobStore(tmp_path, "/blobs"))
            url = await repo.upload_avatar("u1", b"img")
            uploaded = await store.get(profile_path("u1"))
            await repo.delete_avatar("u1")
            return url, uploaded, await store.get(profile_path("u1"))

        url, uploaded, cleared = run(scenario())
        assert url == "/blobs/avatars/u1"
        assert uploaded["photoURL"] == url
        assert cleared["photoURL"] == ""

    def test_avatar_needs_blob_store(self, store):
        with pytest.raises(StoreError):
            run(ProfileRepository(store).upload_avatar("u1", b"img"))


class TestCapacity:

    def test_default_when_missing(self, store):
        assert run(CapacityRepository(store).get("u1")) == 20

    def test_default_when_not_a_number(self, store):
        async def scenario():
            await store.set(capacity_path("u1"), {"weeklyCapacity": "lots"})
            return await CapacityRepository(store).get("u1")

        assert run(scenario()) == 20

    def test_save_coerces_invalid_values(self, store):
        repo = CapacityRepository(store)
        assert run(repo.save("u1", 0)) == 1
        assert run(repo.save("u1", -5)) == 1
        assert run(repo.save("u1", math.nan)) == 1
        assert run(repo.save("u1", 32.5)) == 32.5
        assert run(repo.get("u1")) == 32.5
