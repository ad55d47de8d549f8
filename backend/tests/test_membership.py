"""Tests for membership transitions and nickname resolution."""
import pytest

from lifedash.planning import membership
from lifedash.planning.errors import MembershipConflict, ValidationFailed
from lifedash.planning.identity import Identity, resolve_avatar, resolve_nickname
from lifedash.schemas.profile import Profile
from lifedash.schemas.shared import LeaveKind, Member, MembershipState

from conftest import make_shared


class TestMembershipState:

    def test_states(self):
        project = make_shared(owner="u1", members=("u1", "u2"))
        assert membership.membership_state(project, "u1") == MembershipState.OWNER
        assert membership.membership_state(project, "u2") == MembershipState.MEMBER
        assert membership.membership_state(project, "u3") == MembershipState.NOT_MEMBER

    def test_id_without_member_record_counts_as_member(self):
        project = make_shared(owner="u1", members=("u1",))
        project.member_uids.append("u9")
        assert membership.membership_state(project, "u9") == MembershipState.MEMBER


class TestJoin:

    def test_add_member_appends_all_three_lists(self):
        project = make_shared(emails=("a@example.com",))
        updated = membership.add_member(project, Member(id="u2", nickname="Bob"), "bob@example.com")
        assert [m.id for m in updated.members] == ["u1", "u2"]
        assert updated.member_uids == ["u1", "u2"]
        assert updated.member_emails == ["a@example.com", "bob@example.com"]
        assert [m.id for m in project.members] == ["u1"]

    def test_add_member_deduplicates(self):
        project = make_shared(members=("u1", "u2"), emails=("bob@example.com",))
        updated = membership.add_member(project, Member(id="u2"), "bob@example.com")
        assert updated.member_uids == ["u1", "u2"]
        assert len(updated.members) == 2
        assert updated.member_emails == ["bob@example.com"]


class TestPlanLeave:

    def test_member(self):
        plan = membership.plan_leave(make_shared(members=("u1", "u2")), "u2")
        assert plan.kind == LeaveKind.LEAVE_AS_MEMBER
        assert plan.candidates == []

    def test_owner_alone(self):
        plan = membership.plan_leave(make_shared(), "u1")
        assert plan.kind == LeaveKind.DELETE_AS_LAST_MEMBER
        assert "deletes the whole shared project" in plan.warning

    def test_owner_with_others(self):
        plan = membership.plan_leave(make_shared(members=("u1", "u2", "u3")), "u1")
        assert plan.kind == LeaveKind.HANDOFF
        assert [m.id for m in plan.candidates] == ["u2", "u3"]
        assert plan.default_new_owner_uid == "u2"

    def test_non_member(self):
        with pytest.raises(MembershipConflict):
            membership.plan_leave(make_shared(), "u5")


class TestLeaveAndHandoff:

    def test_member_leaves(self):
        project = make_shared(members=("u1", "u2"), emails=("a@example.com", "b@example.com"))
        updated = membership.leave_as_member(project, "u2", "b@example.com")
        assert [m.id for m in updated.members] == ["u1"]
        assert updated.member_uids == ["u1"]
        assert updated.member_emails == ["a@example.com"]

    def test_owner_cannot_leave_as_member(self):
        with pytest.raises(MembershipConflict):
            membership.leave_as_member(make_shared(members=("u1", "u2")), "u1", None)

    def test_handoff(self):
        project = make_shared(members=("u1", "u2"), emails=("a@example.com", "b@example.com"))
        updated = membership.hand_off(project, "u1", "a@example.com", "u2")
        assert updated.owner_uid == "u2"
        assert [m.id for m in updated.members] == ["u2"]
        assert updated.member_uids == ["u2"]
        assert updated.member_emails == ["b@example.com"]

    def test_handoff_requires_selection(self):
        with pytest.raises(ValidationFailed):
            membership.hand_off(make_shared(members=("u1", "u2")), "u1", None, None)

    def test_handoff_to_non_member_rejected(self):
        with pytest.raises(ValidationFailed):
            membership.hand_off(make_shared(members=("u1", "u2")), "u1", None, "u7")

    def test_handoff_to_self_rejected(self):
        with pytest.raises(ValidationFailed):
            membership.hand_off(make_shared(members=("u1", "u2")), "u1", None, "u1")

    def test_only_owner_hands_off(self):
        with pytest.raises(MembershipConflict):
            membership.hand_off(make_shared(members=("u1", "u2")), "u2", None, "u1")


class TestProfileSync:

    def test_rewrites_label_and_avatar(self):
        project = make_shared(members=("u1", "u2"))
        updated = membership.sync_member_profile(project, "u2", "Bobby", "https://img/b.png")
        member = updated.member("u2")
        assert member.nickname == "Bobby"
        assert member.name == "Bobby"
        assert member.avatar_url == "https://img/b.png"
        assert updated.member("u1").nickname == "nick-u1"

    def test_keeps_avatar_when_not_given(self):
        project = make_shared(members=("u1",))
        project.members[0].avatar_url = "https://img/a.png"
        updated = membership.sync_member_profile(project, "u1", "Alice")
        assert updated.member("u1").avatar_url == "https://img/a.png"

    def test_unchanged_returns_none(self):
        project = make_shared(members=("u1",))
        project.members[0].name = "nick-u1"
        assert membership.sync_member_profile(project, "u1", "nick-u1") is None

    def test_non_member_returns_none(self):
        assert membership.sync_member_profile(make_shared(), "u9", "x") is None


class TestNicknameResolution:
    """Order: preference, nickname, displayName, auth name, email, anonymous."""

    identity = Identity(uid="u1", display_name="Auth Name", email="a@example.com", photo_url="https://auth/a.png")

    def test_preference_wins(self):
        profile = Profile(display_name="dn", nickname="nick")
        assert resolve_nickname(self.identity, profile, "Pref", "anon") == "Pref"

    def test_falls_through_in_order(self):
        assert resolve_nickname(self.identity, Profile(display_name="dn", nickname="nick"), None, "anon") == "nick"
        assert resolve_nickname(self.identity, Profile(display_name="dn"), "  ", "anon") == "dn"
        assert resolve_nickname(self.identity, None, None, "anon") == "Auth Name"
        assert resolve_nickname(Identity(uid="u1", email="a@example.com"), None, None, "anon") == "a@example.com"
        assert resolve_nickname(Identity(uid="u1"), None, None, "anon") == "anon"

    def test_avatar_prefers_profile(self):
        assert resolve_avatar(self.identity, Profile(photo_url="https://store/a.png")) == "https://store/a.png"
        assert resolve_avatar(self.identity, Profile()) == "https://auth/a.png"
        assert resolve_avatar(Identity(uid="u1"), None) is None
