"""Shared fixtures for the lifedash test suite."""
import asyncio

import pytest

from lifedash.events import EventPublisher
from lifedash.planning.identity import Identity
from lifedash.schemas.project import Goal, Task
from lifedash.schemas.shared import Member, SharedProject
from lifedash.store import MemoryDocumentStore


def run(coro):
    """Drive a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def make_goal(goal_id: str, done_flags, deadline: str = "no deadline") -> Goal:
    """A goal with one task per entry in ``done_flags``."""
    return Goal(
        id=goal_id,
        title=f"Goal {goal_id}",
        deadline=deadline,
        tasks=[
            Task(id=f"{goal_id}-t{i}", title=f"Task {i}", done=done)
            for i, done in enumerate(done_flags)
        ],
    )


def make_shared(project_id: str = "sp1", owner: str = "u1", members=("u1",), emails=()) -> SharedProject:
    return SharedProject(
        id=project_id,
        title="Team project",
        owner_uid=owner,
        members=[Member(id=uid, nickname=f"nick-{uid}") for uid in members],
        member_uids=list(members),
        member_emails=list(emails),
    )


@pytest.fixture
def store():
    return MemoryDocumentStore(EventPublisher())


@pytest.fixture
def alice():
    return Identity(uid="u1", display_name="Alice", email="alice@example.com")


@pytest.fixture
def bob():
    return Identity(uid="u2", display_name="Bob", email="bob@example.com")


@pytest.fixture
def carol():
    return Identity(uid="u3", email="carol@example.com")
