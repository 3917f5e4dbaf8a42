"""
Pytest configuration for TaskChat tests.

This module provides:
1. In-memory fakes for the Task Store and the Intent Classifier
2. A fake clock that records every "thinking" delay instead of sleeping
3. Factories for a fully wired TaskChatApp with a fixed "today"
"""

import asyncio
import random
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional

import pytest

from taskchat.app import TaskChatApp
from taskchat.core.exceptions import ClassifierException, TaskStoreException
from taskchat.core.models import ClassifierResult, Intent, Task, TaskDraft
from taskchat.services.intent_classifier import IIntentClassifier
from taskchat.services.task_store import ITaskRepository

TODAY = date(2025, 1, 15)


# -----------------------------------------------------------------------------
# Fakes
# -----------------------------------------------------------------------------
class FakeClock:
    """Records suspension points instead of sleeping."""

    def __init__(self):
        self.sleeps: List[float] = []
        # yield to the event loop on every suspension (concurrency tests)
        self.yield_control = False

    async def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        if self.yield_control:
            await asyncio.sleep(0)

    @property
    def elapsed(self) -> float:
        return sum(self.sleeps)


class FakeTaskStore(ITaskRepository):
    """In-memory task store that assigns ids and points like the real service."""

    def __init__(self, tasks: Optional[List[Task]] = None):
        self.tasks: List[Task] = list(tasks or [])
        self.next_id = max([t.id for t in self.tasks], default=0) + 1
        self.calls: List[tuple] = []
        self.fail_writes = False
        self.fail_reads = False

    def count(self, operation: str) -> int:
        return len([c for c in self.calls if c[0] == operation])

    async def list_tasks(self, token: str) -> List[Task]:
        self.calls.append(("list", token))
        if self.fail_reads:
            raise TaskStoreException("API request failed: 500 - boom", 500)
        return [replace(t) for t in self.tasks]

    async def create_task(self, token: str, draft: TaskDraft) -> Task:
        self.calls.append(("create", draft))
        if self.fail_writes:
            raise TaskStoreException("API request failed: 500 - boom", 500)
        task = Task(id=self.next_id, points=10, **{k: v for k, v in draft.to_dict().items() if k != "points"})
        self.next_id += 1
        self.tasks.append(task)
        return task

    async def update_task(self, token: str, task: Task) -> Task:
        self.calls.append(("update", task))
        if self.fail_writes:
            raise TaskStoreException("API request failed: 500 - boom", 500)
        self.tasks = [task if t.id == task.id else t for t in self.tasks]
        return task

    async def delete_task(self, token: str, task_id: int) -> None:
        self.calls.append(("delete", task_id))
        if self.fail_writes:
            raise TaskStoreException("API request failed: 500 - boom", 500)
        self.tasks = [t for t in self.tasks if t.id != task_id]


class FakeClassifier(IIntentClassifier):
    """Maps exact (lower-cased) utterances to scripted classifier results."""

    def __init__(self):
        self.results: Dict[str, ClassifierResult] = {
            "add a task": ClassifierResult("Sure, let's add a task!", Intent.ADD_TASK),
            "edit a task": ClassifierResult("Okay, let's edit a task.", Intent.EDIT_TASK),
            "delete a task": ClassifierResult("Alright, let's delete a task.", Intent.DELETE_TASK),
            "show my tasks": ClassifierResult("Here you go!", Intent.ALL_TASKS),
            "weather": ClassifierResult("Let me check the weather.", Intent.WEATHER, "weather-key"),
        }
        self.calls: List[str] = []
        self.fail = False

    async def classify(self, token: str, text: str) -> ClassifierResult:
        self.calls.append(text)
        if self.fail:
            raise ClassifierException("Network error: connection refused")
        return self.results.get(text.lower(), ClassifierResult("Sorry, I didn't get that.", Intent.NONE))


def make_task(task_id: int, title: str, **overrides) -> Task:
    data = dict(
        id=task_id, title=title, description=f"{title} description", category="Bills",
        deadline="2025-02-01", priority="High", reminder="2025-01-25", completed=False, points=0
    )
    data.update(overrides)
    return Task(**data)


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeTaskStore()


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def make_app(clock, store, classifier):
    """Factory for a wired app; keyword arguments are merged into the config."""
    def _make(**config) -> TaskChatApp:
        return TaskChatApp(
            config,
            repository=store,
            classifier=classifier,
            sleep=clock.sleep,
            rng=random.Random(7),
            today=lambda: TODAY,
        )
    return _make


@pytest.fixture
def app(make_app):
    return make_app()
