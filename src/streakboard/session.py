"""Per-session application state for streakboard.

A HabitSession follows the identity provider and, while someone is signed in,
mirrors that user's record from the store. The store subscription is the only
way task state changes: every action writes to the store and the delivered
record replaces the session's task list wholesale.
"""
from __future__ import annotations

import logging
import time
from datetime import date
from enum import Enum
from typing import Callable

from streakboard.db import UserStore
from streakboard.errors import NotSignedInError, TaskNotFoundError, UsernameError
from streakboard.identity import LocalIdentityProvider
from streakboard.leaderboard import DEFAULT_LEADERBOARD_SIZE, build_leaderboard
from streakboard.models import Task, UserRecord
from streakboard.streaks import CompletionResult, record_completion
from streakboard.windows import Window

logger = logging.getLogger(__name__)


class Page(str, Enum):
    CALENDAR = "calendar"
    DASHBOARD = "dashboard"


class HabitSession:
    def __init__(
        self,
        store: UserStore,
        identity: LocalIdentityProvider,
        today: Callable[[], date] = date.today,
        leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE,
        strict_dates: bool = False,
        on_streak_broken: Callable[[Task, CompletionResult], None] | None = None,
    ) -> None:
        self.store = store
        self.identity = identity
        self.today = today
        self.leaderboard_size = leaderboard_size
        self.strict_dates = strict_dates
        self.on_streak_broken = on_streak_broken

        self.uid: str | None = None
        self.username: str | None = None
        self.tasks: tuple[Task, ...] = ()
        self.page = Page.CALENDAR
        self.leaderboard: dict[Window, list[dict]] = {}

        self._store_subscriptions: list[Callable[[], None]] = []
        self._auth_subscription: Callable[[], None] | None = None

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def start(self) -> HabitSession:
        """Begin following the identity provider."""
        self._auth_subscription = self.identity.on_auth_change(self._on_auth_change)
        return self

    def close(self) -> None:
        self._detach()
        if self._auth_subscription is not None:
            self._auth_subscription()
            self._auth_subscription = None

    def __enter__(self) -> HabitSession:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _on_auth_change(self, uid: str | None) -> None:
        if uid == self.uid:
            return
        self._detach()
        if uid is not None:
            self._attach(uid)

    def _attach(self, uid: str) -> None:
        if self.store.get(uid) is None:
            logger.info("Creating record for new user %s", uid)
            self.store.put(uid, {"tasks": []})
        self.uid = uid
        self._store_subscriptions.append(self.store.subscribe(uid, self._on_record))
        self._store_subscriptions.append(self.store.subscribe_all(self._on_all_records))

    def _detach(self) -> None:
        for unsubscribe in self._store_subscriptions:
            unsubscribe()
        self._store_subscriptions.clear()
        self.uid = None
        self.username = None
        self.tasks = ()
        self.leaderboard = {}

    def _on_record(self, data: dict | None) -> None:
        record = UserRecord.from_dict(self.uid or "", data)
        self.username = record.username
        self.tasks = record.tasks

    def _on_all_records(self, records: dict[str, dict]) -> None:
        users = [UserRecord.from_dict(uid, data) for uid, data in records.items()]
        self.leaderboard = build_leaderboard(users, self.today(), self.leaderboard_size)

    # ── Queries ──────────────────────────────────────────────────────────────

    @property
    def signed_in(self) -> bool:
        return self.uid is not None

    @property
    def needs_onboarding(self) -> bool:
        return self.signed_in and not self.username

    @property
    def active_tasks(self) -> list[Task]:
        return [t for t in self.tasks if not t.archived]

    @property
    def archived_tasks(self) -> list[Task]:
        return [t for t in self.tasks if t.archived]

    def find_task(self, task_id: int) -> Task:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    # ── Actions ──────────────────────────────────────────────────────────────

    def set_username(self, username: str) -> str:
        """Onboarding: set the display name once."""
        uid = self._require_uid()
        if self.username:
            raise UsernameError(f"Username is already set to {self.username!r}")
        username = (username or "").strip()
        if not username:
            raise UsernameError("Username cannot be blank")
        self.store.put(uid, {"username": username}, merge=True)
        logger.info("User %s onboarded as %s", uid, username)
        return username

    def add_task(self, name: str) -> Task:
        name = _clean_name(name)
        task = Task(id=self._next_task_id(), name=name)
        self._save([*self.tasks, task])
        logger.info("Added task %s (%s)", task.id, name)
        return task

    def rename_task(self, task_id: int, name: str) -> Task:
        name = _clean_name(name)
        renamed = self.find_task(task_id).with_changes(name=name)
        self._replace(renamed)
        return renamed

    def delete_task(self, task_id: int) -> Task:
        task = self.find_task(task_id)
        self._save([t for t in self.tasks if t.id != task_id])
        logger.info("Deleted task %s", task_id)
        return task

    def toggle_archive(self, task_id: int) -> Task:
        task = self.find_task(task_id)
        toggled = task.with_changes(archived=not task.archived)
        self._replace(toggled)
        return toggled

    def mark_today(self, task_id: int) -> CompletionResult:
        """Record today's completion for a task. Marking twice is a no-op."""
        task = self.find_task(task_id)
        result = record_completion(task, self.today(), strict=self.strict_dates)
        if not result.changed:
            logger.debug("Completion for task %s not recorded: %s", task_id, result.status.value)
            return result
        self._replace(result.task)
        if result.streak_broken:
            logger.info("Streak broken for task %s after %s days", task_id, result.gap_days)
            if self.on_streak_broken is not None:
                self.on_streak_broken(result.task, result)
        return result

    def show(self, page: Page | str) -> Page:
        self.page = Page(page)
        return self.page

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _require_uid(self) -> str:
        if self.uid is None:
            raise NotSignedInError()
        return self.uid

    def _replace(self, updated: Task) -> None:
        self._save([updated if t.id == updated.id else t for t in self.tasks])

    def _save(self, tasks: list[Task]) -> None:
        uid = self._require_uid()
        fields: dict = {"tasks": [t.to_dict() for t in tasks]}
        if self.username:
            fields["username"] = self.username
        self.store.put(uid, fields, merge=True)

    def _next_task_id(self) -> int:
        candidate = int(time.time() * 1000)
        used = {t.id for t in self.tasks}
        if candidate in used:
            candidate = max(used) + 1
        return candidate


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValueError("Task name cannot be blank")
    return name
