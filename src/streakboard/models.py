"""Task and user record types, and their persisted dict form."""

from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Task:
    id: int
    name: str
    history: tuple[str, ...] = ()  # ascending YYYY-MM-DD, no duplicates
    archived: bool = False
    streak: int = 0
    longest_streak: int = 0

    def with_changes(self, **changes: object) -> Task:
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Return the persisted shape (camelCase ``longestStreak``)."""
        return {
            "id": self.id,
            "name": self.name,
            "history": list(self.history),
            "archived": self.archived,
            "streak": self.streak,
            "longestStreak": self.longest_streak,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Task:
        """Build a Task from a stored dict. Missing fields take creation defaults."""
        return cls(
            id=int(data["id"]),
            name=str(data.get("name", "")),
            history=tuple(data.get("history") or ()),
            archived=bool(data.get("archived", False)),
            streak=int(data.get("streak", 0)),
            longest_streak=int(data.get("longestStreak", 0)),
        )


@dataclass(frozen=True)
class UserRecord:
    uid: str
    username: str | None = None
    tasks: tuple[Task, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        return self.username or "anon"

    def to_dict(self) -> dict:
        data: dict = {"tasks": [t.to_dict() for t in self.tasks]}
        if self.username is not None:
            data["username"] = self.username
        return data

    @classmethod
    def from_dict(cls, uid: str, data: dict | None) -> UserRecord:
        data = data or {}
        return cls(
            uid=uid,
            username=data.get("username") or None,
            tasks=tuple(Task.from_dict(t) for t in data.get("tasks") or ()),
        )
