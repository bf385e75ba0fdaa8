"""Exception types for streakboard.

Core streak and window computations report bad input as return values. These
exceptions cover the glue around them: identity, task lookup, onboarding, and
strict date checking.
"""
from __future__ import annotations


class StreakboardError(Exception):
    """Base class for user-facing streakboard errors."""


class NotSignedInError(StreakboardError):
    def __init__(self) -> None:
        super().__init__("Not signed in. Run: streakboard login <account>")


class SignInError(StreakboardError):
    """Sign-in was cancelled or refused by the identity provider."""


class TaskNotFoundError(StreakboardError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"No task with id {task_id}")
        self.task_id = task_id


class UsernameError(StreakboardError):
    """Onboarding failed: blank username, or one is already set."""


class InvalidDateError(StreakboardError, ValueError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Not a calendar date (YYYY-MM-DD): {value!r}")
        self.value = value
