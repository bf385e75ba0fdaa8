"""Local identity provider for streakboard.

Accounts are names registered in the config file, each mapped to an opaque
uid generated on first sign-in. The signed-in uid is stored as current_uid.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from streakboard.config import load_config, update_config
from streakboard.errors import SignInError

logger = logging.getLogger(__name__)

AuthCallback = Callable[[str | None], None]


@dataclass(frozen=True)
class Identity:
    uid: str
    display_name: str


class LocalIdentityProvider:
    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = config_path
        self._listeners: list[AuthCallback] = []

    def current_uid(self) -> str | None:
        return load_config(self.config_path).get("current_uid") or None

    def current_identity(self) -> Identity | None:
        uid = self.current_uid()
        if uid is None:
            return None
        accounts = load_config(self.config_path).get("accounts", {})
        name = next((n for n, u in accounts.items() if u == uid), uid)
        return Identity(uid=uid, display_name=name)

    def sign_in(self, account: str | None) -> Identity:
        """Sign in as account, registering it on first use.

        Raises SignInError if no account name is given.
        """
        account = (account or "").strip()
        if not account:
            raise SignInError("Sign-in cancelled: no account name given")

        accounts = dict(load_config(self.config_path).get("accounts", {}))
        uid = accounts.get(account)
        if uid is None:
            uid = uuid.uuid4().hex
            accounts[account] = uid
            logger.info("Registered new account %s", account)
        update_config(self.config_path, accounts=accounts, current_uid=uid)
        self._emit(uid)
        return Identity(uid=uid, display_name=account)

    def sign_out(self) -> None:
        update_config(self.config_path, current_uid=None)
        self._emit(None)

    def on_auth_change(self, callback: AuthCallback) -> Callable[[], None]:
        """Call callback with the current uid now and on every sign-in/out."""
        self._listeners.append(callback)
        callback(self.current_uid())

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, uid: str | None) -> None:
        for callback in list(self._listeners):
            callback(uid)
