from __future__ import annotations

from typing import Dict, Optional

from .base import ScopedRepo


class SettingsRepo(ScopedRepo):
    """
    Per-user key/value settings (manager PIN, currency, reminder time, ...).

    Values are plain text. The manager PIN is stored as entered.
    """

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        r = self.conn.execute(
            "SELECT value FROM app_settings WHERE user_id=? AND key=?",
            (self.user_id, key),
        ).fetchone()
        return default if r is None else r["value"]

    def all(self) -> Dict[str, str]:
        rows = self.conn.execute(
            "SELECT key, value FROM app_settings WHERE user_id=?", (self.user_id,)
        ).fetchall()
        return {r["key"]: r["value"] for r in rows}

    def set(self, key: str, value: str) -> None:
        self._ensure_non_empty(key, "Setting key")
        self.conn.execute(
            "INSERT INTO app_settings(user_id, key, value) VALUES (?,?,?) "
            "ON CONFLICT(user_id, key) DO UPDATE SET value=excluded.value",
            (self.user_id, key, str(value)),
        )
