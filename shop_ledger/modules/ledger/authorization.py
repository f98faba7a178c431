"""
PIN confirmation for sensitive actions (edits, deletes, settings changes).

The gate is stateless: no attempt counter, no lockout, and the expected PIN
is whatever the secret provider returns (stored in cleartext). Every denial
is logged so repeated guessing is at least visible.
"""

from __future__ import annotations

import hmac
import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal

from .errors import AuthorizationError

_log = logging.getLogger(__name__)

DENIED_MESSAGE = "Incorrect PIN. Action denied."


class ActionAuthorizationGate(QObject):
    """
    Wraps a pending action behind a PIN check.

    `secret_provider` is a zero-argument callable returning the current PIN,
    so a PIN change takes effect on the next guard() without rebuilding the gate.
    """

    denied = Signal(str)

    def __init__(self, secret_provider: Callable[[], str], parent: Optional[QObject] = None):
        super().__init__(parent)
        self._secret_provider = secret_provider

    @staticmethod
    def verify(candidate: Optional[str], expected: Optional[str]) -> bool:
        """Plain equality of the two secrets (compared in constant time)."""
        if candidate is None or expected is None:
            return False
        return hmac.compare_digest(str(candidate).encode("utf-8"), str(expected).encode("utf-8"))

    def guard(self, candidate: Optional[str], action: Callable, *args, **kwargs):
        """
        Run `action(*args, **kwargs)` exactly once if `candidate` matches the
        stored PIN and return its result. Otherwise nothing runs, `denied` is
        emitted and AuthorizationError is raised.
        """
        if not self.verify(candidate, self._secret_provider()):
            _log.warning("PIN check failed for %s", getattr(action, "__name__", repr(action)))
            self.denied.emit(DENIED_MESSAGE)
            raise AuthorizationError(DENIED_MESSAGE)
        return action(*args, **kwargs)
