"""Cooperative cancellation shared by searches and crafting tree builds."""

from __future__ import annotations


class OperationCancelled(Exception):
    """Raised once the caller's token has been cancelled."""


class CancellationToken:
    """Cancellation flag checked around every provider call."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelled()
