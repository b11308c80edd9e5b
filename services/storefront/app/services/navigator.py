from __future__ import annotations

from typing import Protocol


class Navigator(Protocol):
    def navigate(self, destination: str) -> None: ...


class RecordingNavigator:
    """Remembers where the renderer should go next."""

    def __init__(self) -> None:
        self.history: list[str] = []

    @property
    def current(self) -> str | None:
        return self.history[-1] if self.history else None

    def navigate(self, destination: str) -> None:
        self.history.append(destination)


def order_destination(order_id: str) -> str:
    return f"/order/{order_id}"
