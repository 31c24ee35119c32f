"""What the orchestrator needs from a screen."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .core import DaySummary
    from .planner import PreviewNote


class DayUI(Protocol):
    def show_preview(self, notes: list[PreviewNote]) -> None: ...

    def set_title(self, title: str, index: int, total: int, icon: str = "") -> None: ...

    def set_instruction(self, text: str) -> None: ...

    def update_timer(self, seconds: float) -> None: ...

    def show_summary(self, summary: DaySummary) -> None: ...


class NullUI:
    """Headless UI: accepts every call and shows nothing."""

    def show_preview(self, notes: list[PreviewNote]) -> None:
        pass

    def set_title(self, title: str, index: int, total: int, icon: str = "") -> None:
        pass

    def set_instruction(self, text: str) -> None:
        pass

    def update_timer(self, seconds: float) -> None:
        pass

    def show_summary(self, summary: DaySummary) -> None:
        pass
