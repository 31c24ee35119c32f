"""Data models exchanged with mini-games."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from herd.memory import Cow

STAT_FIELDS = ("happiness", "hunger", "cleanliness", "chonk")


def _as_number(value: Any) -> float | int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


@dataclass
class CowAdjustment:
    """Partial stat deltas for one cow, plus optional grants."""

    happiness: float = 0
    hunger: float = 0
    cleanliness: float = 0
    chonk: float = 0
    served_treats: list[str] = field(default_factory=list)
    add_accessory: str | None = None

    def add(self, stat: str, delta: float) -> None:
        setattr(self, stat, getattr(self, stat) + delta)

    @classmethod
    def from_dict(cls, data: dict) -> CowAdjustment:
        adj = cls()
        for stat in STAT_FIELDS:
            value = _as_number(data.get(stat))
            if value is not None:
                setattr(adj, stat, value)
        treats = data.get("served_treats", data.get("servedTreats", []))
        if isinstance(treats, list):
            adj.served_treats = [t for t in treats if isinstance(t, str)]
        accessory = data.get("add_accessory", data.get("addAccessory"))
        if isinstance(accessory, str) and accessory.strip():
            adj.add_accessory = accessory
        return adj

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {stat: getattr(self, stat) for stat in STAT_FIELDS}
        if self.served_treats:
            payload["served_treats"] = list(self.served_treats)
        if self.add_accessory:
            payload["add_accessory"] = self.add_accessory
        return payload


Adjustments = dict[str, CowAdjustment]


def coerce_adjustments(raw: Any) -> Adjustments:
    """Keep well-formed entries, reading plain dicts as CowAdjustment.

    Anything else (None, numbers, lists) is dropped.
    """
    if not isinstance(raw, dict):
        return {}
    adjustments: Adjustments = {}
    for cow_id, entry in raw.items():
        if isinstance(entry, dict):
            entry = CowAdjustment.from_dict(entry)
        if isinstance(entry, CowAdjustment):
            adjustments[_as_text(cow_id)] = entry
    return adjustments


@dataclass
class MiniGameStats:
    total_perfects: int | None = None
    total_chonks: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> MiniGameStats:
        perfects = data.get("total_perfects", data.get("totalPerfects"))
        chonks = data.get("total_chonks", data.get("totalChonks"))
        return cls(
            total_perfects=int(perfects) if _as_number(perfects) is not None else None,
            total_chonks=int(chonks) if _as_number(chonks) is not None else None,
        )


@dataclass
class MiniGameResult:
    success: bool
    adjustments: Adjustments = field(default_factory=dict)
    summary: str = ""
    stats: MiniGameStats | None = None

    def ensure_adjustment(self, cow_id: str) -> CowAdjustment:
        if cow_id not in self.adjustments:
            self.adjustments[cow_id] = CowAdjustment()
        return self.adjustments[cow_id]

    @property
    def chonks(self) -> int:
        if self.stats and self.stats.total_chonks:
            return self.stats.total_chonks
        return 0

    @classmethod
    def from_dict(cls, data: dict) -> MiniGameResult:
        stats = data.get("stats")
        return cls(
            success=bool(data.get("success", False)),
            adjustments=coerce_adjustments(data.get("adjustments")),
            summary=_as_text(data.get("summary", "")),
            stats=MiniGameStats.from_dict(stats) if isinstance(stats, dict) else None,
        )


@dataclass
class MiniGameContext:
    """Everything a mini-game receives when it starts.

    ``on_complete`` must be called exactly once with the run's result.
    """

    participants: list[Cow]
    difficulty: int
    on_complete: Callable[[MiniGameResult], None]
    modifiers: dict[str, Any] | None = None
    options: dict[str, Any] = field(default_factory=dict)
    foods: list[str] = field(default_factory=list)
    update_timer: Callable[[float], None] = lambda seconds: None
    update_instruction: Callable[[str], None] = lambda text: None

    def modifier(self, key: str, default: Any = 0) -> Any:
        if not self.modifiers:
            return default
        return self.modifiers.get(key, default)
