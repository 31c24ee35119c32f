"""Save state and day history for the farm.

State = the whole save (JSON file, loaded once per session)
History = append-only log of played days (SQLite database)
"""

from __future__ import annotations

import json
import logging
import random
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from seasons.calendar import SeasonState, clean_int, default_season, sanitize_season

from .catalog import (
    ACCESSORY_LIBRARY,
    ACCESSORY_LIMIT,
    ACHIEVEMENTS,
    COAT_COLOURS,
    DEFAULT_COW_NAMES,
    DEFAULT_FOODS,
    LIBRARIES,
    PERSONALITIES,
    STAT_KEYS,
    STAT_MAX,
    STAT_MIN,
)
from .family import FamilyChallenge

logger = logging.getLogger(__name__)

SAVE_VERSION = 5
MAX_OUTFIT_HISTORY = 18

# ── Save State (JSON) ───────────────────────────────────────────


def clamp(value: float, low: float = STAT_MIN, high: float = STAT_MAX) -> float:
    return min(max(value, low), high)


@dataclass
class Cow:
    id: str
    name: str
    personality: str = "Greedy"
    happiness: float = 70
    chonk: float = 20
    cleanliness: float = 60
    hunger: float = 40
    accessories: list[str] = field(default_factory=list)
    colour: str = "brown"

    @classmethod
    def from_dict(cls, data: dict, fallback_id: str, fallback_name: str) -> Cow:
        cow = cls(
            id=str(data.get("id") or fallback_id),
            name=str(data.get("name") or fallback_name),
        )
        if data.get("personality") in PERSONALITIES:
            cow.personality = data["personality"]
        if data.get("colour") in COAT_COLOURS:
            cow.colour = data["colour"]
        for stat in STAT_KEYS:
            value = data.get(stat)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                setattr(cow, stat, clamp(value))
        if isinstance(data.get("accessories"), list):
            cow.accessories = [a for a in data["accessories"] if isinstance(a, str)]
        return cow


@dataclass
class Unlocks:
    foods: list[str] = field(default_factory=lambda: list(DEFAULT_FOODS))
    accessories: list[str] = field(default_factory=list)
    decor: list[str] = field(default_factory=list)

    def items(self, unlock_type: str) -> list[str]:
        return getattr(self, unlock_type)

    def has(self, unlock_type: str, item: str) -> bool:
        return item in self.items(unlock_type)


@dataclass
class FarmStats:
    total_perfects: int = 0
    total_chonks: int = 0
    perfect_day_streak: int = 0
    best_perfect_day_streak: int = 0
    last_reward_type: str | None = None


@dataclass
class OutfitRecord:
    day: int
    accessories: list[str]
    recorded_iso: str = ""


@dataclass
class CowJournal:
    favourite_treats: dict[str, int] = field(default_factory=dict)
    outfits: list[OutfitRecord] = field(default_factory=list)


def _blank_achievements() -> dict[str, bool]:
    return {key: False for key in ACHIEVEMENTS}


@dataclass
class SaveState:
    """The whole farm, serialized to JSON after every day."""

    version: int = SAVE_VERSION
    day: int = 1
    cows: list[Cow] = field(default_factory=list)
    unlocks: Unlocks = field(default_factory=Unlocks)
    stats: FarmStats = field(default_factory=FarmStats)
    achievements: dict[str, bool] = field(default_factory=_blank_achievements)
    season: SeasonState = field(default_factory=default_season)
    family: FamilyChallenge = field(default_factory=FamilyChallenge)
    options: dict[str, Any] = field(default_factory=dict)
    journal: dict[str, CowJournal] = field(default_factory=dict)
    last_played_iso: str = ""

    def cow(self, cow_id: str) -> Cow | None:
        for cow in self.cows:
            if cow.id == cow_id:
                return cow
        return None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SaveState:
        """Rebuild a save from stored JSON, dropping anything malformed."""
        state = cls()
        if isinstance(raw.get("day"), int) and raw["day"] >= 1:
            state.day = raw["day"]

        cows_raw = raw.get("cows") if isinstance(raw.get("cows"), list) else []
        for index, entry in enumerate(cows_raw):
            if isinstance(entry, dict):
                name = DEFAULT_COW_NAMES[index % len(DEFAULT_COW_NAMES)]
                state.cows.append(Cow.from_dict(entry, f"cow-{index + 1}", name))

        unlocks_raw = raw.get("unlocks") if isinstance(raw.get("unlocks"), dict) else {}
        for unlock_type, library in LIBRARIES.items():
            stored = unlocks_raw.get(unlock_type)
            items = list(stored) if isinstance(stored, list) else []
            if unlock_type == "foods":
                items = list(DEFAULT_FOODS) + items
            setattr(state.unlocks, unlock_type, _sanitize_unlock_list(items, library))

        for cow in state.cows:
            cow.accessories = sanitize_accessories(cow.accessories, state.unlocks.accessories)

        stats_raw = raw.get("stats") if isinstance(raw.get("stats"), dict) else {}
        last_reward = stats_raw.get("last_reward_type")
        state.stats = FarmStats(
            total_perfects=clean_int(stats_raw.get("total_perfects"), 0),
            total_chonks=clean_int(stats_raw.get("total_chonks"), 0),
            perfect_day_streak=clean_int(stats_raw.get("perfect_day_streak"), 0),
            best_perfect_day_streak=clean_int(stats_raw.get("best_perfect_day_streak"), 0),
            last_reward_type=last_reward if isinstance(last_reward, str) and last_reward in LIBRARIES else None,
        )

        achievements_raw = raw.get("achievements") if isinstance(raw.get("achievements"), dict) else {}
        for key in state.achievements:
            state.achievements[key] = bool(achievements_raw.get(key, False))

        state.season = sanitize_season(raw.get("season"))
        state.family = FamilyChallenge.from_dict(raw.get("family"))
        if isinstance(raw.get("options"), dict):
            state.options = dict(raw["options"])

        journal_raw = raw.get("journal") if isinstance(raw.get("journal"), dict) else {}
        for cow in state.cows:
            entry = journal_raw.get(cow.id)
            state.journal[cow.id] = _journal_from_dict(entry if isinstance(entry, dict) else {})

        state.last_played_iso = str(raw.get("last_played_iso") or "")
        return state


def _sanitize_unlock_list(items: list[Any], library: dict[str, dict]) -> list[str]:
    seen: set[str] = set()
    result = []
    for item in items:
        if item in library and item not in seen:
            seen.add(item)
            result.append(item)
    return result


def sanitize_accessories(items: list[str], unlocked: list[str]) -> list[str]:
    """Keep unlocked catalog accessories, no duplicates, at most ACCESSORY_LIMIT."""
    allowed = set(unlocked)
    result: list[str] = []
    for item in items:
        if item not in ACCESSORY_LIBRARY or item not in allowed or item in result:
            continue
        if len(result) >= ACCESSORY_LIMIT:
            break
        result.append(item)
    return result


def _journal_from_dict(raw: dict[str, Any]) -> CowJournal:
    treats = raw.get("favourite_treats") if isinstance(raw.get("favourite_treats"), dict) else {}
    outfits = []
    for entry in raw.get("outfits") or []:
        if isinstance(entry, dict) and isinstance(entry.get("accessories"), list):
            outfits.append(
                OutfitRecord(
                    day=int(entry.get("day") or 1),
                    accessories=[a for a in entry["accessories"] if isinstance(a, str)],
                    recorded_iso=str(entry.get("recorded_iso") or ""),
                )
            )
    return CowJournal(
        favourite_treats={k: int(v) for k, v in treats.items() if isinstance(v, int) and v > 0},
        outfits=outfits[-MAX_OUTFIT_HISTORY:],
    )


def new_cow(cow_id: str, name: str, rng: random.Random | None = None) -> Cow:
    rng = rng or random.Random()
    return Cow(
        id=cow_id,
        name=name,
        personality=rng.choice(PERSONALITIES),
        colour=rng.choice(COAT_COLOURS),
    )


def new_save(
    rng: random.Random | None = None,
    herd_size: int = 4,
    family: dict[str, Any] | None = None,
) -> SaveState:
    """A fresh farm with a small randomly-tempered herd."""
    rng = rng or random.Random()
    state = SaveState(last_played_iso=_now_iso(), family=FamilyChallenge.from_dict(family))
    for i in range(herd_size):
        name = DEFAULT_COW_NAMES[i % len(DEFAULT_COW_NAMES)]
        cow = new_cow(f"cow-{i + 1}", name, rng)
        state.cows.append(cow)
        state.journal[cow.id] = CowJournal()
    return state


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class StateManager:
    """Load / save SaveState to a JSON file."""

    def __init__(self, state_path: str | Path):
        self._path = Path(state_path)

    @property
    def path(self) -> Path:
        return self._path

    def load(
        self,
        rng: random.Random | None = None,
        herd_size: int = 4,
        family: dict[str, Any] | None = None,
    ) -> SaveState:
        if self._path.exists():
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                logger.warning("Failed to parse save %s, starting fresh: %s", self._path, exc)
                raw = None
            if isinstance(raw, dict):
                state = SaveState.from_dict(raw)
                logger.debug("Loaded save: day=%d cows=%d", state.day, len(state.cows))
                return state

        # First run: create initial save
        state = new_save(rng, herd_size=herd_size, family=family)
        self.save(state)
        logger.info("Created initial save file at %s", self._path)
        return state

    def save(self, state: SaveState) -> None:
        state.last_played_iso = _now_iso()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(state.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Saved state to %s", self._path)


# ── History Database (SQLite) ───────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS days (
    id TEXT PRIMARY KEY,
    day_number INTEGER,
    perfect_day INTEGER,
    perfect_streak INTEGER,
    reward_type TEXT,
    reward_item TEXT,
    mvp TEXT,
    created_at TEXT,
    summary TEXT             -- JSON blob
);

CREATE TABLE IF NOT EXISTS minigame_runs (
    id TEXT PRIMARY KEY,
    day_number INTEGER,
    position INTEGER,
    minigame TEXT,
    success INTEGER,
    caretaker TEXT,
    summary TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS achievements (
    id TEXT PRIMARY KEY,
    day_number INTEGER,
    achievement TEXT,
    created_at TEXT
);
"""


class HistoryDB:
    """Append-only history of played days."""

    def __init__(self, db_path: str | Path):
        self._path = Path(db_path)
        self._db: aiosqlite.Connection | None = None

    async def open(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(str(self._path))
        await self._db.executescript(_SCHEMA)
        await self._db.commit()
        logger.debug("History DB ready at %s", self._path)

    async def close(self) -> None:
        if self._db:
            await self._db.close()

    async def __aenter__(self) -> HistoryDB:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # ── Logging ─────────────────────────────────────────────────

    async def log_day(
        self,
        day_number: int,
        perfect_day: bool,
        perfect_streak: int,
        reward_type: str = "",
        reward_item: str = "",
        mvp: str = "",
        summary: dict | None = None,
    ) -> str:
        row_id = str(uuid.uuid4())
        await self._db.execute(
            "INSERT INTO days (id, day_number, perfect_day, perfect_streak, reward_type, reward_item, mvp, created_at, summary) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                row_id,
                day_number,
                int(perfect_day),
                perfect_streak,
                reward_type,
                reward_item,
                mvp,
                _now_iso(),
                json.dumps(summary or {}, ensure_ascii=False),
            ),
        )
        await self._db.commit()
        return row_id

    async def log_minigame_run(
        self,
        day_number: int,
        position: int,
        minigame: str,
        success: bool,
        caretaker: str = "",
        summary: str = "",
    ) -> str:
        row_id = str(uuid.uuid4())
        await self._db.execute(
            "INSERT INTO minigame_runs (id, day_number, position, minigame, success, caretaker, summary, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (row_id, day_number, position, minigame, int(success), caretaker, summary, _now_iso()),
        )
        await self._db.commit()
        return row_id

    async def log_achievement(self, day_number: int, achievement: str) -> str:
        row_id = str(uuid.uuid4())
        await self._db.execute(
            "INSERT INTO achievements (id, day_number, achievement, created_at) VALUES (?, ?, ?, ?)",
            (row_id, day_number, achievement, _now_iso()),
        )
        await self._db.commit()
        return row_id

    # ── Queries ─────────────────────────────────────────────────

    async def get_recent_days(self, limit: int = 10) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM days ORDER BY day_number DESC, created_at DESC LIMIT ?", (limit,)
        )
        cols = [d[0] for d in cursor.description]
        rows = await cursor.fetchall()
        return [dict(zip(cols, row)) for row in rows]

    async def get_minigame_runs(self, day_number: int) -> list[dict]:
        cursor = await self._db.execute(
            "SELECT * FROM minigame_runs WHERE day_number = ? ORDER BY position ASC", (day_number,)
        )
        cols = [d[0] for d in cursor.description]
        rows = await cursor.fetchall()
        return [dict(zip(cols, row)) for row in rows]

    async def get_minigame_win_rates(self) -> dict[str, float]:
        cursor = await self._db.execute(
            "SELECT minigame, AVG(success) FROM minigame_runs GROUP BY minigame ORDER BY minigame"
        )
        rows = await cursor.fetchall()
        return {row[0]: float(row[1]) for row in rows}

    async def get_achievement_log(self) -> list[dict]:
        cursor = await self._db.execute("SELECT * FROM achievements ORDER BY created_at ASC")
        cols = [d[0] for d in cursor.description]
        rows = await cursor.fetchall()
        return [dict(zip(cols, row)) for row in rows]

    async def get_day_count(self) -> int:
        cursor = await self._db.execute("SELECT COUNT(*) FROM days")
        row = await cursor.fetchone()
        return row[0] if row else 0
