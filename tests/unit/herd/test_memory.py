"""Tests for save state loading and the day history database."""

from __future__ import annotations

import asyncio
import json
import random
from pathlib import Path

from herd.memory import HistoryDB, SaveState, StateManager, new_save


class TestStateManager:
    def test_first_load_creates_save(self, tmp_path: Path):
        manager = StateManager(tmp_path / "data" / "save.json")
        state = manager.load(random.Random(1), herd_size=3)
        assert manager.path.exists()
        assert state.day == 1
        assert [c.id for c in state.cows] == ["cow-1", "cow-2", "cow-3"]
        assert state.unlocks.foods == ["Starter Hay", "Carrot Crunch", "Warm Oat Mash"]

    def test_first_load_seeds_family(self, tmp_path: Path):
        manager = StateManager(tmp_path / "save.json")
        family = {"enabled": True, "participants": [{"id": "mum", "name": "Mum"}]}
        state = manager.load(random.Random(1), family=family)
        assert state.family.active
        assert state.family.participants[0].name == "Mum"

    def test_roundtrip(self, tmp_path: Path):
        manager = StateManager(tmp_path / "save.json")
        state = new_save(random.Random(2))
        state.day = 9
        state.unlocks.decor.append("Pebble Pond")
        state.stats.perfect_day_streak = 2
        state.achievements["perfectDay"] = True
        manager.save(state)

        loaded = manager.load()
        assert loaded.day == 9
        assert loaded.unlocks.decor == ["Pebble Pond"]
        assert loaded.stats.perfect_day_streak == 2
        assert loaded.achievements["perfectDay"] is True
        assert [c.personality for c in loaded.cows] == [c.personality for c in state.cows]

    def test_corrupt_file_starts_fresh(self, tmp_path: Path):
        path = tmp_path / "save.json"
        path.write_text("{not json", encoding="utf-8")
        state = StateManager(path).load(random.Random(3))
        assert state.day == 1
        assert len(state.cows) == 4


class TestSanitize:
    def test_bad_values_fall_back(self):
        state = SaveState.from_dict(
            {
                "day": 0,
                "cows": [
                    {"id": "c1", "name": "Bonnie", "personality": "Grumpy", "happiness": 250, "hunger": "lots"},
                    "not a cow",
                ],
                "unlocks": {"foods": ["Mystery Stew"], "decor": ["Pebble Pond", "Pebble Pond"]},
                "achievements": {"perfectDay": 1, "madeUp": True},
                "extra": "ignored",
            }
        )
        assert state.day == 1
        assert len(state.cows) == 1
        cow = state.cows[0]
        assert cow.personality == "Greedy"
        assert cow.happiness == 100
        assert cow.hunger == 40
        assert state.unlocks.foods == ["Starter Hay", "Carrot Crunch", "Warm Oat Mash"]
        assert state.unlocks.decor == ["Pebble Pond"]
        assert state.achievements["perfectDay"] is True
        assert "madeUp" not in state.achievements

    def test_stats_with_wrong_types_are_zeroed(self):
        state = SaveState.from_dict(
            {
                "stats": {
                    "total_perfects": None,
                    "total_chonks": "9",
                    "perfect_day_streak": 2.0,
                    "best_perfect_day_streak": True,
                    "last_reward_type": ["decor"],
                }
            }
        )
        assert state.stats.total_perfects == 0
        assert state.stats.total_chonks == 0
        assert state.stats.perfect_day_streak == 2
        assert state.stats.best_perfect_day_streak == 0
        assert state.stats.last_reward_type is None
        state.stats.total_perfects += 1

    def test_locked_or_excess_accessories_are_dropped(self):
        state = SaveState.from_dict(
            {
                "cows": [{"id": "c1", "accessories": ["Sun Hat", "Pastel Bow", "Bell Charm", "Fern Garland", "Sun Hat"]}],
                "unlocks": {"accessories": ["Sun Hat", "Pastel Bow", "Bell Charm", "Fern Garland"]},
            }
        )
        assert state.cows[0].accessories == ["Sun Hat", "Pastel Bow", "Bell Charm"]
        assert state.cows[0].name == "Bonnie"


def test_history_roundtrip(tmp_path: Path):
    db_path = tmp_path / "history.db"

    async def _run() -> None:
        async with HistoryDB(db_path) as db:
            await db.log_day(3, True, 2, reward_type="decor", reward_item="Pebble Pond", mvp="Mum", summary={"day": 3})
            await db.log_minigame_run(3, 1, "catch", True, caretaker="Mum")
            await db.log_minigame_run(3, 2, "food", False)
            await db.log_achievement(3, "perfectDay")

            days = await db.get_recent_days()
            assert len(days) == 1
            assert days[0]["reward_item"] == "Pebble Pond"
            assert days[0]["perfect_day"] == 1
            assert json.loads(days[0]["summary"]) == {"day": 3}

            runs = await db.get_minigame_runs(3)
            assert [r["minigame"] for r in runs] == ["catch", "food"]
            assert await db.get_minigame_win_rates() == {"catch": 1.0, "food": 0.0}
            assert [a["achievement"] for a in await db.get_achievement_log()] == ["perfectDay"]
            assert await db.get_day_count() == 1

    asyncio.run(_run())
