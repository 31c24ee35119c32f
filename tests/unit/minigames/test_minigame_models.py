"""Tests for mini-game data models."""

from minigames.models import CowAdjustment, MiniGameContext, MiniGameResult, MiniGameStats


class TestCowAdjustment:
    def test_from_dict_accepts_camel_case(self):
        adj = CowAdjustment.from_dict({"happiness": 4, "servedTreats": ["Starter Hay", 3], "addAccessory": "Sun Hat"})
        assert adj.happiness == 4
        assert adj.served_treats == ["Starter Hay"]
        assert adj.add_accessory == "Sun Hat"

    def test_from_dict_ignores_non_numbers(self):
        adj = CowAdjustment.from_dict({"hunger": "a lot", "chonk": True, "add_accessory": "  "})
        assert adj.hunger == 0
        assert adj.chonk == 0
        assert adj.add_accessory is None

    def test_to_dict_skips_empty_grants(self):
        assert CowAdjustment(cleanliness=2).to_dict() == {
            "happiness": 0,
            "hunger": 0,
            "cleanliness": 2,
            "chonk": 0,
        }


class TestMiniGameResult:
    def test_from_dict_full(self):
        result = MiniGameResult.from_dict(
            {
                "success": True,
                "summary": "Clean sweep",
                "adjustments": {"c1": {"cleanliness": 8}, "c2": "junk"},
                "stats": {"totalPerfects": 2, "totalChonks": 0},
            }
        )
        assert result.success is True
        assert list(result.adjustments) == ["c1"]
        assert result.adjustments["c1"].cleanliness == 8
        assert result.stats.total_perfects == 2
        assert result.chonks == 0

    def test_from_dict_missing_fields(self):
        result = MiniGameResult.from_dict({})
        assert result.success is False
        assert result.adjustments == {}
        assert result.stats is None

    def test_chonks_reads_stats(self):
        assert MiniGameResult(success=False, stats=MiniGameStats(total_chonks=3)).chonks == 3
        assert MiniGameResult(success=False).chonks == 0

    def test_ensure_adjustment_reuses_entry(self):
        result = MiniGameResult(success=True)
        first = result.ensure_adjustment("c1")
        assert result.ensure_adjustment("c1") is first


def test_context_modifier_defaults():
    context = MiniGameContext(participants=[], difficulty=1, on_complete=lambda r: None)
    assert context.modifier("timeModifier") == 0
    context.modifiers = {"timeModifier": 3}
    assert context.modifier("timeModifier") == 3
    assert context.modifier("beatWindow", 0.1) == 0.1
