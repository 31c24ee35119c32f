"""Tests for accumulating mini-game adjustments and applying them."""

from herd.adjustments import merge_adjustments
from herd.memory import Cow, SaveState
from herd.store import FarmStore
from minigames.models import CowAdjustment


def test_merge_sums_stats_and_concatenates_treats():
    total = {}
    merge_adjustments(total, {"c1": CowAdjustment(happiness=4, served_treats=["Starter Hay"])})
    merge_adjustments(total, {"c1": CowAdjustment(happiness=3, hunger=-5, served_treats=["Carrot Crunch"])})
    assert total["c1"].happiness == 7
    assert total["c1"].hunger == -5
    assert total["c1"].served_treats == ["Starter Hay", "Carrot Crunch"]


def test_merge_latest_accessory_wins_and_blank_is_ignored():
    total = {}
    merge_adjustments(total, {"c1": CowAdjustment(add_accessory="Pastel Bow")})
    merge_adjustments(total, {"c1": CowAdjustment(add_accessory="   ")})
    assert total["c1"].add_accessory == "Pastel Bow"
    merge_adjustments(total, {"c1": CowAdjustment(add_accessory="Sun Hat")})
    assert total["c1"].add_accessory == "Sun Hat"


def test_merge_none_is_a_no_op():
    total = {"c1": CowAdjustment(happiness=1)}
    assert merge_adjustments(total, None) is total
    assert total["c1"].happiness == 1


def test_deltas_are_summed_before_clamping():
    state = SaveState(cows=[Cow(id="c1", name="Isla", happiness=95)])
    total = {}
    merge_adjustments(total, {"c1": CowAdjustment(happiness=10)})
    merge_adjustments(total, {"c1": CowAdjustment(happiness=-10)})

    FarmStore(state).apply_adjustments(total)

    # clamping each step would give 90
    assert state.cows[0].happiness == 95


def test_merge_reads_dict_entries_and_skips_junk():
    total = {}
    merge_adjustments(total, {"c1": {"happiness": 5, "served_treats": ["Starter Hay"]}, "c2": None, "c3": 7})
    assert set(total) == {"c1"}
    assert total["c1"].happiness == 5
    assert total["c1"].served_treats == ["Starter Hay"]


def test_apply_ignores_malformed_and_unknown_entries():
    state = SaveState(cows=[Cow(id="c1", name="Isla", happiness=50)])
    FarmStore(state).apply_adjustments({"c1": {"happiness": 5}, "ghost": CowAdjustment(happiness=5)})
    assert state.cows[0].happiness == 50
