"""Tests for day plan building and memoisation."""

import random

from herd.memory import Cow, SaveState
from herd.planner import STANDARD_CONDITIONS, DayPlanner, build_preview_notes, plan_signature
from minigames.runner import MINIGAME_KEYS


def _herd_state(day: int = 7) -> SaveState:
    cows = [
        Cow(id="c1", name="Bonnie", personality="Greedy"),
        Cow(id="c2", name="Fergus", personality="Vain"),
        Cow(id="c3", name="Isla", personality="Sleepy"),
        Cow(id="c4", name="Hamish", personality="Social"),
    ]
    return SaveState(day=day, cows=cows)


def test_signature_ignores_herd_order():
    state = _herd_state()
    flipped = _herd_state()
    flipped.cows.reverse()
    assert plan_signature(state) == plan_signature(flipped)
    assert plan_signature(state).startswith("7|")


def test_four_cow_day_seven_plan_uses_greedy_feeding_rule():
    planner = DayPlanner(rng=random.Random(3))
    plan = planner.get_or_build(_herd_state())

    assert sorted(plan.queue) == sorted(MINIGAME_KEYS)
    assert len(plan.queue) == len(set(plan.queue))
    assert plan.events["food"].personality == "Greedy"
    assert plan.events["food"].label == "Greedy Graze"
    assert plan.events["catch"].personality == "Sleepy"
    assert plan.events["brush"].personality == "Vain"
    assert plan.events["ceilidh"].personality == "Social"


def test_unchanged_day_and_herd_reuses_cached_plan():
    rng = random.Random(11)
    planner = DayPlanner(rng=rng)
    state = _herd_state()
    first = planner.get_or_build(state)
    rng_state = rng.getstate()

    second = planner.get_or_build(state)

    assert second is first
    assert rng.getstate() == rng_state


def test_personality_change_rebuilds_plan():
    planner = DayPlanner(rng=random.Random(5))
    state = _herd_state()
    first = planner.get_or_build(state)
    state.cows[0].personality = "Social"

    second = planner.get_or_build(state)

    assert second is not first
    assert second.events["food"].personality == "Social"


def test_invalidate_drops_cache():
    planner = DayPlanner(rng=random.Random(5))
    state = _herd_state()
    first = planner.get_or_build(state)
    planner.invalidate()
    assert planner.cached is None
    assert planner.get_or_build(state) is not first


def test_festival_modifiers_override_event_modifiers():
    plan = DayPlanner(rng=random.Random(1)).get_or_build(_herd_state(day=7))
    # Ribbon Rehearsal week: brush patchBonus 1, catch timeModifier 1
    assert plan.events["brush"].modifiers == {"timeModifier": 1, "patchBonus": 1}
    assert plan.events["catch"].modifiers["timeModifier"] == 1
    assert plan.events["catch"].modifiers["speedScale"] == 0.85


def test_festival_modifiers_do_not_leak_into_rule_table():
    from herd.personality import EVENT_RULES

    DayPlanner(rng=random.Random(1)).get_or_build(_herd_state(day=7))
    assert EVENT_RULES["brush"]["Vain"].modifiers == {"timeModifier": 1, "patchBonus": 2}


def test_preview_notes_cover_queue_and_season_line():
    plan = DayPlanner(rng=random.Random(2)).get_or_build(_herd_state(day=7))
    notes = plan.preview_notes

    assert [n.key for n in notes[:4]] == plan.queue
    assert notes[0].title.startswith("1. ")
    season = notes[-1]
    assert season.key == "season"
    assert season.title == "Spring Bloom • Ribbon Rehearsal"
    assert season.detail.startswith("Festival day is here!")
    assert " Tasks: Earn a perfect day" in season.detail


def test_preview_note_without_event_reads_standard_conditions():
    notes = build_preview_notes(["catch"], {"catch": None})
    assert len(notes) == 1
    assert notes[0].title == "1. Catch the Cow"
    assert notes[0].detail == STANDARD_CONDITIONS


def test_herd_without_matching_personalities_gets_no_events():
    state = SaveState(day=30, cows=[Cow(id="c1", name="Rory", personality="Greedy")])
    plan = DayPlanner(rng=random.Random(4)).get_or_build(state)
    assert plan.events["catch"] is None
    assert plan.events["brush"] is None
    assert plan.events["ceilidh"] is None
    assert plan.events["food"].personality == "Greedy"
