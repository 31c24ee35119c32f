"""Tests for end-of-day reward selection."""

from herd.memory import SaveState, Unlocks
from herd.rewards import REWARD_THEMES, RewardContext, choose_reward, pick_from_type
from herd.store import FarmStore
from seasons.calendar import default_season, season_context


def _unlock_all() -> Unlocks:
    unlocks = Unlocks()
    for theme in REWARD_THEMES:
        for entry in theme.items:
            if entry.item not in unlocks.items(entry.type):
                unlocks.items(entry.type).append(entry.item)
    return unlocks


class TestCategoryPick:
    def test_ties_break_on_theme_declaration_order(self):
        reward = pick_from_type(Unlocks(), "accessories")
        assert reward.item == "Pastel Bow"
        assert reward.theme == "Highland Picnic"
        assert reward.type_label == "Accessories"

    def test_prefers_theme_with_most_locked_items(self):
        unlocks = Unlocks(accessories=["Pastel Bow", "Fern Garland"])
        reward = pick_from_type(unlocks, "accessories")
        assert reward.item == "Sun Hat"
        assert reward.theme == "Sunlit Outing"

    def test_no_locked_item_of_type(self):
        unlocks = _unlock_all()
        assert pick_from_type(unlocks, "decor") is None


class TestChooseReward:
    def test_third_streak_day_guarantees_decor(self):
        context = RewardContext(perfect_day=True, streak_before=2, next_streak=3)
        reward = choose_reward(Unlocks(), context)
        assert reward.type == "decor"
        assert reward.item == "Tartan Picnic Rug"
        assert reward.guaranteed_by == "Perfect-day streak (3 days)"

    def test_perfect_day_guarantees_accessory(self):
        context = RewardContext(perfect_day=True, streak_before=0, next_streak=1)
        reward = choose_reward(Unlocks(), context)
        assert reward.type == "accessories"
        assert reward.guaranteed_by == "Perfect day bonus"

    def test_rotation_moves_last_type_to_the_back(self):
        context = RewardContext(perfect_day=False, last_reward_type="accessories")
        reward = choose_reward(Unlocks(), context)
        assert reward.type == "decor"
        assert reward.guaranteed_by is None

    def test_streak_day_without_locked_decor_falls_back_to_accessory(self):
        unlocks = Unlocks(
            decor=[
                "Tartan Picnic Rug",
                "Wildflower Patch",
                "Fairy Lights Garland",
                "Stone Cairn Lantern",
                "Milk Churn Planter",
            ]
        )
        reward = choose_reward(unlocks, RewardContext(perfect_day=True, streak_before=2, next_streak=3))
        assert reward.type == "accessories"
        assert reward.item == "Sun Hat"
        assert reward.guaranteed_by == "Perfect day bonus"

    def test_everything_unlocked_gives_nothing(self):
        context = RewardContext(perfect_day=True, next_streak=3)
        assert choose_reward(_unlock_all(), context) is None


class TestFestivalReward:
    def test_perfect_day_in_festival_week_grants_festival_item(self):
        snapshot = season_context(default_season(), 7)
        reward = choose_reward(Unlocks(), RewardContext(perfect_day=True, next_streak=3), snapshot)
        assert reward.item == "Festival Bunting"
        assert reward.festival_id == "spring-bunting-week"
        assert reward.theme == "Ribbon Rehearsal"
        assert reward.guaranteed_by == "Ribbon Rehearsal décor milestone"

    def test_imperfect_day_skips_festival(self):
        snapshot = season_context(default_season(), 7)
        reward = choose_reward(Unlocks(), RewardContext(perfect_day=False), snapshot)
        assert reward.festival_id is None

    def test_completed_festival_is_not_granted_again(self):
        season = default_season()
        season.completed_festivals.append("spring-bunting-week")
        reward = choose_reward(Unlocks(), RewardContext(perfect_day=True, next_streak=1), season_context(season, 3))
        assert reward.festival_id is None
        assert reward.guaranteed_by == "Perfect day bonus"


    def test_already_unlocked_festival_item_falls_through(self):
        snapshot = season_context(default_season(), 7)
        unlocks = Unlocks(decor=["Festival Bunting"])

        streak_day = choose_reward(unlocks, RewardContext(perfect_day=True, streak_before=2, next_streak=3), snapshot)
        assert streak_day.festival_id is None
        assert streak_day.item == "Tartan Picnic Rug"
        assert streak_day.guaranteed_by == "Perfect-day streak (3 days)"

        plain_day = choose_reward(unlocks, RewardContext(perfect_day=True, next_streak=1), snapshot)
        assert plain_day.festival_id is None
        assert plain_day.guaranteed_by == "Perfect day bonus"

def test_regranting_an_unlocked_item_is_refused():
    store = FarmStore(SaveState())
    assert store.add_unlock("decor", "Tartan Picnic Rug") is True
    assert store.add_unlock("decor", "Tartan Picnic Rug") is False
    assert store.state.unlocks.decor == ["Tartan Picnic Rug"]
