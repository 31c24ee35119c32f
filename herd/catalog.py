"""Static game catalogs: foods, accessories, decor, achievements, limits."""

from __future__ import annotations

PERSONALITIES = ("Greedy", "Vain", "Sleepy", "Social")
COAT_COLOURS = ("brown", "cream", "rose", "chocolate", "white")
DEFAULT_COW_NAMES = ("Bonnie", "Fergus", "Isla", "Hamish", "Skye", "Rory")

STAT_KEYS = ("happiness", "hunger", "cleanliness", "chonk")
STAT_MIN = 0
STAT_MAX = 100

ACCESSORY_LIMIT = 3
CHONK_SENTINEL_LIMIT = 70

# Unlock catalog names
FOODS = "foods"
ACCESSORIES = "accessories"
DECOR = "decor"
UNLOCK_TYPES = (FOODS, ACCESSORIES, DECOR)

FOOD_LIBRARY: dict[str, dict] = {
    "Starter Hay": {"icon": "🌾", "hunger": -24, "happiness": 6, "chonk": 0},
    "Carrot Crunch": {"icon": "🥕", "hunger": -20, "happiness": 7, "chonk": 0},
    "Warm Oat Mash": {"icon": "🪣", "hunger": -28, "happiness": 7, "chonk": 2},
    "Sweet Clover Bale": {"icon": "☘️", "hunger": -26, "happiness": 8, "chonk": 1},
    "Heather Honey Jar": {"icon": "🍯", "hunger": -18, "happiness": 10, "chonk": 2},
    "Crisp Apple Crate": {"icon": "🍎", "hunger": -22, "happiness": 8, "chonk": 1},
    "Barley Biscuit Stack": {"icon": "🍪", "hunger": -24, "happiness": 7, "chonk": 3},
}

DEFAULT_FOODS = ("Starter Hay", "Carrot Crunch", "Warm Oat Mash")

ACCESSORY_LIBRARY: dict[str, dict] = {
    "Pastel Bow": {"slot": "head"},
    "Bell Charm": {"slot": "neck"},
    "Sun Hat": {"slot": "head"},
    "Fern Garland": {"slot": "head"},
    "Starry Bandana": {"slot": "neck"},
    "Woolly Scarf": {"slot": "neck"},
    "Thistle Crown": {"slot": "head"},
}

DECOR_LIBRARY: dict[str, dict] = {
    "Wildflower Patch": {"icon": "🌼"},
    "Tartan Picnic Rug": {"icon": "🧺"},
    "Fairy Lights Garland": {"icon": "✨"},
    "Stone Cairn Lantern": {"icon": "🪨"},
    "Milk Churn Planter": {"icon": "🥛"},
    "Festival Bunting": {"icon": "🎀"},
    "Heather Hedge": {"icon": "🌸"},
    "Pebble Pond": {"icon": "💧"},
}

LIBRARIES: dict[str, dict[str, dict]] = {
    FOODS: FOOD_LIBRARY,
    ACCESSORIES: ACCESSORY_LIBRARY,
    DECOR: DECOR_LIBRARY,
}

ACHIEVEMENTS: dict[str, dict[str, str]] = {
    "perfectDay": {
        "title": "Perfect Pastures",
        "description": "Complete all four mini-games in a single day without a miss.",
    },
    "fashionista": {
        "title": "Highland Fashionista",
        "description": "Equip accessories on at least three different cows.",
    },
    "socialButterfly": {
        "title": "Social Butterfly",
        "description": "Win a Social personality event for the herd.",
    },
    "chonkSentinel": {
        "title": "Chonk Sentinel",
        "description": "End a day with every cow below 70 chonk.",
    },
    "familyStreak": {
        "title": "Family Affair",
        "description": "Share three perfect family-challenge days in a row.",
    },
}


def in_library(unlock_type: str, item: str) -> bool:
    return item in LIBRARIES.get(unlock_type, {})


def type_label(unlock_type: str) -> str:
    return unlock_type[:1].upper() + unlock_type[1:]
