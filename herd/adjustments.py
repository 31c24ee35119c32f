"""Accumulate per-mini-game cow adjustments into one day total."""

from __future__ import annotations

import logging

from minigames.models import STAT_FIELDS, Adjustments, CowAdjustment

logger = logging.getLogger(__name__)


def merge_adjustments(target: Adjustments, addition: Adjustments | None) -> Adjustments:
    """Fold ``addition`` into ``target`` in place.

    Stat deltas are summed, treat lists concatenated, and the latest
    accessory grant wins. A cow can appear in several mini-games a day, so
    nothing here overwrites an earlier delta. Plain dict entries are read
    as CowAdjustment; anything else is skipped.
    """
    if not addition:
        return target
    for cow_id, source in addition.items():
        if isinstance(source, dict):
            source = CowAdjustment.from_dict(source)
        if not isinstance(source, CowAdjustment):
            logger.debug("Skipping malformed adjustment for %s", cow_id)
            continue
        dest = target.setdefault(cow_id, CowAdjustment())
        for stat in STAT_FIELDS:
            value = getattr(source, stat, 0)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                dest.add(stat, value)
        if source.served_treats:
            dest.served_treats = dest.served_treats + list(source.served_treats)
        if source.add_accessory and source.add_accessory.strip():
            dest.add_accessory = source.add_accessory
    return target
