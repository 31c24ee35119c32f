"""Awaitable adapter over the callback-driven mini-game contract."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from .models import MiniGameContext, MiniGameResult, coerce_adjustments

logger = logging.getLogger(__name__)


class MiniGameError(Exception):
    """Raised when a mini-game breaks its contract."""

    def __init__(self, message: str, key: str = ""):
        self.key = key
        super().__init__(message)


class MiniGameProtocolError(MiniGameError):
    """Raised when a mini-game signals completion more than once."""


class MiniGame(Protocol):
    key: str
    label: str
    description: str
    icon: str

    def start(self, context: MiniGameContext) -> None: ...

    def stop(self) -> None: ...


@dataclass(frozen=True)
class MiniGameInfo:
    key: str
    label: str
    description: str
    icon: str = ""


MINIGAME_INFO: dict[str, MiniGameInfo] = {
    "catch": MiniGameInfo(
        key="catch",
        label="Catch the Cow",
        description="Tap or click runaway cows to nudge them back toward the centre paddock.",
        icon="🐄",
    ),
    "food": MiniGameInfo(
        key="food",
        label="Food Frenzy",
        description="Drag the matching feed to each cow. One serving each keeps them spry!",
        icon="🥕",
    ),
    "brush": MiniGameInfo(
        key="brush",
        label="Brush Rush",
        description="Brush the messy patches away by dragging across them quickly.",
        icon="🧼",
    ),
    "ceilidh": MiniGameInfo(
        key="ceilidh",
        label="Highland Ceilidh",
        description="Tap the step button as the glow appears to keep the dance in perfect time.",
        icon="💃",
    ),
}

MINIGAME_KEYS = tuple(MINIGAME_INFO)


async def play_minigame(
    game: MiniGame,
    context: MiniGameContext,
    timeout: float | None = None,
) -> MiniGameResult:
    """Start ``game`` and suspend until its single completion signal.

    ``context.on_complete`` is replaced with a guarded callback: the game is
    stopped as soon as it completes, and a second completion raises
    ``MiniGameProtocolError``. With ``timeout`` set, a stalled game is
    stopped and reported as a failed run.
    """
    loop = asyncio.get_running_loop()
    done: asyncio.Future[MiniGameResult] = loop.create_future()
    completions = 0
    timed_out = False

    def _complete(result: MiniGameResult | dict) -> None:
        nonlocal completions
        if timed_out:
            logger.info("Ignoring late completion from %s", game.key)
            return
        if isinstance(result, dict):
            result = MiniGameResult.from_dict(result)
        else:
            result.adjustments = coerce_adjustments(result.adjustments)
        completions += 1
        if completions > 1:
            raise MiniGameProtocolError(
                f"Mini-game {game.key!r} completed {completions} times", key=game.key
            )
        game.stop()
        if not done.done():
            done.set_result(result)

    context.on_complete = _complete
    logger.debug("Starting mini-game %s (difficulty=%d)", game.key, context.difficulty)
    game.start(context)

    if timeout is None:
        return await done

    try:
        return await asyncio.wait_for(done, timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Mini-game %s stalled after %.1fs; stopping it", game.key, timeout)
        timed_out = True
        game.stop()
        return MiniGameResult(
            success=False,
            summary=f"The {game.label} ran out of time.",
        )
