"""Entry point for the Highland herd day runner.

Usage:
    python main.py --preview             # Show today's plan
    python main.py --play                # Play one day with simulated mini-games
    python main.py --play --days 5       # Play several days back to back
    python main.py --play --dry-run      # Play without saving anything
    python main.py --play --seed 7       # Reproducible run
    python main.py --play --verbose      # Verbose logging
"""

from __future__ import annotations

import asyncio
import logging
import random
import sys
from pathlib import Path

import click

from herd.config import load_config
from herd.core import DayOrchestrator, DaySummary
from herd.memory import HistoryDB, StateManager, new_save
from herd.planner import PreviewNote
from herd.store import FarmStore
from minigames.simulated import build_simulated_minigames

ROOT = Path(__file__).resolve().parent


def _setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=fmt, handlers=handlers)

    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


class ConsoleUI:
    """Day screens rendered as plain terminal lines."""

    def show_preview(self, notes: list[PreviewNote]) -> None:
        click.echo("\n  Today on the farm:")
        for note in notes:
            click.echo(f"    {note.title}")
            click.echo(f"      {note.detail}")
        click.echo("")

    def set_title(self, title: str, index: int, total: int, icon: str = "") -> None:
        click.echo(f"  [{index}/{total}] {icon} {title}".rstrip())

    def set_instruction(self, text: str) -> None:
        click.echo(f"      {text}")

    def update_timer(self, seconds: float) -> None:
        pass

    def show_summary(self, summary: DaySummary) -> None:
        click.echo(f"\n  Day {summary.day} summary")
        for record in summary.records:
            mark = "✓" if record.success else "✗"
            click.echo(f"    {mark} {record.name}: {record.summary}")
        if summary.reward:
            reason = f" ({summary.reward.guaranteed_by})" if summary.reward.guaranteed_by else ""
            click.echo(f"    Unlocked {summary.reward.type_label}: {summary.reward.item}{reason}")
        if summary.festival_result:
            click.echo(f"    Festival: {summary.festival_result.name} complete")
        for key in summary.achievements_unlocked:
            click.echo(f"    Achievement: {key}")
        streak = f"{summary.perfect_streak} (best {summary.best_perfect_streak})"
        click.echo(f"    Perfect day: {'yes' if summary.perfect_day else 'no'} | streak {streak}")
        if summary.family:
            mvp = summary.family.mvp.name if summary.family.mvp else "-"
            up = summary.family.next_up.name if summary.family.next_up else "-"
            click.echo(f"    Family MVP: {mvp} | next up: {up} | streak {summary.family.streak}")
        click.echo("")


def _resolve(path: str) -> Path:
    candidate = Path(path)
    return candidate if candidate.is_absolute() else ROOT / candidate


async def _play(orchestrator: DayOrchestrator, days: int) -> None:
    for _ in range(days):
        orchestrator.preview()
        await orchestrator.start_day()


async def _run(
    cfg: dict,
    store: FarmStore,
    rng: random.Random,
    days: int,
    history_path: Path | None,
) -> None:
    minigames = build_simulated_minigames(rng, cfg.get("simulation", {}).get("success_rate", 0.75))
    day_cfg = cfg.get("day", {})
    options = {
        "ui": ConsoleUI(),
        "minigame_timeout": cfg.get("minigames", {}).get("timeout_seconds"),
        "max_difficulty": day_cfg.get("max_difficulty", 10),
        "max_participants": day_cfg.get("participants", 3),
    }
    if history_path is None:
        await _play(DayOrchestrator(store, minigames, rng=rng, **options), days)
        return
    async with HistoryDB(history_path) as db:
        await _play(DayOrchestrator(store, minigames, rng=rng, history=db, **options), days)
        click.echo(f"  {await db.get_day_count()} day(s) in the farm history.")


@click.command()
@click.option("--preview", is_flag=True, help="Show today's plan and exit")
@click.option("--play", is_flag=True, help="Play days with simulated mini-games")
@click.option("--days", type=int, default=1, show_default=True, help="Days to play")
@click.option("--seed", type=int, default=None, help="Random seed")
@click.option("--dry-run", is_flag=True, help="Play without saving the farm")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--config-dir", type=click.Path(), default=None, help="Config directory")
def main(
    preview: bool,
    play: bool,
    days: int,
    seed: int | None,
    dry_run: bool,
    verbose: bool,
    config_dir: str | None,
) -> None:
    """Highland herd - plan and play farm days."""

    if not preview and not play:
        click.echo("Specify --preview or --play. Use --help for details.")
        sys.exit(1)

    cfg = load_config(config_dir)
    env = cfg.get("_env", {})
    storage = cfg.get("storage", {})

    _setup_logging(verbose=verbose, log_file=storage.get("log_file"))

    if seed is None:
        seed = env.get("seed")
    rng = random.Random(seed)

    manager = StateManager(_resolve(env.get("save_file") or storage.get("state_file", "data/save.json")))
    herd_size = cfg.get("herd", {}).get("size", 4)
    family = cfg.get("family")
    if dry_run:
        click.echo("DRY RUN - the farm will not be saved.\n")
        state = manager.load(rng, herd_size, family) if manager.path.exists() else new_save(rng, herd_size, family)
        store = FarmStore(state)
    else:
        store = FarmStore(manager.load(rng, herd_size, family), manager)

    if preview:
        DayOrchestrator(store, {}, rng=rng, ui=ConsoleUI()).preview()
        return

    history_path = None
    if not dry_run:
        history_path = _resolve(env.get("history_db") or storage.get("history_db", "data/history.db"))
    try:
        asyncio.run(_run(cfg, store, rng, max(1, days), history_path))
    except KeyboardInterrupt:
        click.echo("\nThe herd settles down for the night.")


if __name__ == "__main__":
    main()
