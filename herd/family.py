"""Family challenge: rotating caretakers, per-participant scores, MVP election.

Every mini-game of a day is attributed to one family participant, walking the
rotation index forward by one per game. After the day each participant's
running stats are updated and a single MVP is elected. Ties are broken in
participant list order, starting after the previous MVP (or at the persisted
pivot when there is none), so the result never depends on dict ordering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from seasons.calendar import clean_int

logger = logging.getLogger(__name__)

FAMILY_STREAK_ACHIEVEMENT = "familyStreak"
FAMILY_STREAK_TARGET = 3


@dataclass
class FamilyParticipant:
    id: str
    name: str


@dataclass
class ParticipantStats:
    plays: int = 0
    wins: int = 0
    perfects: int = 0
    score: int = 0
    mvp_count: int = 0
    last_played_day: int | None = None
    last_mvp_day: int | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ParticipantStats:
        return cls(
            plays=clean_int(raw.get("plays"), 0),
            wins=clean_int(raw.get("wins"), 0),
            perfects=clean_int(raw.get("perfects"), 0),
            score=clean_int(raw.get("score"), 0),
            mvp_count=clean_int(raw.get("mvp_count"), 0),
            last_played_day=clean_int(raw.get("last_played_day"), 0) or None,
            last_mvp_day=clean_int(raw.get("last_mvp_day"), 0) or None,
        )


@dataclass
class FamilyChallenge:
    """Persistent family challenge ledger."""

    enabled: bool = False
    participants: list[FamilyParticipant] = field(default_factory=list)
    rotation_index: int = 0
    streak: int = 0
    best_streak: int = 0
    stats: dict[str, ParticipantStats] = field(default_factory=dict)
    last_mvp_id: str | None = None
    mvp_pivot: int = 0

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.participants)

    def participant(self, participant_id: str) -> FamilyParticipant | None:
        for entry in self.participants:
            if entry.id == participant_id:
                return entry
        return None

    def stats_for(self, participant_id: str) -> ParticipantStats:
        if participant_id not in self.stats:
            self.stats[participant_id] = ParticipantStats()
        return self.stats[participant_id]

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> FamilyChallenge:
        if not isinstance(data, dict):
            return cls()
        participants = []
        seen: set[str] = set()
        for raw in data.get("participants") or []:
            if not isinstance(raw, dict):
                continue
            pid = str(raw.get("id") or "").strip()
            if not pid or pid in seen:
                continue
            seen.add(pid)
            participants.append(FamilyParticipant(id=pid, name=str(raw.get("name") or pid)))
        stats = {}
        for pid, raw in (data.get("stats") or {}).items():
            if pid in seen and isinstance(raw, dict):
                stats[pid] = ParticipantStats.from_dict(raw)
        last_mvp = data.get("last_mvp_id")
        return cls(
            enabled=bool(data.get("enabled", False)),
            participants=participants,
            rotation_index=clean_int(data.get("rotation_index"), 0),
            streak=clean_int(data.get("streak"), 0),
            best_streak=clean_int(data.get("best_streak"), 0),
            stats=stats,
            last_mvp_id=last_mvp if last_mvp in seen else None,
            mvp_pivot=clean_int(data.get("mvp_pivot"), 0),
        )


@dataclass
class FamilyAssignment:
    participant_id: str
    minigame: str
    success: bool = False
    perfect: bool = False

    @property
    def points(self) -> int:
        if self.perfect:
            return 2
        if self.success:
            return 1
        return 0


@dataclass
class LeaderboardEntry:
    participant_id: str
    name: str
    score: int
    wins: int
    plays: int
    perfects: int
    mvp_count: int


@dataclass
class FamilySummary:
    assignments: list[FamilyAssignment]
    day_scores: dict[str, int]
    leaderboard: list[LeaderboardEntry]
    mvp: FamilyParticipant | None
    next_up: FamilyParticipant | None
    streak: int
    best_streak: int
    unlocked_achievements: list[str] = field(default_factory=list)


def assign_caretakers(ledger: FamilyChallenge, queue: list[str]) -> list[FamilyParticipant | None]:
    """Whose turn each queued mini-game is, in queue order."""
    if not ledger.active:
        return [None] * len(queue)
    count = len(ledger.participants)
    start = ledger.rotation_index % count
    return [ledger.participants[(start + offset) % count] for offset in range(len(queue))]


def elect_mvp(ledger: FamilyChallenge, day_scores: dict[str, int]) -> FamilyParticipant | None:
    """Pick the day's MVP from ``day_scores``; advances the pivot on pivot tie-breaks."""
    if not day_scores:
        return None
    best = max(day_scores.values())
    if best <= 0:
        return None
    candidates = [p for p in ledger.participants if day_scores.get(p.id) == best]
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    order = [p.id for p in ledger.participants]
    if ledger.last_mvp_id in order:
        count = len(order)
        start = order.index(ledger.last_mvp_id)
        candidate_ids = {c.id for c in candidates}
        for step in range(1, count + 1):
            pid = order[(start + step) % count]
            if pid in candidate_ids:
                return ledger.participant(pid)

    choice = candidates[ledger.mvp_pivot % len(candidates)]
    ledger.mvp_pivot += 1
    return choice


def _leaderboard(ledger: FamilyChallenge) -> list[LeaderboardEntry]:
    entries = []
    for participant in ledger.participants:
        stats = ledger.stats_for(participant.id)
        entries.append(
            LeaderboardEntry(
                participant_id=participant.id,
                name=participant.name,
                score=stats.score,
                wins=stats.wins,
                plays=stats.plays,
                perfects=stats.perfects,
                mvp_count=stats.mvp_count,
            )
        )
    # sorted() is stable, so equal entries keep participant order
    return sorted(entries, key=lambda e: (-e.score, -e.wins))


def complete_family_day(
    ledger: FamilyChallenge,
    assignments: list[FamilyAssignment],
    perfect_day: bool,
    day: int,
    next_rotation_index: int | None = None,
) -> FamilySummary | None:
    """Fold a day's assignments into the ledger. No-op when inactive."""
    if not ledger.active:
        return None

    day_scores: dict[str, int] = {}
    for assignment in assignments:
        if ledger.participant(assignment.participant_id) is None:
            logger.debug("Skipping assignment for unknown participant %s", assignment.participant_id)
            continue
        stats = ledger.stats_for(assignment.participant_id)
        stats.plays += 1
        if assignment.success:
            stats.wins += 1
        if assignment.perfect:
            stats.perfects += 1
        stats.score += assignment.points
        stats.last_played_day = day
        day_scores[assignment.participant_id] = day_scores.get(assignment.participant_id, 0) + assignment.points

    mvp = elect_mvp(ledger, day_scores)
    if mvp is not None:
        mvp_stats = ledger.stats_for(mvp.id)
        mvp_stats.mvp_count += 1
        mvp_stats.last_mvp_day = day
        ledger.last_mvp_id = mvp.id

    ledger.streak = ledger.streak + 1 if perfect_day else 0
    ledger.best_streak = max(ledger.best_streak, ledger.streak)

    count = len(ledger.participants)
    if next_rotation_index is None:
        next_rotation_index = ledger.rotation_index + len(assignments)
    ledger.rotation_index = next_rotation_index % count

    unlocked = []
    if ledger.streak >= FAMILY_STREAK_TARGET:
        unlocked.append(FAMILY_STREAK_ACHIEVEMENT)

    logger.info(
        "Family day %d: mvp=%s streak=%d next=%s",
        day,
        mvp.name if mvp else "-",
        ledger.streak,
        ledger.participants[ledger.rotation_index].name,
    )
    return FamilySummary(
        assignments=list(assignments),
        day_scores=day_scores,
        leaderboard=_leaderboard(ledger),
        mvp=mvp,
        next_up=ledger.participants[ledger.rotation_index],
        streak=ledger.streak,
        best_streak=ledger.best_streak,
        unlocked_achievements=unlocked,
    )
