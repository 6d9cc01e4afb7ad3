"""
Scoring ledger service for the Kampfgericht scorer application.

This module keeps the two team ledgers of a scorer session together with the
history of accepted scoring actions, so that every action can be reversed
exactly. Rejected scoring attempts are reported as outcomes, never raised.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..errors import GameDataError, LedgerStateError
from ..models import (
    GameRecord, PlayerScoreEntry, PlayerStatLine, RosterTeam, ScoringAction, TeamLedger
)
from ..utils import now_ts, POINT_VALUES

logger = logging.getLogger(__name__)

# Returns None while scoring is allowed, otherwise the reason it is blocked
ScoringGate = Callable[[], Optional[str]]


class ScoringRejection(Enum):
    """Why a scoring attempt was refused."""
    NOT_INITIALIZED = "not_initialized"
    SCORING_GATED = "scoring_gated"
    INVALID_POINTS = "invalid_points"
    PLAYER_NOT_FOUND = "player_not_found"
    PLAYER_IN_BOTH_ROSTERS = "player_in_both_rosters"


@dataclass(frozen=True)
class ScoringOutcome:
    """Result of an add_points call."""
    accepted: bool
    message: str
    action: Optional[ScoringAction] = None
    reason: Optional[ScoringRejection] = None

    @classmethod
    def rejected(cls, reason: ScoringRejection, message: str) -> "ScoringOutcome":
        return cls(accepted=False, message=message, reason=reason)


def _open_gate() -> Optional[str]:
    return None


def _ledger_from_roster(team: RosterTeam, record: GameRecord) -> TeamLedger:
    players: List[PlayerScoreEntry] = []
    for roster_player in team.players:
        stat = record.stat_for(roster_player.player_id)
        players.append(
            PlayerScoreEntry(
                player_id=roster_player.player_id,
                player_name=roster_player.name,
                number=roster_player.number,
                points1=stat.points1 if stat else 0,
                points2=stat.points2 if stat else 0,
                points3=stat.points3 if stat else 0,
            )
        )
    return TeamLedger(team_id=team.team_id, team_name=team.name, players=players)


class ScoringLedger:
    """
    Per-session points ledger for two rosters with history-based undo.

    Args:
        gate: Callable consulted before every mutation; returns the reason
              scoring is blocked, or None when it is allowed
    """

    def __init__(self, gate: Optional[ScoringGate] = None):
        self._gate = gate or _open_gate
        self.team_a: Optional[TeamLedger] = None
        self.team_b: Optional[TeamLedger] = None
        self._history: List[ScoringAction] = []

    @property
    def is_initialized(self) -> bool:
        return self.team_a is not None and self.team_b is not None

    def initialize_from_record(self, record: GameRecord) -> None:
        """
        Seed both ledgers from a persisted game record.

        Totals are recomputed from the three shot counts; a persisted total is
        not trusted.

        Raises:
            LedgerStateError: If the ledger was already initialized
            GameDataError: If both teams carry the same id
        """
        if self.is_initialized:
            raise LedgerStateError("Scoring ledger is already initialized")
        if record.team_a.team_id == record.team_b.team_id:
            raise GameDataError("Incomplete game data: teamA and teamB share the same id")

        self.team_a = _ledger_from_roster(record.team_a, record)
        self.team_b = _ledger_from_roster(record.team_b, record)
        self._history = []
        logger.info(
            "Ledger seeded for game %s: %s %s : %s %s",
            record.game_id, self.team_a.team_name, self.team_a.total_score,
            self.team_b.total_score, self.team_b.team_name,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_points(self, player_id: str, points: int, now: Optional[float] = None) -> ScoringOutcome:
        """Credit a made shot to a player if the gate and the rosters allow it."""
        if not self.is_initialized:
            return ScoringOutcome.rejected(
                ScoringRejection.NOT_INITIALIZED, "Player data is not available"
            )

        blocked = self._gate()
        if blocked is not None:
            logger.info("Scoring rejected for %s: %s", player_id, blocked)
            return ScoringOutcome.rejected(ScoringRejection.SCORING_GATED, blocked)

        if isinstance(points, bool) or points not in POINT_VALUES:
            return ScoringOutcome.rejected(
                ScoringRejection.INVALID_POINTS, f"Invalid point value: {points!r}"
            )

        in_a = self.team_a.find(player_id)
        in_b = self.team_b.find(player_id)
        if in_a is not None and in_b is not None:
            logger.warning("Player %s is listed on both rosters", player_id)
            return ScoringOutcome.rejected(
                ScoringRejection.PLAYER_IN_BOTH_ROSTERS,
                "Player is on both teams - inconsistent game data",
            )
        if in_a is None and in_b is None:
            return ScoringOutcome.rejected(ScoringRejection.PLAYER_NOT_FOUND, "Player not found")

        team = self.team_a if in_a is not None else self.team_b
        entry = in_a if in_a is not None else in_b
        entry.add_shot(points)

        action = ScoringAction(
            player_id=entry.player_id,
            player_name=entry.player_name,
            team_id=team.team_id,
            team_name=team.team_name,
            points=points,
            timestamp=now_ts() if now is None else now,
        )
        self._history.append(action)
        logger.info("Scored %s", action.description)
        return ScoringOutcome(accepted=True, message=action.description, action=action)

    def undo_last(self) -> Optional[ScoringAction]:
        """
        Reverse the most recent accepted action.

        Returns:
            The undone action, or None when there is nothing to undo or the
            scored player is no longer on the ledger
        """
        if not self._history:
            return None

        action = self._history.pop()
        team = self._team_by_id(action.team_id)
        entry = team.find(action.player_id) if team is not None else None
        if entry is None:
            logger.warning("Undo target %s/%s no longer exists", action.team_id, action.player_id)
            return None

        entry.remove_shot(action.points)
        logger.info("Undid %s", action.description)
        return action

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def history(self) -> Tuple[ScoringAction, ...]:
        return tuple(self._history)

    def can_undo(self) -> bool:
        return bool(self._history)

    def last_action(self) -> Optional[ScoringAction]:
        return self._history[-1] if self._history else None

    def score_line(self) -> Tuple[int, int]:
        """Return (score_a, score_b)."""
        self._require_initialized()
        return self.team_a.total_score, self.team_b.total_score

    def to_player_stats(self) -> List[PlayerStatLine]:
        """Flatten team A then team B, each in roster order."""
        self._require_initialized()
        return [p.to_stat_line() for p in self.team_a.players + self.team_b.players]

    def _team_by_id(self, team_id: str) -> Optional[TeamLedger]:
        for team in (self.team_a, self.team_b):
            if team is not None and team.team_id == team_id:
                return team
        return None

    def _require_initialized(self) -> None:
        if not self.is_initialized:
            raise LedgerStateError("Scoring ledger is not initialized")
