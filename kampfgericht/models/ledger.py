"""
Ledger models for the Kampfgericht scorer application.

This module contains the in-memory scoring state of one scorer session:
per-player shot counts, per-team ledgers and the undo history entries.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .game_record import PlayerStatLine


@dataclass
class PlayerScoreEntry:
    """
    Running shot counts of one player.

    The total is always derived from the three counts and is never stored.
    """
    player_id: str
    player_name: str
    number: Optional[int] = None
    points1: int = 0
    points2: int = 0
    points3: int = 0

    @property
    def total(self) -> int:
        return self.points1 + 2 * self.points2 + 3 * self.points3

    def add_shot(self, points: int) -> None:
        """Record one made shot worth ``points``."""
        if points == 1:
            self.points1 += 1
        elif points == 2:
            self.points2 += 1
        elif points == 3:
            self.points3 += 1
        else:
            raise ValueError(f"Invalid point value: {points}")

    def remove_shot(self, points: int) -> None:
        """Remove one made shot worth ``points``, never going below zero."""
        if points == 1:
            self.points1 = max(0, self.points1 - 1)
        elif points == 2:
            self.points2 = max(0, self.points2 - 1)
        elif points == 3:
            self.points3 = max(0, self.points3 - 1)
        else:
            raise ValueError(f"Invalid point value: {points}")

    def to_stat_line(self) -> PlayerStatLine:
        return PlayerStatLine(
            player_id=self.player_id,
            points1=self.points1,
            points2=self.points2,
            points3=self.points3,
            total=self.total,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "number": self.number,
            "points1": self.points1,
            "points2": self.points2,
            "points3": self.points3,
            "total": self.total,
        }


@dataclass
class TeamLedger:
    """Scoring ledger of one team; player order follows the roster."""
    team_id: str
    team_name: str
    players: List[PlayerScoreEntry] = field(default_factory=list)

    @property
    def total_score(self) -> int:
        return sum(p.total for p in self.players)

    def find(self, player_id: str) -> Optional[PlayerScoreEntry]:
        return next((p for p in self.players if p.player_id == player_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teamId": self.team_id,
            "teamName": self.team_name,
            "totalScore": self.total_score,
            "players": [p.to_dict() for p in self.players],
        }


@dataclass(frozen=True)
class ScoringAction:
    """One accepted scoring event, kept for undo."""
    player_id: str
    player_name: str
    team_id: str
    team_name: str
    points: int
    timestamp: float

    @property
    def description(self) -> str:
        unit = "point" if self.points == 1 else "points"
        return f"{self.points} {unit} for {self.player_name} ({self.team_name})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "teamId": self.team_id,
            "teamName": self.team_name,
            "points": self.points,
            "timestamp": self.timestamp,
        }
