"""
GameRecord model for the Kampfgericht scorer application.

This module contains the persisted game document as the scorer consumes and
produces it: the two rosters, the final scores, the game status and the
per-player shot counts. The JSON shape matches the game API documents
(``_id``, ``teamA``, ``playerStats`` ...).
"""
import math
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import GameDataError

_OBJECT_ID_RE = re.compile(r"^[a-fA-F0-9]{24}$")


def is_valid_game_id(game_id: Optional[str]) -> bool:
    """Return True for 24 character hexadecimal document ids."""
    return bool(game_id) and bool(_OBJECT_ID_RE.match(game_id))


class GameStatus(str, Enum):
    """Lifecycle of a persisted game."""
    PENDING = "pending"
    LIVE = "live"
    FINISHED = "finished"


def _as_id(value: Any) -> Optional[str]:
    # populated references arrive as whole documents
    if isinstance(value, dict):
        value = value.get("_id", value.get("id"))
    if value is None or value == "":
        return None
    return str(value)


def _as_count(value: Any, label: str, errors: List[str]) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        errors.append(f"{label} must be an integer")
        return 0
    # NaN and Infinity are valid JSON for the json module
    if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
        errors.append(f"{label} must be an integer")
        return 0
    if value < 0:
        errors.append(f"{label} must not be negative")
        return 0
    return int(value)


def _as_jersey_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None


@dataclass
class RosterPlayer:
    """A player as listed on a team roster."""
    player_id: str
    name: str
    number: Optional[int] = None

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"_id": self.player_id, "name": self.name}
        if self.number is not None:
            data["number"] = self.number
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any], team_label: str) -> "RosterPlayer":
        player_id = _as_id(data.get("_id", data.get("id"))) if isinstance(data, dict) else None
        if not player_id:
            raise GameDataError(f"{team_label} has a player without an id")
        return cls(
            player_id=player_id,
            name=str(data.get("name") or ""),
            number=_as_jersey_number(data.get("number")),
        )


@dataclass
class RosterTeam:
    """A team and its ordered roster."""
    team_id: str
    name: str
    players: List[RosterPlayer] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            "_id": self.team_id,
            "name": self.name,
            "players": [p.to_json() for p in self.players],
        }

    @classmethod
    def from_json(cls, data: Any, label: str) -> "RosterTeam":
        if not isinstance(data, dict):
            raise GameDataError(f"Incomplete game data: {label} is missing")
        team_id = _as_id(data.get("_id", data.get("id")))
        if not team_id:
            raise GameDataError(f"Incomplete game data: {label} has no id")
        raw_players = data.get("players")
        if not isinstance(raw_players, list):
            raise GameDataError(f"Incomplete game data: {label} has no player list")
        return cls(
            team_id=team_id,
            name=str(data.get("name") or ""),
            players=[RosterPlayer.from_json(p, label) for p in raw_players],
        )


@dataclass
class PlayerStatLine:
    """Persisted shot counts of one player in one game."""
    player_id: str
    points1: int = 0
    points2: int = 0
    points3: int = 0
    total: int = 0

    def to_json(self) -> Dict[str, Any]:
        return {
            "playerId": self.player_id,
            "points1": self.points1,
            "points2": self.points2,
            "points3": self.points3,
            "total": self.total,
        }

    @classmethod
    def from_json(cls, data: Any, errors: List[str], index: int = 0) -> Optional["PlayerStatLine"]:
        label = f"playerStats[{index}]"
        if not isinstance(data, dict):
            errors.append(f"{label} must be an object")
            return None
        player_id = _as_id(data.get("playerId"))
        if not player_id:
            errors.append(f"{label}.playerId is required")
            return None
        points1 = _as_count(data.get("points1"), f"{label}.points1", errors)
        points2 = _as_count(data.get("points2"), f"{label}.points2", errors)
        points3 = _as_count(data.get("points3"), f"{label}.points3", errors)
        if data.get("total") is None:
            total = points1 + 2 * points2 + 3 * points3
        else:
            total = _as_count(data.get("total"), f"{label}.total", errors)
        return cls(player_id, points1, points2, points3, total)


@dataclass
class GameUpdate:
    """
    A partial update of a game record.

    Fields left as None are not touched when the update is applied.
    """
    status: Optional[GameStatus] = None
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    player_stats: Optional[List[PlayerStatLine]] = None

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.status is not None:
            data["status"] = self.status.value
        if self.score_a is not None:
            data["scoreA"] = self.score_a
        if self.score_b is not None:
            data["scoreB"] = self.score_b
        if self.player_stats is not None:
            data["playerStats"] = [line.to_json() for line in self.player_stats]
        return data

    @classmethod
    def from_json(cls, data: Any) -> "GameUpdate":
        """
        Validate and parse an update payload.

        Unknown keys are ignored.

        Raises:
            GameDataError: If any known field has the wrong type
        """
        if not isinstance(data, dict):
            raise GameDataError("Update payload must be a JSON object")

        errors: List[str] = []
        update = cls()

        if "status" in data:
            try:
                update.status = GameStatus(data["status"])
            except ValueError:
                errors.append("status must be one of pending, live, finished")
        if "scoreA" in data:
            update.score_a = _as_count(data["scoreA"], "scoreA", errors)
        if "scoreB" in data:
            update.score_b = _as_count(data["scoreB"], "scoreB", errors)
        if "playerStats" in data:
            raw = data["playerStats"]
            if not isinstance(raw, list):
                errors.append("playerStats must be a list")
            else:
                lines = [PlayerStatLine.from_json(item, errors, idx) for idx, item in enumerate(raw)]
                update.player_stats = [line for line in lines if line is not None]

        if errors:
            raise GameDataError("Invalid game update", errors)
        return update


@dataclass
class GameRecord:
    """
    Represents a persisted game as seen by the scorer.

    Attributes:
        game_id: Document id of the game
        tournament_id: Owning tournament id, if known
        team_a: First team with its roster
        team_b: Second team with its roster
        score_a: Persisted score of team A
        score_b: Persisted score of team B
        status: pending, live or finished
        player_stats: Persisted shot counts per player
        scheduled_time: Optional ISO timestamp of the planned tip-off
    """
    game_id: str
    team_a: RosterTeam
    team_b: RosterTeam
    tournament_id: Optional[str] = None
    score_a: int = 0
    score_b: int = 0
    status: GameStatus = GameStatus.PENDING
    player_stats: List[PlayerStatLine] = field(default_factory=list)
    scheduled_time: Optional[str] = None

    def stat_for(self, player_id: str) -> Optional[PlayerStatLine]:
        """Return the persisted stat line for a player, if any."""
        return next((line for line in self.player_stats if line.player_id == player_id), None)

    def apply_update(self, update: GameUpdate) -> "GameRecord":
        """Return a copy of this record with the update applied."""
        changes: Dict[str, Any] = {}
        if update.status is not None:
            changes["status"] = update.status
        if update.score_a is not None:
            changes["score_a"] = update.score_a
        if update.score_b is not None:
            changes["score_b"] = update.score_b
        if update.player_stats is not None:
            changes["player_stats"] = list(update.player_stats)
        return replace(self, **changes)

    def to_json(self) -> Dict[str, Any]:
        """
        Convert GameRecord to JSON-serializable dictionary.

        Returns:
            Dictionary in the game API document shape
        """
        data: Dict[str, Any] = {
            "_id": self.game_id,
            "tournamentId": self.tournament_id,
            "teamA": self.team_a.to_json(),
            "teamB": self.team_b.to_json(),
            "scoreA": self.score_a,
            "scoreB": self.score_b,
            "status": self.status.value,
            "playerStats": [line.to_json() for line in self.player_stats],
        }
        if self.scheduled_time is not None:
            data["scheduledTime"] = self.scheduled_time
        return data

    @staticmethod
    def from_json(data: Any) -> "GameRecord":
        """
        Create GameRecord from a game API document.

        Raises:
            GameDataError: If the document lacks the game id, a team or a roster
        """
        if not isinstance(data, dict):
            raise GameDataError("Game document must be a JSON object")
        game_id = _as_id(data.get("_id", data.get("id")))
        if not game_id:
            raise GameDataError("Incomplete game data: game id is missing")

        team_a = RosterTeam.from_json(data.get("teamA"), "teamA")
        team_b = RosterTeam.from_json(data.get("teamB"), "teamB")
        if team_a.team_id == team_b.team_id:
            raise GameDataError("Incomplete game data: teamA and teamB share the same id")

        errors: List[str] = []
        try:
            status = GameStatus(data.get("status") or GameStatus.PENDING.value)
        except ValueError:
            errors.append("status must be one of pending, live, finished")
            status = GameStatus.PENDING
        score_a = _as_count(data.get("scoreA"), "scoreA", errors)
        score_b = _as_count(data.get("scoreB"), "scoreB", errors)
        raw_stats = data.get("playerStats") or []
        if not isinstance(raw_stats, list):
            errors.append("playerStats must be a list")
            raw_stats = []
        lines = [PlayerStatLine.from_json(item, errors, idx) for idx, item in enumerate(raw_stats)]
        if errors:
            raise GameDataError("Malformed game data", errors)

        return GameRecord(
            game_id=game_id,
            tournament_id=_as_id(data.get("tournamentId")),
            team_a=team_a,
            team_b=team_b,
            score_a=score_a,
            score_b=score_b,
            status=status,
            player_stats=[line for line in lines if line is not None],
            scheduled_time=data.get("scheduledTime"),
        )
