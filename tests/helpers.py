"""Shared builders and fakes for the scorer tests."""
from typing import List, Optional

from kampfgericht.errors import GameNotFoundError, PersistenceError
from kampfgericht.models import (
    GameRecord, GameStatus, GameUpdate, PlayerStatLine, RosterPlayer, RosterTeam
)


def oid(n: int) -> str:
    return f"{n:024x}"


GAME_ID = oid(1)
TEAM_A_ID = oid(100)
TEAM_B_ID = oid(200)
ALICE, BEN, CARA = oid(101), oid(102), oid(103)
DANA, ELI = oid(201), oid(202)


def make_record(
    status: GameStatus = GameStatus.PENDING,
    player_stats: Optional[List[PlayerStatLine]] = None,
) -> GameRecord:
    return GameRecord(
        game_id=GAME_ID,
        tournament_id=oid(9),
        team_a=RosterTeam(TEAM_A_ID, "Falcons", [
            RosterPlayer(ALICE, "Alice", 4),
            RosterPlayer(BEN, "Ben", 7),
            RosterPlayer(CARA, "Cara"),
        ]),
        team_b=RosterTeam(TEAM_B_ID, "Otters", [
            RosterPlayer(DANA, "Dana", 10),
            RosterPlayer(ELI, "Eli", 12),
        ]),
        status=status,
        player_stats=list(player_stats or []),
    )


class FakeTime:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class MemoryGameRepository:
    """In-memory game repository that records every update it receives."""

    def __init__(self, record: Optional[GameRecord] = None):
        self.record = record or make_record()
        self.updates: List[GameUpdate] = []
        self.fail_updates = False
        self.on_update = None

    def fetch_game(self, game_id: str) -> GameRecord:
        if game_id != self.record.game_id:
            raise GameNotFoundError(game_id)
        return self.record

    def update_game(self, game_id: str, update: GameUpdate) -> GameRecord:
        if self.on_update is not None:
            self.on_update(update)
        if self.fail_updates:
            raise PersistenceError("Game API unreachable")
        self.updates.append(update)
        self.record = self.fetch_game(game_id).apply_update(update)
        return self.record

    @property
    def saves(self) -> List[GameUpdate]:
        return [u for u in self.updates if u.player_stats is not None]
