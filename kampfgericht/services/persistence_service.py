"""
Persistence service for the Kampfgericht scorer application.

This module reads and writes game records, either from JSON documents on disk
or from the game API over HTTP. Both backends raise PersistenceError (or
GameNotFoundError) so the scorer session can report failures uniformly.
"""
import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional, Protocol

import requests

from ..errors import GameDataError, GameNotFoundError, PersistenceError
from ..models import GameRecord, GameUpdate, is_valid_game_id
from ..utils.constants import GAME_API_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class GameRepository(Protocol):
    """Collaborator that owns the persisted game records."""

    def fetch_game(self, game_id: str) -> GameRecord:
        ...

    def update_game(self, game_id: str, update: GameUpdate) -> GameRecord:
        ...


class JsonGameStore:
    """
    Game records stored as one JSON file per game.

    Writes go through a temporary file and an atomic rename so a crashed
    write never leaves a truncated document behind.
    """

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, game_id: str) -> str:
        if not is_valid_game_id(game_id):
            raise GameNotFoundError(game_id)
        return os.path.join(self.directory, f"{game_id}.json")

    def fetch_game(self, game_id: str) -> GameRecord:
        """
        Load a game record.

        Raises:
            GameNotFoundError: If no document exists for the id
            PersistenceError: If the file cannot be read or parsed
            GameDataError: If the document is structurally incomplete
        """
        file_path = self._path(game_id)
        if not os.path.exists(file_path):
            raise GameNotFoundError(game_id)

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Could not read game {game_id}: {exc}") from exc

        return GameRecord.from_json(data)

    def save_game(self, record: GameRecord) -> None:
        """Write a whole game record, creating the directory if needed."""
        file_path = self._path(record.game_id)
        try:
            os.makedirs(self.directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record.to_json(), f, indent=2)
            os.replace(tmp_path, file_path)
        except OSError as exc:
            raise PersistenceError(f"Could not write game {record.game_id}: {exc}") from exc

    def update_game(self, game_id: str, update: GameUpdate) -> GameRecord:
        record = self.fetch_game(game_id).apply_update(update)
        self.save_game(record)
        logger.info("Game %s updated: %s", game_id, sorted(update.to_json().keys()))
        return record

    def list_game_ids(self) -> List[str]:
        """Return ids of all stored games, sorted."""
        if not os.path.isdir(self.directory):
            return []
        ids = []
        for filename in os.listdir(self.directory):
            stem, ext = os.path.splitext(filename)
            if ext == ".json" and is_valid_game_id(stem):
                ids.append(stem)
        return sorted(ids)


class HttpGameClient:
    """Game repository backed by the game API (GET/PATCH /api/games/<id>)."""

    def __init__(
        self,
        base_url: str,
        timeout: float = GAME_API_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_game(self, game_id: str) -> GameRecord:
        return self._request("GET", game_id)

    def update_game(self, game_id: str, update: GameUpdate) -> GameRecord:
        return self._request("PATCH", game_id, update.to_json())

    def _request(self, method: str, game_id: str, payload: Optional[Dict[str, Any]] = None) -> GameRecord:
        url = f"{self.base_url}/api/games/{game_id}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise PersistenceError(f"Game API unreachable: {exc}") from exc

        if response.status_code == 404:
            raise GameNotFoundError(game_id)
        if not response.ok:
            raise PersistenceError(self._error_message(response))

        try:
            body = response.json()
        except ValueError as exc:
            raise PersistenceError("Malformed response from game API") from exc

        game = body.get("game") if isinstance(body, dict) else None
        if game is None:
            raise PersistenceError("Malformed response from game API: no game")
        try:
            return GameRecord.from_json(game)
        except GameDataError as exc:
            raise PersistenceError(f"Malformed game in API response: {exc}") from exc

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        message = f"HTTP Error: {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            return response.reason or message
        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            return error if isinstance(error, str) else json.dumps(error)
        return message
