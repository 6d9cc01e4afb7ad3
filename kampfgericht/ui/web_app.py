"""
Web application module for the Kampfgericht scorer.

This module contains the Flask server with the game record endpoints
(GET/PATCH /api/games/<id>) and the live scorer endpoints under
/api/scorer/<id>. The scorer screen polls /state at the tick interval; every
scorer request first pumps the session's scheduler so ticks and the automatic
save run on the request thread.
"""
import hmac
import logging
from typing import Any, Callable, Dict, Optional

from flask import Flask, jsonify, request

from ..config import Config
from ..errors import GameDataError, GameNotFoundError, PersistenceError, SessionLoadError
from ..models import GameUpdate, is_valid_game_id
from ..services import ScorerSession, ServiceFactory
from ..utils import setup_logging
from ..utils.constants import APP_TITLE, FALLBACK_VIEW, LOGIN_VIEW

logger = logging.getLogger(__name__)


class ScorerRegistry:
    """Open scorer sessions of one app, keyed by game id."""

    def __init__(self, factory: ServiceFactory):
        self.factory = factory
        self._sessions: Dict[str, ScorerSession] = {}

    def get(self, game_id: str) -> Optional[ScorerSession]:
        return self._sessions.get(game_id)

    def open(self, game_id: str) -> ScorerSession:
        """
        Return the open session for a game, loading a new one if needed.

        Raises:
            SessionLoadError: If the game cannot be loaded
        """
        session = self._sessions.get(game_id)
        if session is None:
            session = self.factory.create_session(game_id)
            session.load()
            self._sessions[game_id] = session
        return session

    def close(self, game_id: str) -> Optional[ScorerSession]:
        session = self._sessions.pop(game_id, None)
        if session is not None:
            session.close()
        return session

    def close_all(self) -> None:
        for game_id in list(self._sessions):
            self.close(game_id)


def _drain(session: ScorerSession) -> list:
    return [n.to_dict() for n in session.notifier.drain()]


def _session_response(session: ScorerSession, status: int = 200, **extra: Any):
    body = {"success": status < 400, "session": session.snapshot()}
    body.update(extra)
    body["notifications"] = _drain(session)
    return jsonify(body), status


def _error_response(message: Any, status: int, **extra: Any):
    body = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status


def create_app(config_class=Config, time_fn: Optional[Callable[[], float]] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        config_class: Configuration object applied with from_object
        time_fn: Optional time source for the scorer clocks

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    factory = ServiceFactory(app.config, time_fn=time_fn)
    registry = ScorerRegistry(factory)
    app.extensions["kampfgericht"] = registry

    @app.before_request
    def require_scorer_token():
        """Only authorized callers reach a scorer session."""
        if not request.path.startswith("/api/scorer/"):
            return None
        expected = app.config.get("SCORER_API_TOKEN")
        if not expected:
            return None
        header = request.headers.get("Authorization", "")
        supplied = header[len("Bearer "):] if header.startswith("Bearer ") else ""
        if not hmac.compare_digest(supplied.encode(), str(expected).encode()):
            logger.warning("Unauthorized scorer request to %s", request.path)
            return _error_response("Unauthorized", 401, redirect=LOGIN_VIEW)
        return None

    # ==================== Game records ==================== #

    @app.route("/api/games/<game_id>", methods=["GET"])
    def get_game(game_id: str):
        try:
            record = factory.create_repository().fetch_game(game_id)
        except GameNotFoundError:
            return jsonify({"error": "Game not found"}), 404
        except (PersistenceError, GameDataError) as e:
            logger.exception("Reading game %s failed", game_id)
            return jsonify({"error": str(e)}), 500
        return jsonify({"game": record.to_json()})

    @app.route("/api/games/<game_id>", methods=["PATCH"])
    def patch_game(game_id: str):
        try:
            update = GameUpdate.from_json(request.get_json(silent=True))
        except GameDataError as e:
            return jsonify({"error": e.errors}), 400
        try:
            record = factory.create_repository().update_game(game_id, update)
        except GameNotFoundError:
            return jsonify({"error": "Game not found"}), 404
        except (PersistenceError, GameDataError) as e:
            logger.exception("Updating game %s failed", game_id)
            return jsonify({"error": str(e)}), 500
        return jsonify({"game": record.to_json()})

    # ==================== Scorer session ==================== #

    def _open_session(game_id: str):
        session = registry.get(game_id)
        if session is None:
            return None, _error_response("No open scorer session", 404, redirect=FALLBACK_VIEW)
        session.pump()
        return session, None

    @app.route("/api/scorer/<game_id>/session", methods=["POST"])
    def open_session(game_id: str):
        """Load the game and seed the ledgers."""
        if not is_valid_game_id(game_id):
            return _error_response("Invalid game id", 400, redirect=FALLBACK_VIEW)
        try:
            session = registry.open(game_id)
        except SessionLoadError as e:
            status = 404 if isinstance(e.__cause__, GameNotFoundError) else 502
            return _error_response(str(e), status, redirect=FALLBACK_VIEW)
        session.pump()
        return _session_response(session)

    @app.route("/api/scorer/<game_id>/session", methods=["DELETE"])
    def close_session(game_id: str):
        session = registry.close(game_id)
        if session is None:
            return _error_response("No open scorer session", 404)
        return jsonify({"success": True, "notifications": _drain(session)})

    @app.route("/api/scorer/<game_id>/state", methods=["GET"])
    def get_session_state(game_id: str):
        session, error = _open_session(game_id)
        if error:
            return error
        return _session_response(session)

    @app.route("/api/scorer/<game_id>/timer/start", methods=["POST"])
    def start_timer(game_id: str):
        session, error = _open_session(game_id)
        if error:
            return error
        started = session.start_clock()
        return _session_response(session, started=started)

    @app.route("/api/scorer/<game_id>/timer/pause", methods=["POST"])
    def pause_timer(game_id: str):
        session, error = _open_session(game_id)
        if error:
            return error
        session.pause_clock()
        return _session_response(session)

    @app.route("/api/scorer/<game_id>/timer/reset", methods=["POST"])
    def reset_timer(game_id: str):
        session, error = _open_session(game_id)
        if error:
            return error
        session.reset_clock()
        return _session_response(session)

    @app.route("/api/scorer/<game_id>/points", methods=["POST"])
    def add_points(game_id: str):
        session, error = _open_session(game_id)
        if error:
            return error

        data = request.get_json(silent=True) or {}
        player_id = data.get("playerId")
        points = data.get("points")
        errors = []
        if not isinstance(player_id, str) or not player_id:
            errors.append("playerId is required")
        if isinstance(points, bool) or points not in (1, 2, 3):
            errors.append("points must be 1, 2 or 3")
        if errors:
            return _error_response(errors, 400)

        outcome = session.add_points(player_id, int(points))
        if not outcome.accepted:
            return _session_response(
                session, 409, error=outcome.message, reason=outcome.reason.value
            )
        return _session_response(session, action=outcome.action.to_dict())

    @app.route("/api/scorer/<game_id>/undo", methods=["POST"])
    def undo_points(game_id: str):
        session, error = _open_session(game_id)
        if error:
            return error
        action = session.undo_last()
        return _session_response(session, undone=action.to_dict() if action else None)

    @app.route("/api/scorer/<game_id>/save", methods=["POST"])
    def save_game(game_id: str):
        session, error = _open_session(game_id)
        if error:
            return error
        if session.is_saving:
            return _session_response(session, 409, error="Save already in progress", saved=False)
        if not session.save():
            return _session_response(session, 502, error="Saving the game failed", saved=False)
        return _session_response(session, saved=True)

    return app


def run_web_app(config_class=Config) -> None:
    """
    Run the web application.

    The development server runs single-threaded so scorer sessions are only
    ever touched by one request at a time.
    """
    setup_logging(config_class.LOG_LEVEL)
    app = create_app(config_class)
    logger.info("%s listening on %s:%s", APP_TITLE, config_class.HOST, config_class.PORT)
    app.run(host=config_class.HOST, port=config_class.PORT, debug=False, threaded=False)
