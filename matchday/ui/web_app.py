"""
Web application module for the Matchday live-match tracker.

This module contains the Flask web server that serves the HTML interface
and provides the JSON API the sideline screen drives the match with.
"""
import functools
import logging
import os
import threading
from typing import Any, Callable, Dict, Optional

from flask import Flask, jsonify, request, send_from_directory

from ..models import Team
from ..services import BENCH, CapacityExceeded, InvalidTransition, ServiceFactory
from ..utils import MAX_MATCH_DURATION_MIN, MIN_MATCH_DURATION_MIN, fmt_mmss

logger = logging.getLogger(__name__)


class WebAppState:
    """
    State holder for the web application.

    Flask may serve requests on several threads; every API call runs under
    ``lock`` so each one is atomic with respect to the match session.
    """

    def __init__(self, data_dir: Optional[str] = None):
        self.service_factory = ServiceFactory(data_dir)
        self.session = self.service_factory.create_match_session()
        self.persistence_service = self.service_factory.get_persistence_service()
        self.lock = threading.Lock()


def create_app(static_folder: str = ".", state: Optional[WebAppState] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        static_folder: Directory to serve static files from
        state: Application state; a new one is created when omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__, static_folder=static_folder, static_url_path="")
    app_state = state or WebAppState()
    app.config["MATCHDAY_STATE"] = app_state

    @app.route("/")
    def index():
        """Serve the main HTML interface."""
        response = send_from_directory(static_folder, "index.html")
        response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        return response

    # ==================== Helpers ==================== #

    def api_operation(func: Callable[..., Any]) -> Callable[..., Any]:
        """Run an endpoint under the session lock and map errors to responses."""
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with app_state.lock:
                try:
                    app_state.session.tick()
                    return func(*args, **kwargs)
                except CapacityExceeded as e:
                    return jsonify({
                        "success": False,
                        "rejected": True,
                        "error": str(e),
                        "max_active": e.max_active,
                    }), 409
                except InvalidTransition as e:
                    return jsonify({"success": False, "error": str(e)}), 400
                except Exception as e:
                    logger.exception("Unhandled error in %s", func.__name__)
                    return jsonify({"success": False, "error": str(e)}), 500
        return wrapper

    def _body() -> Dict[str, Any]:
        return request.get_json(silent=True) or {}

    def _require(data: Dict[str, Any], key: str) -> str:
        value = data.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise InvalidTransition(f"'{key}' is required")
        return str(value)

    def _needs_confirmation(action: str, data: Dict[str, Any], player_id: Optional[str] = None):
        """Response asking the coach to confirm, or None when already confirmed."""
        if data.get("confirmed") is True:
            return None
        prompt = app_state.session.confirmation_prompt(action, player_id)
        return jsonify({
            "success": False,
            "requires_confirmation": True,
            "prompt": prompt,
        })

    def _state_response(**extra):
        view = app_state.session.state_view()
        view["clock"]["display"] = fmt_mmss(view["clock"]["elapsed_seconds"])
        payload = {"success": True, "state": view}
        payload.update(extra)
        return jsonify(payload)

    # ==================== State and setup ==================== #

    @app.route("/api/state", methods=["GET"])
    @api_operation
    def get_state():
        return _state_response()

    @app.route("/api/teams", methods=["GET"])
    @api_operation
    def list_teams():
        teams = app_state.persistence_service.load_teams()
        return jsonify({"success": True, "teams": [t.to_dict() for t in teams]})

    @app.route("/api/teams", methods=["POST"])
    @api_operation
    def load_team():
        """Select the team for the next match, optionally saving it first."""
        data = _body()
        if "team" in data:
            try:
                team = Team.from_dict(data["team"])
            except (KeyError, TypeError, ValueError) as e:
                raise InvalidTransition(f"Invalid team data: {e}") from e
            if not MIN_MATCH_DURATION_MIN <= team.match_duration_minutes <= MAX_MATCH_DURATION_MIN:
                raise InvalidTransition(
                    f"Match duration must be between {MIN_MATCH_DURATION_MIN} "
                    f"and {MAX_MATCH_DURATION_MIN} minutes"
                )
            if data.get("save"):
                app_state.persistence_service.save_team(team)
        else:
            team_id = _require(data, "team_id")
            team = app_state.persistence_service.get_team(team_id)
            if team is None:
                return jsonify({"success": False, "error": "Team not found"}), 404
        app_state.session.select_team(team)
        return _state_response()

    @app.route("/api/formation", methods=["POST"])
    @api_operation
    def select_formation():
        app_state.session.select_formation(_require(_body(), "formation"))
        return _state_response()

    @app.route("/api/formation/auto-assign", methods=["POST"])
    @api_operation
    def auto_assign():
        app_state.session.auto_assign()
        return _state_response()

    @app.route("/api/assign", methods=["POST"])
    @api_operation
    def assign_player():
        """Drop a player on a slot, or on the bench with "slot": "bench"."""
        data = _body()
        player_id = _require(data, "player_id")
        slot_key = _require(data, "slot")
        if slot_key == "bench":
            slot_key = BENCH
        bumped = app_state.session.move_player(player_id, slot_key)
        return _state_response(bumped=bumped)

    @app.route("/api/unassign", methods=["POST"])
    @api_operation
    def unassign_slot():
        removed = app_state.session.unassign(_require(_body(), "slot"))
        return _state_response(removed=removed)

    # ==================== Match lifecycle ==================== #

    @app.route("/api/match/start", methods=["POST"])
    @api_operation
    def start_match():
        app_state.session.start_match(_require(_body(), "name"))
        return _state_response()

    @app.route("/api/match/toggle", methods=["POST"])
    @api_operation
    def toggle_match():
        app_state.session.toggle_play_pause()
        return _state_response()

    @app.route("/api/match/cancel", methods=["POST"])
    @api_operation
    def cancel_match():
        app_state.session.cancel_match()
        return _state_response()

    @app.route("/api/match/end", methods=["POST"])
    @api_operation
    def end_match():
        """Finish the match and save its record to the history store."""
        record = app_state.session.end_match()
        app_state.persistence_service.save_match_record(record)
        team = app_state.session.team
        if team is not None and app_state.persistence_service.get_team(team.id) is not None:
            app_state.persistence_service.save_team(team)
        return _state_response(record=record.to_dict())

    # ==================== Ledger actions ==================== #

    @app.route("/api/actions/goal", methods=["POST"])
    @api_operation
    def record_goal():
        data = _body()
        player_id = _require(data, "player_id")
        pending = _needs_confirmation("goal", data, player_id)
        if pending is not None:
            return pending
        record = app_state.session.goal(player_id)
        return _state_response(action=record.to_dict())

    @app.route("/api/actions/opponent-goal", methods=["POST"])
    @api_operation
    def record_opponent_goal():
        data = _body()
        pending = _needs_confirmation("opponent_goal", data)
        if pending is not None:
            return pending
        record = app_state.session.opponent_goal()
        return _state_response(action=record.to_dict())

    @app.route("/api/actions/red-card", methods=["POST"])
    @api_operation
    def record_red_card():
        data = _body()
        player_id = _require(data, "player_id")
        pending = _needs_confirmation("red_card", data, player_id)
        if pending is not None:
            return pending
        record = app_state.session.red_card(player_id)
        return _state_response(action=record.to_dict())

    @app.route("/api/actions/yellow-card", methods=["POST"])
    @api_operation
    def record_yellow_card():
        data = _body()
        player_id = _require(data, "player_id")
        pending = _needs_confirmation("yellow_card", data, player_id)
        if pending is not None:
            return pending
        record = app_state.session.yellow_card(player_id)
        return _state_response(action=record.to_dict())

    @app.route("/api/actions/undo", methods=["POST"])
    @api_operation
    def undo_action():
        data = _body()
        if app_state.session.ledger.last_record is None:
            return _state_response(undone=None, message="Nothing to undo")
        pending = _needs_confirmation("undo", data)
        if pending is not None:
            return pending
        record = app_state.session.undo_last()
        return _state_response(undone=record.to_dict() if record is not None else None)

    # ==================== Substitutions ==================== #

    @app.route("/api/substitution/select", methods=["POST"])
    @api_operation
    def select_for_substitution():
        changed = app_state.session.select_player(_require(_body(), "player_id"))
        return _state_response(changed=changed)

    @app.route("/api/substitution/commit", methods=["POST"])
    @api_operation
    def commit_substitution():
        pairings = app_state.session.commit_substitution()
        if not pairings:
            return jsonify({
                "success": False,
                "error": "Select the same number of players coming on and going off",
            }), 400
        return _state_response(substitutions=[
            {"slot": slot, "in": p_in, "out": p_out} for slot, p_in, p_out in pairings
        ])

    @app.route("/api/substitution/cancel", methods=["POST"])
    @api_operation
    def cancel_substitution():
        app_state.session.cancel_substitution()
        return _state_response()

    # ==================== History ==================== #

    @app.route("/api/history", methods=["GET"])
    @api_operation
    def get_history():
        records = app_state.persistence_service.load_history()
        return jsonify({"success": True, "matches": [r.to_dict() for r in records]})

    @app.route("/api/history/<record_id>", methods=["DELETE"])
    @api_operation
    def delete_history_record(record_id: str):
        if not app_state.persistence_service.delete_match_record(record_id):
            return jsonify({"success": False, "error": "Match not found"}), 404
        return jsonify({"success": True})

    return app


def run_web_app(
    host: str = "127.0.0.1",
    port: int = 7122,
    static_folder: str = ".",
    data_dir: Optional[str] = None,
) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        static_folder: Directory containing static files (HTML, CSS, JS)
        data_dir: Directory for teams and history files
    """
    app = create_app(static_folder, WebAppState(data_dir))
    logger.info("Serving on http://%s:%d", host, port)
    app.run(host=host, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
    run_web_app(static_folder=project_root)
