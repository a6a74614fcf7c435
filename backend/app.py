import os
import logging
from flask import Flask, jsonify, request
from flask_cors import CORS
from dotenv import load_dotenv

from domain.config import GameConfig
from domain.errors import InvalidConfigError
from services.session_store import SessionNotFoundError, SessionStore

load_dotenv()

app = Flask(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

# Enable CORS for API routes so a browser frontend on another origin can drive games.
# Allowed origins can be configured via CORS_ALLOWED_ORIGINS env var (comma-separated)
allowed_origins_env = os.getenv("CORS_ALLOWED_ORIGINS")
if allowed_origins_env:
    allowed_origins = [o.strip() for o in allowed_origins_env.split(",") if o.strip()]
else:
    # sensible defaults for local dev
    allowed_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

CORS(app, resources={r"/api/*": {"origins": allowed_origins}})

sessions = SessionStore()


def _not_found(game_id):
    return jsonify({"error": f"Game '{game_id}' not found"}), 404


@app.route("/api/games", methods=["POST"])
def create_game():
    """
    Start a new game.

    JSON body (all optional):
    - config: any of width, height, initialSpeed, speedFloor, speedStep,
      scoreMilestoneInterval
    - seed: integer seed for reproducible food placement

    Returns:
    - 201 with the game snapshot
    - 400 on invalid configuration
    """
    try:
        body = request.get_json(silent=True) or {}
        seed = body.get("seed")
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            return jsonify({"error": "seed must be an integer"}), 400

        options = body.get("config")
        if options is not None and not isinstance(options, dict):
            return jsonify({"error": "config must be an object"}), 400
        config = GameConfig.from_dict(options) if options else None
        game = sessions.create(config=config, seed=seed)
        return jsonify(game.snapshot()), 201

    except InvalidConfigError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as error:
        logging.error(f"Error creating game: {error}")
        return jsonify({"error": "Failed to create game"}), 500


@app.route("/api/games", methods=["GET"])
def list_games():
    """List summaries of every game in memory."""
    try:
        games = sessions.list_games()
        return jsonify({"games": games, "count": len(games)})
    except Exception as error:
        logging.error(f"Error listing games: {error}")
        return jsonify({"error": "Failed to list games"}), 500


@app.route("/api/games/<game_id>", methods=["GET"])
def get_game(game_id):
    """
    Get the current state of a game.

    Returns:
    - snake, food, direction, score, speed, status
    - cells: rows of 'empty' / 'snake' / 'food'
    """
    try:
        with sessions.locked(game_id) as game:
            return jsonify(game.snapshot())
    except SessionNotFoundError:
        return _not_found(game_id)
    except Exception as error:
        logging.error(f"Error fetching game {game_id}: {error}")
        return jsonify({"error": "Failed to load game"}), 500


@app.route("/api/games/<game_id>/input", methods=["POST"])
def send_input(game_id):
    """
    Publish a key press, e.g. {"key": "ArrowUp"}.

    Unknown keys and repeats of the pending direction are ignored
    (accepted: false), not rejected.
    """
    try:
        body = request.get_json(silent=True) or {}
        key = body.get("key")
        with sessions.locked(game_id) as game:
            accepted = game.handle_key(key)
            return jsonify({
                "accepted": accepted,
                "pending_direction": game.mailbox.peek().name
            })
    except SessionNotFoundError:
        return _not_found(game_id)
    except Exception as error:
        logging.error(f"Error handling input for game {game_id}: {error}")
        return jsonify({"error": "Failed to handle input"}), 500


@app.route("/api/games/<game_id>/frame", methods=["POST"])
def advance_frame(game_id):
    """
    Report an animation frame, e.g. {"timestamp": 1234.5} (milliseconds).

    The game ticks only if at least its current speed has elapsed since
    the last tick.
    """
    try:
        body = request.get_json(silent=True) or {}
        timestamp = body.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            return jsonify({"error": "timestamp must be a number of milliseconds"}), 400

        with sessions.locked(game_id) as game:
            ticked = game.on_frame(float(timestamp))
            return jsonify({"ticked": ticked, "state": game.snapshot()})
    except SessionNotFoundError:
        return _not_found(game_id)
    except Exception as error:
        logging.error(f"Error advancing game {game_id}: {error}")
        return jsonify({"error": "Failed to advance game"}), 500


@app.route("/api/games/<game_id>/restart", methods=["POST"])
def restart_game(game_id):
    """Reset the game to a fresh start and resume its loop."""
    try:
        with sessions.locked(game_id) as game:
            game.restart()
            game.notifier.drain()
            return jsonify(game.snapshot())
    except SessionNotFoundError:
        return _not_found(game_id)
    except Exception as error:
        logging.error(f"Error restarting game {game_id}: {error}")
        return jsonify({"error": "Failed to restart game"}), 500


@app.route("/api/games/<game_id>/notifications", methods=["GET"])
def get_notifications(game_id):
    """Return and clear the speed milestone events raised since the last poll."""
    try:
        with sessions.locked(game_id) as game:
            events = [event.to_dict() for event in game.notifier.drain()]
            return jsonify({"notifications": events, "count": len(events)})
    except SessionNotFoundError:
        return _not_found(game_id)
    except Exception as error:
        logging.error(f"Error fetching notifications for game {game_id}: {error}")
        return jsonify({"error": "Failed to load notifications"}), 500


@app.route("/api/games/<game_id>", methods=["DELETE"])
def delete_game(game_id):
    """Stop the game's loop and discard it."""
    try:
        sessions.discard(game_id)
        return jsonify({"deleted": True, "game_id": game_id})
    except SessionNotFoundError:
        return _not_found(game_id)
    except Exception as error:
        logging.error(f"Error deleting game {game_id}: {error}")
        return jsonify({"error": "Failed to delete game"}), 500


if __name__ == "__main__":
    app.run(debug=os.getenv("FLASK_DEBUG"))
