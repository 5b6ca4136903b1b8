# app.py: ByteForge API (bytes, upgrades, stats) + browser client
import logging
import signal
import sys
import time

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound as RouteNotFound

import game
from config import load_config, setup_logging
from page import GAME_HTML
from store import Autosaver, GameStore

log = logging.getLogger("byteforge.api")


def create_app(store, config=None):
    cfg = dict(load_config())
    cfg.update(config or {})

    app = Flask(__name__)
    app.config.update(cfg)
    app.extensions["game_store"] = store
    app.extensions["started_at"] = time.monotonic()
    CORS(app)

    register_routes(app)
    register_error_handlers(app)
    return app


def _store():
    return current_app.extensions["game_store"]


def _body():
    return request.get_json(silent=True) or {}


def register_routes(app):
    @app.get("/")
    def index():
        return GAME_HTML

    # ---------- user ----------
    @app.get("/api/user/<user_id>")
    def api_user(user_id):
        return jsonify(game.fetch_user(_store(), user_id))

    @app.post("/api/user/<user_id>/bytes/add")
    def api_add_bytes(user_id):
        return jsonify(game.add_bytes(_store(), user_id, _body().get("amount")))

    @app.post("/api/user/<user_id>/bytes/remove")
    def api_remove_bytes(user_id):
        return jsonify(game.remove_bytes(_store(), user_id, _body().get("amount")))

    @app.get("/api/user/<user_id>/bytes")
    def api_balance(user_id):
        return jsonify(game.fetch_balance(_store(), user_id))

    @app.post("/api/user/<user_id>/upgrade")
    def api_upgrade(user_id):
        data = _body()
        return jsonify(game.purchase_upgrade(
            _store(), user_id,
            data.get("upgradeType"), data.get("cost"),
            strict=current_app.config["STRICT_COSTS"],
        ))

    # ---------- admin / ops ----------
    @app.get("/api/users")
    def api_users():
        return jsonify(game.list_users(_store()))

    @app.get("/api/stats")
    def api_stats():
        return jsonify(game.game_stats(_store()))

    @app.get("/api/health")
    def api_health():
        return jsonify(game.health(current_app.extensions["started_at"]))


def register_error_handlers(app):
    @app.errorhandler(game.GameError)
    def on_game_error(e):
        return jsonify({"error": e.message}), e.status

    @app.errorhandler(RouteNotFound)
    @app.errorhandler(MethodNotAllowed)
    def on_not_found(e):
        # unknown path or method on a known path
        return on_game_error(game.NotFound())

    @app.errorhandler(HTTPException)
    def on_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def on_error(e):
        log.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Something went wrong!"}), 500


def _exit_on_sigterm(signum, frame):
    sys.exit(0)


def main():
    cfg = load_config()
    setup_logging(cfg["LOG_LEVEL"])

    store = GameStore(cfg["DATA_FILE"]).load()
    app = create_app(store, cfg)
    saver = Autosaver(store, cfg["SAVE_INTERVAL"])
    saver.start()

    signal.signal(signal.SIGTERM, _exit_on_sigterm)
    log.info("ByteForge API server running on port %s", cfg["PORT"])
    log.info("Health check: http://localhost:%s/api/health", cfg["PORT"])
    try:
        app.run(host=cfg["HOST"], port=cfg["PORT"], threaded=True, use_reloader=False)
    except KeyboardInterrupt:
        pass
    finally:
        saver.stop()


if __name__ == "__main__":
    main()
