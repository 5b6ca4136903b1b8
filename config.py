# config.py: environment-driven settings (a local .env file is honoured)
import logging
import os

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def _flag(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _data_file():
    path = os.environ.get("DATA_FILE", "data.json")
    if os.path.isabs(path):
        return path
    return os.path.join(BASE_DIR, path)


def load_config():
    return {
        "HOST": os.environ.get("HOST", "0.0.0.0"),
        "PORT": int(os.environ.get("PORT", 3000)),
        "DATA_FILE": _data_file(),
        "SAVE_INTERVAL": float(os.environ.get("SAVE_INTERVAL", 30)),
        "STRICT_COSTS": _flag("STRICT_COSTS"),
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO").upper(),
    }


def setup_logging(level="INFO"):
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
