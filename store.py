# store.py: in-memory user registry backed by a single JSON file
import copy
import json
import logging
import os
import threading

from game import PersistenceFailure, now_ms

log = logging.getLogger("byteforge.store")


# ---------- tiny JSON "DB" ----------
def _empty_state():
    return {"users": {}, "lastSave": now_ms()}


def read_state(path):
    with open(path, "r", encoding="utf-8") as f:
        state = json.load(f)
    if not isinstance(state, dict) or not isinstance(state.get("users"), dict):
        raise ValueError("users mapping missing")
    state.setdefault("lastSave", now_ms())
    return state


def write_state(path, state):
    tmp = path + ".tmp"
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)  # atomic on POSIX
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceFailure(f"could not write {path}: {e}") from e


def new_user(user_id):
    ts = now_ms()
    return {
        "id": user_id,
        "bytes": 0,
        "totalBytesEarned": 0,
        "totalBytesSpent": 0,
        "lastActive": ts,
        "upgrades": {
            "byteMultiplier": 1,
            "autoCollector": 0,
            "byteGenerator": 0,
        },
        "createdAt": ts,
    }


class GameStore:
    """
    Every user record lives here. Mutations and snapshots hold `lock`; file
    writes happen outside it so request handling never waits on disk.
    """

    def __init__(self, path):
        self.path = path
        self.lock = threading.RLock()
        self.users = {}
        self.last_save = now_ms()

    def load(self):
        try:
            state = read_state(self.path)
        except FileNotFoundError:
            log.info("No existing data found, starting fresh")
            state = None
        except (OSError, ValueError) as e:
            # keep the bad file for inspection instead of silently wiping it
            log.warning("Unreadable data file %s (%s), starting fresh", self.path, e)
            try:
                os.replace(self.path, self.path + ".bad")
            except OSError:
                log.warning("Could not move %s aside", self.path)
            state = None

        fresh = state is None
        if fresh:
            state = _empty_state()
        with self.lock:
            self.users = state["users"]
            self.last_save = state["lastSave"]
        if fresh:
            self.safe_save()
        else:
            log.info("Loaded %d users from %s", len(self.users), self.path)
        return self

    def snapshot(self):
        with self.lock:
            self.last_save = now_ms()
            return {"users": copy.deepcopy(self.users), "lastSave": self.last_save}

    def save(self):
        write_state(self.path, self.snapshot())

    def safe_save(self):
        """Save, logging a failure instead of raising. Returns True on success."""
        try:
            self.save()
        except PersistenceFailure as e:
            log.error("Error saving data: %s", e)
            return False
        return True

    def get_user(self, user_id):
        with self.lock:
            user = self.users.get(user_id)
            if user is None:
                user = self.users[user_id] = new_user(user_id)
            return user

    def touch(self, user_id):
        with self.lock:
            user = self.get_user(user_id)
            user["lastActive"] = now_ms()
            return user

    def copy_user(self, user):
        with self.lock:
            return copy.deepcopy(user)


class Autosaver(threading.Thread):
    """Saves the store every `interval` seconds until stopped, then once more."""

    def __init__(self, store, interval=30.0):
        super().__init__(name="byteforge-autosave", daemon=True)
        self.store = store
        self.interval = interval
        self._stop_event = threading.Event()

    def run(self):
        while not self._stop_event.wait(self.interval):
            self.store.safe_save()

    def stop(self):
        self._stop_event.set()
        if self.is_alive():
            self.join()
        log.info("Saving data before shutdown...")
        return self.store.safe_save()
