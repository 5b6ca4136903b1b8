# client.py: terminal ByteForge player talking to the HTTP API
import logging
import os
import random
import string
import sys
import threading

import requests

from config import setup_logging
from game import UPGRADE_TYPES, passive_yield, upgrade_cost

SERVER_URL = os.getenv("BYTEFORGE_SERVER_URL", "http://localhost:3000")
TICK_SECONDS = 1.0

log = logging.getLogger("byteforge.client")

UNINITIALIZED, LOADING, READY = "uninitialized", "loading", "ready"

COMMANDS = {
    "c": "collect",
    "m": "byteMultiplier",
    "a": "autoCollector",
    "g": "byteGenerator",
    "b": "balance",
    "q": "quit",
}


def new_player_id() -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "player-" + "".join(random.choice(alphabet) for _ in range(9))


def format_number(n) -> str:
    if n >= 1e9:
        return f"{n / 1e9:.1f}B"
    if n >= 1e6:
        return f"{n / 1e6:.1f}M"
    if n >= 1e3:
        return f"{n / 1e3:.1f}K"
    return str(int(n)) if float(n).is_integer() else str(round(n, 1))


def render_text(user: dict) -> str:
    up = user["upgrades"]
    rate = up["autoCollector"] * 0.1 + up["byteGenerator"] * 0.5
    lines = [
        f"Bytes: {format_number(user['bytes'])}  "
        f"(earned {format_number(user['totalBytesEarned'])}, spent {format_number(user['totalBytesSpent'])})",
        f"Passive: {format_number(rate)}/s",
        f"[m] multiplier {up['byteMultiplier']:.1f}x   cost {format_number(upgrade_cost('byteMultiplier', up['byteMultiplier']))}",
        f"[a] auto collector {up['autoCollector']}   cost {format_number(upgrade_cost('autoCollector', up['autoCollector']))}",
        f"[g] byte generator {up['byteGenerator']}   cost {format_number(upgrade_cost('byteGenerator', up['byteGenerator']))}",
    ]
    return "\n".join(lines)


class ByteForgeClient:
    """
    Caches the player's record, mirrors every successful server reply into it
    and redraws. `http` is anything with requests-style get/post.
    """

    def __init__(self, base_url=SERVER_URL, user_id=None, http=None, out=None, tick=TICK_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id or new_player_id()
        self.http = http or requests.Session()
        self.out = out or (lambda text: print(text, flush=True))
        self.tick = tick
        self.user_data = None
        self.state = UNINITIALIZED
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._timer = None

    # ---------- HTTP ----------
    def _url(self, path=""):
        return f"{self.base_url}/api/user/{self.user_id}{path}"

    @staticmethod
    def _reply(r, accept_client_errors=False):
        """JSON body of a reply; 4xx game errors only pass through when asked."""
        try:
            body = r.json() or {}
        except ValueError:
            body = {}
        status = r.status_code
        if status >= 500 or (status >= 400 and not accept_client_errors):
            raise requests.HTTPError(f"{status}: {body.get('error', 'server error')}", response=r)
        return body

    def _get(self, path=""):
        return self._reply(self.http.get(self._url(path), timeout=5))

    def _post(self, path, payload):
        r = self.http.post(self._url(path), json=payload, timeout=5)
        return self._reply(r, accept_client_errors=True)

    # ---------- lifecycle ----------
    def start(self):
        """Load the record and begin ticking. Stays in `loading` if the server fails."""
        self.state = LOADING
        self.load_user_data()
        self.state = READY
        self.start_auto_collect()
        self.redraw()
        log.info("ByteForge initialized for user: %s", self.user_id)
        return self

    def stop(self):
        self._stop.set()
        if self._timer is not None and self._timer is not threading.current_thread():
            self._timer.join()
        self._timer = None

    def is_ready(self):
        return self.state == READY

    def start_auto_collect(self):
        self._stop.clear()
        self._timer = threading.Thread(target=self._auto_loop, name="byteforge-tick", daemon=True)
        self._timer.start()

    def _auto_loop(self):
        while not self._stop.wait(self.tick):
            try:
                self.auto_collect()
            except requests.RequestException as e:
                log.warning("Auto collect failed: %s", e)

    # ---------- API calls ----------
    def load_user_data(self):
        data = self._get()
        with self._lock:
            self.user_data = data
        return data

    def add_bytes(self, amount):
        result = self._post("/bytes/add", {"amount": amount})
        if result.get("success"):
            with self._lock:
                self.user_data["bytes"] = result["newTotal"]
                self.user_data["totalBytesEarned"] += result["bytesAdded"]
            self.redraw()
        return result

    def remove_bytes(self, amount):
        result = self._post("/bytes/remove", {"amount": amount})
        if result.get("success"):
            with self._lock:
                self.user_data["bytes"] = result["newTotal"]
                self.user_data["totalBytesSpent"] += result["bytesRemoved"]
            self.redraw()
            self.notify(f"-{result['bytesRemoved']} bytes spent")
        else:
            self.notify(result.get("error", "Request failed"), "error")
        return result

    def purchase_upgrade(self, upgrade_type, cost):
        result = self._post("/upgrade", {"upgradeType": upgrade_type, "cost": cost})
        if result.get("success"):
            with self._lock:
                self.user_data["bytes"] = result["newTotal"]
                self.user_data["totalBytesSpent"] += result["bytesSpent"]
                self.user_data["upgrades"][upgrade_type] = result["newUpgradeLevel"]
            self.redraw()
            self.notify(f"Upgrade purchased: {upgrade_type}")
        else:
            self.notify(result.get("error", "Request failed"), "error")
        return result

    def get_bytes_balance(self):
        result = self._get("/bytes")
        with self._lock:
            self.user_data["bytes"] = result["bytes"]
            self.user_data["totalBytesEarned"] = result["totalEarned"]
            self.user_data["totalBytesSpent"] = result["totalSpent"]
        self.redraw()
        return result

    # ---------- game actions ----------
    def manual_collect(self):
        return self.add_bytes(1)

    def buy(self, upgrade_type):
        """Price from the cached level; skip the request when it is unaffordable."""
        if upgrade_type not in UPGRADE_TYPES:
            raise ValueError(f"unknown upgrade {upgrade_type!r}")
        with self._lock:
            cost = upgrade_cost(upgrade_type, self.user_data["upgrades"][upgrade_type])
            affordable = self.user_data["bytes"] >= cost
        if not affordable:
            self.notify("Not enough bytes!", "error")
            return None
        return self.purchase_upgrade(upgrade_type, cost)

    def auto_collect(self):
        if self.user_data is None:
            return None
        with self._lock:
            amount = passive_yield(self.user_data["upgrades"])
        if amount > 0:
            return self.add_bytes(amount)
        return None

    # ---------- UI ----------
    def redraw(self):
        if self.user_data is None:
            return
        with self._lock:
            text = render_text(self.user_data)
        self.out(text)

    def notify(self, message, kind="info"):
        self.out(f"! {message}" if kind == "error" else f"* {message}")

    def handle(self, key):
        """Run one keyboard command. Returns False once the player quits."""
        action = COMMANDS.get(key.strip().lower()[:1])
        if action is None:
            self.notify("Keys: c collect, m/a/g buy upgrade, b balance, q quit", "error")
        elif action == "quit":
            return False
        else:
            try:
                if action == "collect":
                    self.manual_collect()
                elif action == "balance":
                    self.get_bytes_balance()
                else:
                    self.buy(action)
            except requests.RequestException as e:
                self.notify(f"Server error: {e}", "error")
        return True


def main():
    setup_logging(os.getenv("LOG_LEVEL", "WARNING").upper())
    player = ByteForgeClient(user_id=os.getenv("BYTEFORGE_USER_ID"))
    try:
        player.start()
    except requests.RequestException as e:
        print(f"Failed to reach {player.base_url}: {e}", file=sys.stderr)
        return 1
    try:
        for line in sys.stdin:
            if not player.handle(line):
                break
    except KeyboardInterrupt:
        pass
    finally:
        player.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
