# game.py: byte arithmetic, upgrade pricing and the request-level operations
import math
import time

UPGRADE_TYPES = ("byteMultiplier", "autoCollector", "byteGenerator")
MULTIPLIER_STEP = 0.1


# ---------- errors ----------
class GameError(Exception):
    status = 400
    message = "Bad request"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidAmount(GameError):
    message = "Invalid amount"


class InsufficientBytes(GameError):
    message = "Insufficient bytes"


class InvalidUpgradeType(GameError):
    message = "Invalid upgrade type"


class NotFound(GameError):
    status = 404
    message = "Endpoint not found"


class PersistenceFailure(Exception):
    """Durable store could not be read or written."""


def now_ms():
    return int(time.time() * 1000)


# ---------- pricing ----------
def multiplier_cost(level):
    return math.floor(10 * 1.5 ** (level * 10))

def auto_collector_cost(level):
    return math.floor(25 * 2 ** level)

def byte_generator_cost(level):
    return math.floor(50 * 3 ** level)

COST_CURVES = {
    "byteMultiplier": multiplier_cost,
    "autoCollector": auto_collector_cost,
    "byteGenerator": byte_generator_cost,
}

def upgrade_cost(upgrade_type, level):
    if upgrade_type not in COST_CURVES:
        raise InvalidUpgradeType()
    return COST_CURVES[upgrade_type](level)

def passive_yield(upgrades):
    """Bytes granted per one-second tick by the passive upgrades."""
    auto = upgrades.get("autoCollector", 0) or 0
    gen = upgrades.get("byteGenerator", 0) or 0
    return math.floor(auto * 0.1 + gen * 0.5)


# ---------- input parsing ----------
def parse_amount(value, whole=False):
    """
    Positive number from a JSON body field. `whole` rejects fractions, used for
    anything subtracted from the integer balance.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount()
    try:
        n = float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidAmount()
    if not math.isfinite(n) or n <= 0:
        raise InvalidAmount()
    if whole:
        if not n.is_integer():
            raise InvalidAmount()
        return int(n)
    return int(n) if n.is_integer() else n


# ---------- operations ----------
def fetch_user(store, user_id):
    with store.lock:
        return store.copy_user(store.touch(user_id))


def fetch_balance(store, user_id):
    with store.lock:
        user = store.touch(user_id)
        return {
            "bytes": user["bytes"],
            "totalEarned": user["totalBytesEarned"],
            "totalSpent": user["totalBytesSpent"],
        }


def add_bytes(store, user_id, amount):
    amount = parse_amount(amount)
    with store.lock:
        user = store.touch(user_id)
        multiplier = user["upgrades"]["byteMultiplier"]
        scaled = amount * multiplier
        if not math.isfinite(scaled):
            raise InvalidAmount()
        final = math.floor(scaled)
        user["bytes"] += final
        user["totalBytesEarned"] += final
        return {
            "success": True,
            "bytesAdded": final,
            "newTotal": user["bytes"],
            "multiplier": multiplier,
        }


def remove_bytes(store, user_id, amount):
    amount = parse_amount(amount, whole=True)
    with store.lock:
        user = store.touch(user_id)
        if user["bytes"] < amount:
            raise InsufficientBytes()
        user["bytes"] -= amount
        user["totalBytesSpent"] += amount
        return {"success": True, "bytesRemoved": amount, "newTotal": user["bytes"]}


def purchase_upgrade(store, user_id, upgrade_type, cost, strict=False):
    if upgrade_type not in UPGRADE_TYPES:
        raise InvalidUpgradeType()
    cost = parse_amount(cost, whole=True)
    with store.lock:
        user = store.touch(user_id)
        up = user["upgrades"]
        # server-side pricing; off unless STRICT_COSTS is set
        if strict and cost != upgrade_cost(upgrade_type, up[upgrade_type]):
            raise InvalidAmount("Cost does not match current upgrade price")
        if user["bytes"] < cost:
            raise InsufficientBytes("Insufficient bytes for upgrade")

        if upgrade_type == "byteMultiplier":
            up["byteMultiplier"] += MULTIPLIER_STEP
        else:
            up[upgrade_type] += 1
        user["bytes"] -= cost
        user["totalBytesSpent"] += cost

        return {
            "success": True,
            "upgradeApplied": upgrade_type,
            "newUpgradeLevel": up[upgrade_type],
            "bytesSpent": cost,
            "newTotal": user["bytes"],
        }


def public_profile(user):
    return {
        "id": user["id"],
        "bytes": user["bytes"],
        "totalEarned": user["totalBytesEarned"],
        "totalSpent": user["totalBytesSpent"],
        "lastActive": user["lastActive"],
        "upgrades": dict(user["upgrades"]),
    }


def list_users(store):
    with store.lock:
        return [public_profile(u) for u in store.users.values()]


def game_stats(store):
    with store.lock:
        users = list(store.users.values())
        return {
            "totalUsers": len(users),
            "totalBytes": sum(u["bytes"] for u in users),
            "totalEarned": sum(u["totalBytesEarned"] for u in users),
            "totalSpent": sum(u["totalBytesSpent"] for u in users),
            "lastSave": store.last_save,
        }


def health(started_at):
    return {
        "status": "healthy",
        "uptime": time.monotonic() - started_at,
        "timestamp": now_ms(),
    }
