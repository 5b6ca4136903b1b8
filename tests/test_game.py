import math

import pytest

import game
from conftest import balanced


@pytest.mark.parametrize("fn,level,expected", [
    (game.multiplier_cost, 0, 10),
    (game.multiplier_cost, 1, 576),
    (game.auto_collector_cost, 0, 25),
    (game.auto_collector_cost, 3, 200),
    (game.byte_generator_cost, 0, 50),
    (game.byte_generator_cost, 2, 450),
])
def test_cost_curves(fn, level, expected):
    assert fn(level) == expected


def test_multiplier_cost_is_floor_of_curve():
    assert game.multiplier_cost(1) == math.floor(10 * 1.5 ** 10)
    assert game.upgrade_cost("byteMultiplier", 1) == game.multiplier_cost(1)


def test_upgrade_cost_unknown_type():
    with pytest.raises(game.InvalidUpgradeType):
        game.upgrade_cost("turbo", 0)


@pytest.mark.parametrize("auto,gen,expected", [
    (0, 0, 0), (9, 0, 0), (10, 0, 1), (1, 1, 0), (0, 2, 1), (5, 3, 2),
])
def test_passive_yield(auto, gen, expected):
    assert game.passive_yield({"autoCollector": auto, "byteGenerator": gen}) == expected


@pytest.mark.parametrize("bad", [None, 0, -3, "abc", True, float("nan"), float("inf"), [1]])
def test_parse_amount_rejects(bad):
    with pytest.raises(game.InvalidAmount):
        game.parse_amount(bad)


def test_parse_amount_whole():
    assert game.parse_amount(2.5) == 2.5
    assert game.parse_amount("7") == 7
    with pytest.raises(game.InvalidAmount):
        game.parse_amount(2.5, whole=True)
    assert game.parse_amount(4.0, whole=True) == 4


def test_add_bytes_applies_multiplier(store):
    store.get_user("u")["upgrades"]["byteMultiplier"] = 1.5
    res = game.add_bytes(store, "u", 3)
    assert res == {"success": True, "bytesAdded": 4, "newTotal": 4, "multiplier": 1.5}
    user = store.get_user("u")
    assert user["totalBytesEarned"] == 4
    assert balanced(user)


def test_remove_bytes_insufficient_leaves_state(store):
    game.add_bytes(store, "u", 5)
    before = store.copy_user(store.get_user("u"))
    with pytest.raises(game.InsufficientBytes):
        game.remove_bytes(store, "u", 6)
    after = store.get_user("u")
    assert after["bytes"] == before["bytes"] == 5
    assert after["totalBytesSpent"] == 0


def test_remove_bytes(store):
    game.add_bytes(store, "u", 10)
    res = game.remove_bytes(store, "u", 4)
    assert res == {"success": True, "bytesRemoved": 4, "newTotal": 6}
    assert balanced(store.get_user("u"))


def test_purchase_validation_order(store):
    # unknown type wins over a bad cost
    with pytest.raises(game.InvalidUpgradeType):
        game.purchase_upgrade(store, "u", "nope", -1)
    with pytest.raises(game.InvalidUpgradeType):
        game.purchase_upgrade(store, "u", None, 10)
    with pytest.raises(game.InvalidAmount):
        game.purchase_upgrade(store, "u", "autoCollector", 0)
    with pytest.raises(game.InsufficientBytes) as exc:
        game.purchase_upgrade(store, "u", "autoCollector", 25)
    assert exc.value.message == "Insufficient bytes for upgrade"


def test_purchase_multiplier_step(store):
    game.add_bytes(store, "u", 100)
    res = game.purchase_upgrade(store, "u", "byteMultiplier", 10)
    assert res["newUpgradeLevel"] == pytest.approx(1.1)
    assert res["newTotal"] == 90
    res = game.add_bytes(store, "u", 10)
    assert res["bytesAdded"] == 11


def test_strict_costs(store):
    game.add_bytes(store, "u", 1000)
    with pytest.raises(game.InvalidAmount):
        game.purchase_upgrade(store, "u", "autoCollector", 1, strict=True)
    res = game.purchase_upgrade(store, "u", "autoCollector", 25, strict=True)
    assert res["newUpgradeLevel"] == 1
    # client-trusted pricing when strict mode is off
    res = game.purchase_upgrade(store, "u", "autoCollector", 1)
    assert res["newUpgradeLevel"] == 2


def test_invariant_holds_through_a_session(store):
    game.add_bytes(store, "u", 40)
    game.purchase_upgrade(store, "u", "byteGenerator", 30)
    game.remove_bytes(store, "u", 5)
    game.add_bytes(store, "u", 2.9)
    for user in store.users.values():
        assert balanced(user)
        assert user["bytes"] >= 0


def test_stats_and_listing(store):
    game.add_bytes(store, "a", 10)
    game.add_bytes(store, "b", 5)
    game.remove_bytes(store, "b", 2)
    stats = game.game_stats(store)
    assert stats["totalUsers"] == 2
    assert stats["totalBytes"] == 13
    assert stats["totalEarned"] == 15
    assert stats["totalSpent"] == 2
    assert stats["lastSave"] == store.last_save

    listed = {u["id"]: u for u in game.list_users(store)}
    assert set(listed) == {"a", "b"}
    assert set(listed["b"]) == {"id", "bytes", "totalEarned", "totalSpent", "lastActive", "upgrades"}
    assert listed["b"]["totalSpent"] == 2


def test_add_bytes_rejects_product_past_float_range(store):
    game.add_bytes(store, "u", 10)
    game.purchase_upgrade(store, "u", "byteMultiplier", 10)
    with pytest.raises(game.InvalidAmount):
        game.add_bytes(store, "u", 1.7e308)
    user = store.get_user("u")
    assert user["bytes"] == 0
    assert balanced(user)
