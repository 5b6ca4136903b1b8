import os
from urllib.parse import urlsplit

import pytest

from app import create_app
from store import GameStore


@pytest.fixture(scope="function")
def store(tmp_path):
    """Fresh store per test, backed by a file in its own tmp dir"""
    return GameStore(os.path.join(tmp_path, "data.json")).load()


@pytest.fixture
def app(store):
    app = create_app(store, {"STRICT_COSTS": False, "TESTING": True})
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def balanced(user):
    return user["bytes"] == user["totalBytesEarned"] - user["totalBytesSpent"]


class _Reply:
    def __init__(self, resp):
        self.status_code = resp.status_code
        self._data = resp.get_json()

    def json(self):
        return self._data


class FlaskHTTP:
    """requests-style get/post routed into a Flask test client"""

    def __init__(self, test_client):
        self.test_client = test_client

    def get(self, url, timeout=None):
        return _Reply(self.test_client.get(urlsplit(url).path))

    def post(self, url, json=None, timeout=None):
        return _Reply(self.test_client.post(urlsplit(url).path, json=json))


@pytest.fixture
def http(client):
    return FlaskHTTP(client)
