"""
Pytest fixtures for the SawiTrack API.

MongoDB is replaced by an in-memory mongomock client before `db` is
imported, so every module-level collection points at the fake.
"""

import os

import mongomock
import pymongo
import pytest

os.environ.setdefault("APP_TZ_OFFSET_MINUTES", "420")
os.environ.setdefault("API_BASE_PATH", "/api")


def _fake_client(*args, **kwargs):
    return mongomock.MongoClient()


pymongo.MongoClient = _fake_client

from app import app as flask_app  # noqa: E402
from db import db  # noqa: E402


@pytest.fixture(autouse=True)
def clean_db():
    for name in db.list_collection_names():
        db[name].delete_many({})
    yield


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def close_january(client):
    resp = client.post("/api/close-month", json={"year": 2025, "month": 1})
    assert resp.status_code == 201
    return resp.get_json()["period"]


def report_payload(**overrides):
    body = {
        "employeeName": "Budi",
        "employeeId": "EMP-01",
        "date": "2025-02-01",
        "division": "Divisi 1",
        "jobType": "Panen",
        "hk": 1,
    }
    body.update(overrides)
    return body
