import os
import pytest

os.environ["FLASK_ENV"] = "testing"

from tourney import create_app
from tourney.events import event_bus
from tourney.extensions import db as _db


@pytest.fixture(scope="session")
def app():
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def tables(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield
        _db.session.remove()
        _db.drop_all()
    event_bus.clear()


@pytest.fixture
def client(app):
    return app.test_client()
