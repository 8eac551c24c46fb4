import os
import tempfile

import pytest

# The app reads its configuration at import time, so point it at scratch
# storage before any test module imports backend.
_TEST_DIR = tempfile.mkdtemp(prefix='voting-tests-')
os.environ['DATABASE_URL'] = 'sqlite:///' + os.path.join(_TEST_DIR, 'voting.db')
os.environ['AUDIT_LOG_DIR'] = os.path.join(_TEST_DIR, 'logs')
os.environ['RATELIMIT_ENABLED'] = 'false'
os.environ['MAX_CANDIDATES'] = '16'

from backend import app, db  # noqa: E402


class RecordingNotifier:
    """Stands in for ChangeNotifier and remembers every event."""

    def __init__(self):
        self.events = []

    def notify(self, event_kind):
        self.events.append(event_kind)
        return 1


@pytest.fixture
def app_ctx():
    app.config['TESTING'] = True
    with app.app_context():
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()


@pytest.fixture
def client(app_ctx):
    with app_ctx.test_client() as client:
        yield client


@pytest.fixture
def notifier():
    return RecordingNotifier()
