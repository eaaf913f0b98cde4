import os
import tempfile
from datetime import timedelta

import pytest

# Set test environment before importing app
os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
os.environ['SECRET_KEY'] = 'test-secret'
os.environ['SESSION_FILE_DIR'] = tempfile.mkdtemp(prefix='streamqueue_test_sessions_')
os.environ['SOCKETIO_ASYNC_MODE'] = 'threading'
os.environ.pop('REDIS_URL', None)
os.environ.pop('YOUTUBE_API_KEY', None)

from app import app, Base, engine  # noqa: E402
from streamqueue.core import AdmissionController, PlaybackAdvancer, QueuePolicy, RankingEngine  # noqa: E402
from streamqueue.core.errors import ResolverUnavailable  # noqa: E402
from streamqueue.models import QueueStore  # noqa: E402
from streamqueue.utils.locks import RoomLocks  # noqa: E402
from streamqueue.utils.timing import utcnow  # noqa: E402


OWNER = "owner-1"
LISTENER = "listener-1"


def video_url(n):
    """A distinct, valid watch URL per integer"""
    return f"https://www.youtube.com/watch?v=vid{n:08d}"


class FakeResolver:
    """Stands in for the YouTube lookup"""

    def __init__(self, fail=False, error=None, result=None):
        self.fail = fail
        self.error = error
        self.result = result
        self.calls = []

    def resolve(self, video_id):
        self.calls.append(video_id)
        if self.fail:
            raise ResolverUnavailable("lookup timed out", reason="network")
        if self.error is not None:
            raise self.error
        if self.result is not None:
            return self.result
        return {
            "title": f"Video {video_id}",
            "thumbnails": [
                {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg", "width": 120},
                {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg", "width": 480},
                {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg", "width": 320},
            ],
        }


class FakeClock:

    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now

    def advance(self, minutes=0, seconds=0):
        self.now = self.now + timedelta(minutes=minutes, seconds=seconds)


@pytest.fixture
def database():
    """Fresh tables for each test"""
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def store(database):
    return QueueStore()


@pytest.fixture
def engine_parts(store, resolver, clock):
    """Admission, ranking and playback sharing one store and lock registry"""
    locks = RoomLocks(timeout=5)
    ranking = RankingEngine(store)
    admission = AdmissionController(store, resolver, locks, QueuePolicy(), clock=clock)
    playback = PlaybackAdvancer(store, ranking, locks)
    return admission, ranking, playback


@pytest.fixture
def client(database, resolver, clock, monkeypatch):
    """Create a test client with the lookup and clock replaced"""
    app.config['TESTING'] = True
    app.config['ALLOW_DEV_LOGIN'] = True
    monkeypatch.setattr(app.queue_services.admission, 'resolver', resolver)
    monkeypatch.setattr(app.queue_services.admission, 'clock', clock)

    with app.test_client() as client:
        with app.app_context():
            yield client


def login(client, user_id):
    """Sign in through the development login endpoint"""
    response = client.post('/session', json={'userId': user_id})
    assert response.status_code == 200
    return response
