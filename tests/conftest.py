import mongomock
import pytest

from app import create_app
from config import Config
from errors import UpstreamError


class StubFeedbackClient:
    """Records calls instead of reaching the Gemini API."""

    def __init__(self, text="Keep up the good work!", fail=False):
        self.text = text
        self.fail = fail
        self.calls = []

    def request_feedback(self, student_name, marks):
        self.calls.append((student_name, dict(marks)))
        if self.fail:
            raise UpstreamError()
        return self.text


@pytest.fixture
def config():
    return Config(
        mongo_uri="mongodb://localhost:27017",
        gemini_api_key="test-key",
        mongo_db_name="marklist_test",
        log_level="WARNING",
    )


@pytest.fixture
def db():
    return mongomock.MongoClient()["marklist_test"]


@pytest.fixture
def feedback_client():
    return StubFeedbackClient()


@pytest.fixture
def failing_feedback_client():
    return StubFeedbackClient(fail=True)


@pytest.fixture
def app(config, db, feedback_client):
    app = create_app(config, db=db, feedback_client=feedback_client)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_payload():
    def _make(name="Asha", reg="R1", marks=(80, 75, 90, 65, 70), subjects=None):
        subjects = subjects or ("tamil", "english", "maths", "science", "social")
        payload = {"studentName": name, "registerNumber": reg}
        payload.update(zip(subjects, marks))
        return payload
    return _make
