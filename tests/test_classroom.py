import pytest
import requests
from tenacity import wait_none

from roster_recon.classroom import ClassroomClient, PlatformSnapshot
from roster_recon.errors import AuthenticationError, PermanentError, RateLimitError, TransientError
from roster_recon.models import Course


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    """Replays queued responses and records every request."""

    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, dict(params or {})))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def student_payload(name, course_id):
    return {"courseId": course_id, "profile": {"name": {"fullName": name}, "emailAddress": f"{name}@x"}}


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(ClassroomClient._get.retry, "wait", wait_none())


def make_client(responses, **kwargs):
    session = FakeSession(responses)
    return ClassroomClient("token-123", session=session, **kwargs), session


def test_client_requires_token():
    with pytest.raises(AuthenticationError):
        ClassroomClient("")


def test_list_courses_follows_page_tokens():
    client, session = make_client(
        [
            FakeResponse(payload={"courses": [{"id": "1", "name": "3 Chem"}], "nextPageToken": "p2"}),
            FakeResponse(payload={"courses": [{"id": "2", "name": "P4 Bio"}]}),
        ],
        page_size=1,
    )
    courses = client.list_courses()

    assert [c.id for c in courses] == ["1", "2"]
    assert session.headers["Authorization"] == "Bearer token-123"
    first_url, first_params = session.calls[0]
    assert first_url == "https://classroom.googleapis.com/v1/courses"
    assert first_params == {"courseStates": ["ACTIVE"], "pageSize": 1}
    assert session.calls[1][1]["pageToken"] == "p2"


def test_list_students_handles_empty_page():
    client, session = make_client([FakeResponse(payload={})])
    assert client.list_students("42") == []
    assert session.calls[0][0].endswith("/courses/42/students")


def test_fetch_rosters_reports_progress():
    client, _ = make_client(
        [
            FakeResponse(payload={"students": [student_payload("John Doe", "1")]}),
            FakeResponse(payload={"students": [student_payload("Ada Lovelace", "2")]}),
        ]
    )
    seen = []
    rosters = client.fetch_rosters(
        [Course(id="1", name="3 Chem"), Course(id="2", name="P4 Bio")],
        progress=lambda done, total: seen.append((done, total)),
    )

    assert rosters["1"][0].full_name == "John Doe"
    assert rosters["2"][0].course_name == "P4 Bio"
    assert seen == [(1, 2), (2, 2)]


def test_transient_errors_are_retried():
    client, session = make_client(
        [
            FakeResponse(status_code=503, text="busy"),
            requests.ConnectionError("reset"),
            FakeResponse(payload={"courses": []}),
        ]
    )
    assert client.list_courses() == []
    assert len(session.calls) == 3


def test_transient_errors_give_up_after_three_attempts():
    client, session = make_client([FakeResponse(status_code=500)] * 3)
    with pytest.raises(TransientError):
        client.list_courses()
    assert len(session.calls) == 3


def test_rate_limit_is_transient():
    client, _ = make_client([FakeResponse(status_code=429)] * 3)
    with pytest.raises(RateLimitError):
        client.list_courses()


@pytest.mark.parametrize("status, error", [(401, AuthenticationError), (403, AuthenticationError), (404, PermanentError)])
def test_permanent_errors_are_not_retried(status, error):
    client, session = make_client([FakeResponse(status_code=status, text="nope")])
    with pytest.raises(error):
        client.list_students("missing")
    assert len(session.calls) == 1


def test_invalid_json_is_permanent():
    client, _ = make_client([FakeResponse(payload=None)])
    with pytest.raises(PermanentError):
        client.list_courses()


def test_snapshot_round_trip(tmp_path):
    client, _ = make_client(
        [
            FakeResponse(payload={"courses": [{"id": "1", "name": "3 Chem"}]}),
            FakeResponse(payload={"students": [student_payload("John Doe", "1")]}),
        ]
    )
    snapshot = client.snapshot()
    path = snapshot.save(tmp_path / "snap" / "classroom.json")

    restored = PlatformSnapshot.load(path)
    assert restored == snapshot
    assert [s.full_name for s in restored.all_students()] == ["John Doe"]


def test_snapshot_load_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        PlatformSnapshot.load(tmp_path / "missing.json")
