"""Google Classroom REST client producing courses and per-course rosters.

Read-only. Authentication is out of scope: the client takes an already issued
OAuth access token with the classroom.courses.readonly and
classroom.rosters.readonly scopes. Every listing follows nextPageToken until
the API stops returning one.
"""

import json
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator

import requests
from pydantic import BaseModel, Field
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from roster_recon.errors import (
    AuthenticationError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from roster_recon.logging import get_logger
from roster_recon.models import Course, PlatformStudent

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://classroom.googleapis.com/v1"

ProgressCallback = Callable[[int, int], None]


def _classify_response(response: requests.Response) -> None:
    """Raise the error class matching a non-2xx response."""
    status = response.status_code
    if status < 400:
        return
    detail = response.text[:200]
    if status in (401, 403):
        raise AuthenticationError(f"Classroom API rejected the token ({status}): {detail}")
    if status == 429:
        raise RateLimitError(f"Classroom API rate limit hit: {detail}")
    if status >= 500:
        raise TransientError(f"Classroom API unavailable ({status}): {detail}")
    raise PermanentError(f"Classroom API request failed ({status}): {detail}")


class ClassroomClient:
    """Paginated, read-only access to Google Classroom courses and rosters."""

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        page_size: int = 100,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not access_token:
            raise AuthenticationError("No Classroom access token configured")
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {access_token}"})

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(TransientError),
        reraise=True,
    )
    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET one page. Retries on TransientError, fails fast otherwise."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning("classroom_request_failed", url=url, error=str(e))
            raise TransientError(f"Classroom API request failed: {e}") from e

        _classify_response(response)
        try:
            return response.json()
        except ValueError as e:
            raise PermanentError(f"Classroom API returned invalid JSON for {url}") from e

    def _paginate(self, path: str, key: str, params: dict[str, Any]) -> Iterator[dict[str, Any]]:
        page_token: str | None = None
        pages = 0
        while True:
            page_params = {**params, "pageSize": self.page_size}
            if page_token:
                page_params["pageToken"] = page_token
            data = self._get(path, page_params)
            pages += 1
            yield from data.get(key) or []
            page_token = data.get("nextPageToken")
            if not page_token:
                break
        logger.debug("classroom_listing_complete", path=path, pages=pages)

    def list_courses(self, states: Iterable[str] = ("ACTIVE",)) -> list[Course]:
        """All courses visible to the token holder in the given states."""
        params = {"courseStates": list(states)}
        courses = [Course.from_api(item) for item in self._paginate("/courses", "courses", params)]
        logger.info("classroom_courses_listed", count=len(courses))
        return courses

    def list_students(self, course_id: str, course_name: str = "") -> list[PlatformStudent]:
        """Every student enrolled in one course."""
        path = f"/courses/{course_id}/students"
        return [
            PlatformStudent.from_api(item, course_name=course_name)
            for item in self._paginate(path, "students", {})
        ]

    def fetch_rosters(
        self,
        courses: Iterable[Course],
        progress: ProgressCallback | None = None,
    ) -> dict[str, list[PlatformStudent]]:
        """Students for each course, keyed by course id, fetched one course at a time."""
        courses = list(courses)
        rosters: dict[str, list[PlatformStudent]] = {}
        for done, course in enumerate(courses, start=1):
            rosters[course.id] = self.list_students(course.id, course.name)
            if progress is not None:
                progress(done, len(courses))
        logger.info(
            "classroom_rosters_fetched",
            courses=len(courses),
            students=sum(len(s) for s in rosters.values()),
        )
        return rosters

    def snapshot(
        self,
        states: Iterable[str] = ("ACTIVE",),
        progress: ProgressCallback | None = None,
    ) -> "PlatformSnapshot":
        courses = self.list_courses(states)
        return PlatformSnapshot(courses=courses, students=self.fetch_rosters(courses, progress))


class PlatformSnapshot(BaseModel):
    """Courses plus rosters, saved to JSON so a run can be repeated offline."""

    courses: list[Course] = Field(default_factory=list)
    students: dict[str, list[PlatformStudent]] = Field(default_factory=dict)

    def all_students(self) -> list[PlatformStudent]:
        return [student for course in self.courses for student in self.students.get(course.id, [])]

    @classmethod
    def load(cls, path: Path) -> "PlatformSnapshot":
        if not path.exists():
            raise FileNotFoundError(path)
        with path.open(encoding="utf-8") as handle:
            return cls.model_validate(json.load(handle))

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(self.model_dump(mode="json"), handle, indent=2, ensure_ascii=False)
        return path
