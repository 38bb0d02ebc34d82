"""Error hierarchy for roster reconciliation collaborators.

The reconciliation core never raises; these exceptions belong to the I/O
edges (CSV import and the Google Classroom client). The Classroom branch lets
tenacity retry decorators classify transient failures (should retry) vs
permanent failures (should not retry).

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def list_students(course_id: str):
        ...
"""


class RosterReconError(Exception):
    """Base exception for all roster-recon errors."""

    pass


class RosterFormatError(RosterReconError):
    """CSV file does not match any known roster export layout."""

    pass


class ClassroomError(RosterReconError):
    """Base exception for Google Classroom API failures."""

    pass


class TransientError(ClassroomError):
    """Temporary failure that may succeed on retry.

    Examples: connection resets, timeouts, 500/502/503 responses.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded (HTTP 429) - needs longer backoff.

    Inherits from TransientError so tenacity will retry it.
    """

    pass


class PermanentError(ClassroomError):
    """Failure that won't succeed on retry.

    Examples: unknown course id, malformed request, unexpected payload.
    """

    pass


class AuthenticationError(PermanentError):
    """Access token missing, expired or lacking the roster scopes.

    Requires a fresh token, cannot be fixed by retry.
    """

    pass
