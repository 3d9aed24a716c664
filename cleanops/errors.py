"""Domain errors raised by the services; routers map them to HTTP status codes."""


class CleanOpsError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(CleanOpsError):
    """Referenced entity is missing."""
    status_code = 404


class AccountUnresolved(NotFound):
    """No local Account row for a configured external account; aborts that account's sync."""


class Conflict(CleanOpsError):
    """A state-machine precondition no longer holds (e.g. task already claimed)."""
    status_code = 409


class Forbidden(Conflict):
    """The caller does not own the task it is acting on."""
    status_code = 403


class InvalidInput(CleanOpsError):
    status_code = 400


class UpstreamUnavailable(CleanOpsError):
    """External API call failed. Retried by the next scheduled cycle, never inline."""
    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None, response: dict | None = None):
        self.upstream_status = upstream_status
        self.response = response
        super().__init__(message)


class PartialFailure(CleanOpsError):
    """At least one account in a sync batch failed; the others completed."""

    def __init__(self, message: str, failed: list | None = None):
        self.failed = failed or []
        super().__init__(message)
