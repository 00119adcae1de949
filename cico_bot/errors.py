# cico_bot/errors.py
"""
Exception taxonomy for cico-bot.

Per-payload errors (RateLimitExceeded, DeliveryFailed) are recovered by the
caller; TransportError and ExportFailed abort an export; AuthExpired is always
surfaced to the user.
"""


class CicoBotError(Exception):
    """Base class for all cico-bot errors."""


class AlreadyRunning(CicoBotError):
    """An export is already active for this user."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"Export already running for user {user_id}")
        self.user_id = user_id


class EmptyInput(CicoBotError):
    """Export requested with no records."""


class Throttled(CicoBotError):
    """Transport signalled 'too many requests' with a suggested wait."""

    def __init__(self, retry_after: float, description: str = "Too Many Requests") -> None:
        super().__init__(f"{description} (retry after {retry_after}s)")
        self.retry_after = retry_after


class MarkupRejected(CicoBotError):
    """Transport could not parse the message markup."""


class RateLimitExceeded(CicoBotError):
    """Throttled on every attempt for a single payload."""

    def __init__(self, attempts: int, retry_after: float | None = None) -> None:
        super().__init__(f"Still throttled after {attempts} attempts")
        self.attempts = attempts
        self.retry_after = retry_after


class DeliveryFailed(CicoBotError):
    """Payload could not be delivered, even after the plain-text fallback."""


class TransportError(CicoBotError):
    """Non-retryable messaging transport failure."""


class ExportFailed(CicoBotError):
    """Export aborted by a fatal error; carries partial completion counts."""

    def __init__(self, completed: int, total: int, cause: BaseException) -> None:
        super().__init__(
            f"Export failed after {completed}/{total} records: "
            f"{type(cause).__name__}: {cause}"
        )
        self.completed = completed
        self.total = total
        self.cause = cause


class AuthExpired(CicoBotError):
    """Portal rejected the stored token (401); user must log in again."""


class LoginFailed(CicoBotError):
    """Portal refused the supplied credentials."""

    def __init__(self, reason: str, invalid_credentials: bool = False) -> None:
        super().__init__(f"Login failed: {reason}")
        self.reason = reason
        self.invalid_credentials = invalid_credentials


class PortalError(CicoBotError):
    """Unexpected attendance portal failure."""
