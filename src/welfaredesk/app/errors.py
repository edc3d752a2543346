from __future__ import annotations

from dataclasses import dataclass


GENERIC_REQUEST_ERROR = "The server could not complete the request. Please try again."


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str


class ApiRequestError(RuntimeError):
    """Raised when the backend rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int = 0,
        path: str = "",
    ) -> None:
        detail = message.strip() if message and message.strip() else GENERIC_REQUEST_ERROR
        super().__init__(detail)
        self.status_code = max(0, int(status_code))
        self.path = path


class ConstraintError(RuntimeError):
    """An action is not allowed by a data constraint and is never attempted."""


class DeleteBlockedError(ConstraintError):
    def __init__(
        self,
        *,
        label: str,
        dependent_count: int,
        dependent_noun: str = "dependent record",
        hint: str = "Please remove or move them first.",
    ) -> None:
        count = max(0, int(dependent_count))
        noun = dependent_noun if count == 1 else f"{dependent_noun}s"
        super().__init__(f"{label} cannot be deleted because it has {count} {noun}. {hint}")
        self.dependent_count = count


def user_message(
    exc: BaseException,
    *,
    fallback: str = GENERIC_REQUEST_ERROR,
    label: str = "Record",
) -> str:
    if isinstance(exc, ApiRequestError):
        if exc.status_code == 401:
            return "Authentication required. Please log in to save changes."
        if exc.status_code == 403:
            return f"You don't have permission to modify this {label.lower()}."
        if exc.status_code == 404:
            return f"{label} not found. Please check if it still exists."
    text = str(exc or "").strip()
    return text or fallback
