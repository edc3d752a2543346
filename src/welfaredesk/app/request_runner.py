from __future__ import annotations

from typing import Any, Callable, Protocol


Task = Callable[[], Any]
SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[Exception], None]


class RequestRunner(Protocol):
    """Runs a blocking API call and reports the outcome on the caller's thread."""

    def run(
        self,
        task: Task,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        raise NotImplementedError


class ImmediateRequestRunner:
    """Runs tasks inline. Used headless and where blocking the caller is fine."""

    def run(
        self,
        task: Task,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        try:
            result = task()
        except Exception as exc:
            on_failure(exc)
            return
        on_success(result)
