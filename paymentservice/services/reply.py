"""
Completion handles for in-flight provider requests.

A Reply is handed out by the payment manager when a request is issued and
completes exactly once, either with a kind-specific result or with an error
(code, text). Once released it accepts nothing further.
"""

from collections.abc import Callable
from typing import Generic, TypeVar

from paymentservice.exceptions import ReplyAlreadyFinishedError, ReplyReleasedError
from paymentservice.models.outcome import RequestKind

T = TypeVar("T")


class Reply(Generic[T]):
    """One-shot completion handle for a single provider request."""

    def __init__(self, kind: RequestKind) -> None:
        self.kind = kind
        self._finished = False
        self._released = False
        self._failed = False
        self._result: T | None = None
        self._error_code = 0
        self._error_text = ""
        self._callbacks: list[Callable[["Reply[T]"], None]] = []

    @property
    def is_finished(self) -> bool:
        return self._finished

    @property
    def is_released(self) -> bool:
        return self._released

    @property
    def is_error(self) -> bool:
        return self._failed

    @property
    def error_code(self) -> int:
        return self._error_code

    @property
    def error_text(self) -> str:
        return self._error_text

    @property
    def result(self) -> T:
        """Kind-specific success payload. Only meaningful when not is_error."""
        if self._released:
            raise ReplyReleasedError(self.kind)
        return self._result  # type: ignore[return-value]

    def on_finished(self, callback: Callable[["Reply[T]"], None]) -> None:
        """
        Register a completion callback.

        Fires once; if the reply has already finished it fires immediately.
        """
        if self._released:
            raise ReplyReleasedError(self.kind)
        if self._finished:
            callback(self)
            return
        self._callbacks.append(callback)

    def finish(self, result: T) -> None:
        """Complete successfully with the kind-specific payload."""
        self._check_open()
        self._result = result
        self._signal()

    def fail(self, code: int, text: str) -> None:
        """Complete with a provider error; code and text are kept verbatim."""
        self._check_open()
        self._failed = True
        self._error_code = code
        self._error_text = text
        self._signal()

    def release(self) -> None:
        """Drop payload and callbacks. Idempotent."""
        self._released = True
        self._result = None
        self._callbacks.clear()

    def _check_open(self) -> None:
        if self._finished:
            raise ReplyAlreadyFinishedError(self.kind)
        if self._released:
            raise ReplyReleasedError(self.kind)

    def _signal(self) -> None:
        self._finished = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)
