"""Progress reporting and operation lifecycle tracking."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, Self, runtime_checkable

from pdfreshape.typing.enums import OperationStatus

if TYPE_CHECKING:
    from types import TracebackType

    import structlog


@runtime_checkable
class PageProgressCallback(Protocol):
    """Receives `(current, total)` after each page, chunk or sheet."""

    def __call__(self, current: int, total: int) -> None: ...


@runtime_checkable
class PercentProgressCallback(Protocol):
    """Receives an integer percentage in `[0, 100]`."""

    def __call__(self, percent: int) -> None: ...


class OperationTracker:
    """Track `IDLE -> PROCESSING -> COMPLETED | FAILED` for one operation run.

    Used as a context manager around the body of an operation. Progress is
    forwarded synchronously to the caller's callback; an exception leaving the
    block marks the run FAILED and propagates unchanged.
    """

    def __init__(
        self,
        logger: structlog.BoundLogger,
        on_progress: PageProgressCallback | None = None,
    ) -> None:
        self._logger = logger
        self._on_progress = on_progress
        self.status = OperationStatus.IDLE
        self.current = 0
        self.total = 0

    def __enter__(self) -> Self:
        if self.status != OperationStatus.IDLE:
            raise RuntimeError(f"operation already {self.status}")
        self.status = OperationStatus.PROCESSING
        self._logger.debug("Operation started")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            self.status = OperationStatus.COMPLETED
            self._logger.debug("Operation completed", extra={"current": self.current, "total": self.total})
            return
        self.status = OperationStatus.FAILED
        self._logger.warning(
            "Operation failed",
            extra={"current": self.current, "total": self.total, "error": str(exc)},
        )

    def advance(self, current: int, total: int, **context: Any) -> None:
        """Record progress and notify the callback.

        Args:
            current: Units done so far.
            total: Units in the whole run.
            **context: Extra key/values for the debug log event.
        """
        self.current = current
        self.total = total
        self._logger.debug("Progress", extra={"current": current, "total": total, **context})
        if self._on_progress is not None:
            self._on_progress(current, total)
