"""Cooperative execution budget for long-running estimations.

Estimators call Deadline.check() inside their loops; once the budget is
spent the check raises ExecutionTimeoutError and the partial work is
discarded by the caller.
"""

import time

from strokewidth.exceptions import ExecutionTimeoutError


class Deadline:
    """Wall-clock budget that starts counting on construction.

    Example:
        deadline = Deadline(30.0)
        for ray in rays:
            deadline.check()
            ...
    """

    def __init__(self, budget_seconds: float | None) -> None:
        """Initialize the deadline.

        Args:
            budget_seconds: Seconds allowed from now (None = unlimited)
        """
        self.budget_seconds = budget_seconds
        self._expires_at = (
            None if budget_seconds is None else time.monotonic() + budget_seconds
        )

    @classmethod
    def unlimited(cls) -> "Deadline":
        return cls(None)

    @property
    def remaining(self) -> float | None:
        """Seconds left, or None when unlimited."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self) -> None:
        """Raise if the budget is spent.

        Raises:
            ExecutionTimeoutError: If the deadline has passed
        """
        if self.expired():
            raise ExecutionTimeoutError(self.budget_seconds or 0.0)
