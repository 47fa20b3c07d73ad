"""Tagged results for service operations.

Authorization and invariant failures are expected outcomes of normal
operation, so services return them as values instead of raising:

- ok: the operation succeeded; `value` carries the entity, page or flag
- access_denied: the caller lacks the membership/ownership required
- not_found: the target does not resolve within the caller's visible scope
  (indistinguishable from true nonexistence)
- invariant_violation: the operation would leave a project without an owner

Storage failures are not modeled here; they propagate as exceptions and
abort the enclosing transaction.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class Outcome(str, Enum):
    """Discriminator for Result."""

    OK = "ok"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    INVARIANT_VIOLATION = "invariant_violation"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a service operation plus its value on success."""

    outcome: Outcome
    value: T | None = None
    reason: str | None = None

    @property
    def is_ok(self) -> bool:
        return self.outcome is Outcome.OK

    @property
    def is_access_denied(self) -> bool:
        return self.outcome is Outcome.ACCESS_DENIED

    @property
    def is_not_found(self) -> bool:
        return self.outcome is Outcome.NOT_FOUND

    @property
    def is_invariant_violation(self) -> bool:
        return self.outcome is Outcome.INVARIANT_VIOLATION


def ok(value: T) -> Result[T]:
    return Result(Outcome.OK, value)


def access_denied(reason: str = "Forbidden") -> Result:
    return Result(Outcome.ACCESS_DENIED, reason=reason)


def not_found(reason: str = "Not found") -> Result:
    return Result(Outcome.NOT_FOUND, reason=reason)


def invariant_violation(reason: str) -> Result:
    return Result(Outcome.INVARIANT_VIOLATION, reason=reason)
