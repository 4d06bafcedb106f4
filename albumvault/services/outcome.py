from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a best-effort step: a value, or the reason there is none.

    Extractors return this instead of raising so callers have to decide
    what "unknown" means for them.
    """

    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, reason: str) -> "Outcome[T]":
        return cls(reason=reason or "unknown error")

    @property
    def ok(self) -> bool:
        return self.reason is None

    def value_or(self, default: T) -> T:
        return self.value if self.ok and self.value is not None else default
