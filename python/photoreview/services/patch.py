"""Partial-update structures.

A patch distinguishes "the caller did not mention this field" (UNSET) from
"the caller explicitly set it to None". Merge logic depends on that
difference: an explicit `decision=None` clears a vote and its voted_at,
while an absent decision leaves both untouched.

Patches are built from pydantic request bodies with from_model(), which
only copies fields present in the request's model_fields_set.
"""

from dataclasses import dataclass, fields
from typing import Any, Self

from pydantic import BaseModel


class _Unset:
    """Marker for a field absent from a patch."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def is_set(value: Any) -> bool:
    """True if the patch field was supplied (even if supplied as None)."""
    return value is not UNSET


@dataclass(frozen=True)
class Patch:
    """Base for entity patches. Subclasses declare fields defaulting to UNSET."""

    def supplied(self) -> dict[str, Any]:
        """Return only the fields the caller supplied."""
        return {
            f.name: getattr(self, f.name) for f in fields(self) if is_set(getattr(self, f.name))
        }

    def is_empty(self) -> bool:
        return not self.supplied()

    @classmethod
    def from_model(cls, model: BaseModel) -> Self:
        """Build a patch from the fields explicitly present in a request body."""
        names = {f.name for f in fields(cls)}
        return cls(
            **{name: getattr(model, name) for name in model.model_fields_set if name in names}
        )


@dataclass(frozen=True)
class ReviewPatch(Patch):
    seen: bool = UNSET
    decision: int | None = UNSET
    renamed_to: str | None = UNSET


@dataclass(frozen=True)
class ProjectPatch(Patch):
    name: str = UNSET
    status: str = UNSET
    is_active: bool = UNSET
    root_path: str = UNSET


@dataclass(frozen=True)
class LibraryPatch(Patch):
    name: str = UNSET
    description: str | None = UNSET
    status: str = UNSET
    is_active: bool = UNSET


@dataclass(frozen=True)
class PhotoPatch(Patch):
    metadata: dict[str, Any] | None = UNSET
    thumbnail_path: str | None = UNSET
