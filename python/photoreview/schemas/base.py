"""Shared base for partial-update request bodies."""

from typing import ClassVar

from pydantic import BaseModel, model_validator


class PatchRequest(BaseModel):
    """Request body whose fields are all optional.

    Absent fields are left untouched by the service (see model_fields_set).
    Fields listed in non_nullable may be omitted but not sent as null.
    """

    non_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_explicit_nulls(self):
        for name in self.non_nullable:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} may not be null")
        return self
