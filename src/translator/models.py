"""SELinux label models for SELinux Translator MCP Server.

This module defines the data models for SELinux options as supplied by
workload security contexts and for the per-field conflicts found between
two file labels.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LabelField(str, Enum):
    """SELinux label fields, in file label order."""

    USER = "user"
    ROLE = "role"
    TYPE = "type"
    LEVEL = "level"


class SELinuxOptions(BaseModel):
    """SELinux options of a workload.

    An empty string means the field was not specified, not that it was
    specified as empty.
    """

    model_config = ConfigDict(extra="ignore")

    user: str = Field("", description="SELinux user (e.g., 'system_u')")
    role: str = Field("", description="SELinux role (e.g., 'system_r')")
    type: str = Field("", description="SELinux type (e.g., 'container_t')")
    level: str = Field("", description="SELinux level (e.g., 's0:c1,c2')")

    @field_validator("user", "role", "type", "level", mode="before")
    @classmethod
    def none_as_unspecified(cls, value: Any) -> Any:
        """API objects omit unset fields; treat them as unspecified."""
        if value is None:
            return ""
        return value

    def is_empty(self) -> bool:
        """Check if no field is specified."""
        return not (self.user or self.role or self.type or self.level)

    def field_values(self) -> List[str]:
        """Return the field values in file label order."""
        return [self.user, self.role, self.type, self.level]

    def __str__(self) -> str:
        """String representation of the options."""
        return (
            f"user={self.user!r} role={self.role!r} "
            f"type={self.type!r} level={self.level!r}"
        )


class FieldConflict(BaseModel):
    """A label field where both labels are specified and differ."""

    field: LabelField = Field(..., description="Conflicting label field")
    value_a: str = Field(..., description="Value of the field in the first label")
    value_b: str = Field(..., description="Value of the field in the second label")

    def describe(self) -> str:
        """Human-readable description of the conflict."""
        return f"{self.field.value} {self.value_a!r} conflicts with {self.value_b!r}"


def options_from_mapping(data: Optional[Dict[str, Any]]) -> Optional[SELinuxOptions]:
    """Build SELinux options from a raw ``seLinuxOptions`` mapping.

    Returns None when no mapping is given, which encodes the same way as
    empty options.
    """
    if data is None:
        return None
    return SELinuxOptions.model_validate(data)
