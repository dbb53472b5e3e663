"""
Error report data model.

This module contains the Pydantic model for the diagnostic payload sent to
the telemetry endpoint. The model forbids extra fields so nothing beyond the
enumerated fields can ever be transmitted.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_NAME_LENGTH = 200
MAX_MESSAGE_LENGTH = 500
MAX_COMPONENT_STACK_LENGTH = 2000


class ErrorReport(BaseModel):
    """Redacted diagnostic report for a single caught fault."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str = Field(default="Error", max_length=MAX_NAME_LENGTH, description="Error class or name")
    message: str = Field(default="unknown", max_length=MAX_MESSAGE_LENGTH, description="Truncated error message")
    stack: Optional[str] = Field(default=None, description="Stack trace with URL-like substrings redacted")
    component_stack: Optional[str] = Field(
        default=None,
        alias="componentStack",
        max_length=MAX_COMPONENT_STACK_LENGTH,
        description="Truncated chain of boundaries / components"
    )
    path: Optional[str] = Field(default=None, description="Pathname and query string only")
    timestamp: str = Field(description="Report time (ISO format)")
    user_agent: Optional[str] = Field(default=None, alias="userAgent", description="Reporting client user agent")
    build_mode: Optional[str] = Field(default=None, alias="buildMode", description="Build mode, e.g. production")

    @field_validator("path")
    @classmethod
    def _path_has_no_host(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and ("://" in value or value.startswith("//") or "#" in value):
            raise ValueError("path must contain only pathname and query string")
        return value

    def to_json(self) -> str:
        """Serialize with wire (camelCase) names, omitting empty fields."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
