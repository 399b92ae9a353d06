"""Pydantic models for deploy payloads and stored page records.

Field names are snake_case in Python and camelCase on the wire, matching
the JSON the web client sends and the records kept under ``landing:<slug>``.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ProjectPayload(_CamelModel):
    """Business data of the project being published.

    Required fields default to empty strings so that missing values are
    reported by the publication pipeline rather than by schema validation.
    """

    id: str | None = Field(default=None, description="Client project ID")
    business_name: str = Field(default="", description="Business name")
    headline: str = Field(default="", description="Page headline")
    whatsapp: str = Field(default="", description="WhatsApp contact number")
    category: str | None = Field(default=None, description="Business category")
    location: str | None = Field(default=None, description="Business location")
    template: str = Field(default="simple", description="Template style")
    color_theme: str = Field(default="green", description="Color theme")


class DeployRequest(_CamelModel):
    """Body of ``POST /api/deploy``."""

    project: ProjectPayload | None = None
    html: str | None = Field(default=None, description="Rendered page HTML")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PageRecord(_CamelModel):
    """Published page, stored as JSON under ``landing:<slug>``.

    Records are written once on publish and never modified.
    """

    model_config = ConfigDict(frozen=True)

    html: str
    business_name: str
    project_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    template: str = "simple"
    color_theme: str = "green"

    def to_json(self) -> str:
        """Serialize with camelCase keys."""
        return self.model_dump_json(by_alias=True)


__all__ = ["DeployRequest", "PageRecord", "ProjectPayload"]
