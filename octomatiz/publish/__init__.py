"""Publication pipeline and page resolution."""

from octomatiz.publish.schema import DeployRequest, PageRecord, ProjectPayload
from octomatiz.publish.service import (
    PageResponse,
    ProjectValidationError,
    PublishOutcome,
    publish_page,
    resolve_page,
)

__all__ = [
    "DeployRequest",
    "PageRecord",
    "PageResponse",
    "ProjectPayload",
    "ProjectValidationError",
    "PublishOutcome",
    "publish_page",
    "resolve_page",
]
