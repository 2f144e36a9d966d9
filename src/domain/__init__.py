"""Domain layer: errors, schemas, constants."""

from .errors import (
    ArtifactError,
    AssemblyError,
    ErrorCodes,
    MaterializeError,
    MetadataError,
    RenderError,
    StoreError,
)
from .schemas import (
    ContentBinding,
    LivePreviewTokens,
    PreviewPair,
    SiteMetadata,
    SiteRecord,
    SyncRunLog,
    TemplateRecord,
)

__all__ = [
    # errors
    "ArtifactError",
    "AssemblyError",
    "RenderError",
    "MaterializeError",
    "MetadataError",
    "StoreError",
    "ErrorCodes",
    # schemas
    "PreviewPair",
    "TemplateRecord",
    "SiteRecord",
    "SiteMetadata",
    "ContentBinding",
    "SyncRunLog",
    "LivePreviewTokens",
]
