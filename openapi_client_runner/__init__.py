"""Merge OpenAPI fragments and regenerate a client library from the result."""

from .document import COMPONENT_CATEGORIES, DocumentParseError, OpenApiDocument, load_document, to_json
from .merge import MergeResult, OpenApiMerger, PathCollision, merge_openapis
from .refs import DEFAULT_REPLACEMENTS, replace_refs, replace_refs_in_file

__version__ = "1.0.0"

__all__ = [
    "COMPONENT_CATEGORIES",
    "DEFAULT_REPLACEMENTS",
    "DocumentParseError",
    "MergeResult",
    "OpenApiDocument",
    "OpenApiMerger",
    "PathCollision",
    "load_document",
    "merge_openapis",
    "replace_refs",
    "replace_refs_in_file",
    "to_json",
]
