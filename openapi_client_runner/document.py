"""OpenAPI document model, loading and JSON serialization."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.0.1"

COMPONENT_CATEGORIES = (
    "schemas",
    "responses",
    "parameters",
    "examples",
    "requestBodies",
    "headers",
    "securitySchemes",
    "links",
    "callbacks",
)


class DocumentParseError(Exception):
    """Raised when a file does not hold a usable OpenAPI document."""

    def __init__(self, uri: str, reason: str):
        super().__init__(f"{uri}: {reason}")
        self.uri = uri
        self.reason = reason


def _empty_components() -> Dict[str, Dict[str, Any]]:
    return {category: {} for category in COMPONENT_CATEGORIES}


@dataclass
class OpenApiDocument:
    """The merged target document."""
    info: Dict[str, Any]
    servers: List[Dict[str, Any]] = field(default_factory=list)
    paths: Dict[str, Any] = field(default_factory=dict)
    components: Dict[str, Dict[str, Any]] = field(default_factory=_empty_components)
    openapi: str = OPENAPI_VERSION

    @classmethod
    def empty(cls, title: str, version: str) -> "OpenApiDocument":
        return cls(info={"title": title, "version": version})

    def to_dict(self) -> Dict[str, Any]:
        """Return the document in OpenAPI 3 layout, dropping empty optional sections."""
        data: Dict[str, Any] = {"openapi": self.openapi, "info": dict(self.info)}
        if self.servers:
            data["servers"] = list(self.servers)
        data["paths"] = dict(self.paths)
        data["components"] = {
            category: dict(self.components[category])
            for category in COMPONENT_CATEGORIES
            if self.components.get(category)
        }
        return data


def document_uri(path: Union[str, Path]) -> str:
    return Path(path).resolve().as_uri()


def _check_sections(uri: str, content: Dict[str, Any]) -> None:
    """Reject documents whose merged sections have the wrong shape."""
    for key in ("paths", "components"):
        if content.get(key) is not None and not isinstance(content[key], dict):
            raise DocumentParseError(uri, f"'{key}' is not a mapping")
    if content.get("servers") is not None and not isinstance(content["servers"], list):
        raise DocumentParseError(uri, "'servers' is not a list")

    components = content.get("components") or {}
    for category in COMPONENT_CATEGORIES:
        if components.get(category) is not None and not isinstance(components[category], dict):
            raise DocumentParseError(uri, f"'components.{category}' is not a mapping")


def load_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Read and parse an OpenAPI document from a JSON or YAML file."""
    path = Path(path)
    uri = document_uri(path)

    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8-sig")
        if path.suffix.lower() == ".json":
            content = json.loads(text)
        else:
            content = yaml.safe_load(text)
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentParseError(uri, str(e)) from e

    if not isinstance(content, dict):
        raise DocumentParseError(uri, "document is not a mapping")
    if "openapi" not in content and "swagger" not in content:
        raise DocumentParseError(uri, "missing 'openapi' version field")
    _check_sections(uri, content)

    logger.debug("Loaded %s", uri)
    return content


def to_json(document: Union[OpenApiDocument, Dict[str, Any]]) -> str:
    """Serialize a document to JSON text."""
    if isinstance(document, OpenApiDocument):
        document = document.to_dict()
    return json.dumps(document, indent=2, ensure_ascii=False, default=str) + "\n"
