"""Merge independently authored OpenAPI documents into one.

Every input is a ``(prefix, file)`` pair. Paths are namespaced under
``/<prefix>`` and component names only get a ``<prefix>_`` prefix when they
would otherwise clash with a name already merged from an earlier input.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .document import (
    COMPONENT_CATEGORIES,
    DocumentParseError,
    OpenApiDocument,
    document_uri,
    load_document,
)

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Merged APIs"
DEFAULT_VERSION = "1.0.0"


@dataclass
class PathCollision:
    """A namespaced path key written by more than one input; the later one won."""
    key: str
    previous_prefix: str
    prefix: str


@dataclass
class MergeResult:
    document: OpenApiDocument
    skipped: List[Path] = field(default_factory=list)
    path_collisions: List[PathCollision] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def derive_prefix(path: Union[str, Path]) -> str:
    """Namespace for an input file: its name without the extension."""
    return Path(path).stem


def namespace_path(prefix: str, key: str) -> str:
    """Prefix a path key with ``/<prefix>`` unless it already carries it."""
    trimmed = prefix.strip("/")
    if not trimmed:
        raise ValueError(f"Prefix {prefix!r} is empty once slashes are trimmed")

    if key.startswith("/" + trimmed + "/") or key == "/" + trimmed:
        return key
    return "/" + trimmed + ("" if key.startswith("/") else "/") + key


def component_prefix(prefix: str) -> str:
    """Identifier-safe prefix: anything but letters and digits becomes '_'."""
    safe = "".join(ch if ch.isalpha() or ch.isdecimal() else "_" for ch in prefix)
    return safe + "_"


def unique_component_name(name: str, existing: Dict[str, Any], comp_prefix: str) -> str:
    if name not in existing:
        return name

    candidate = comp_prefix + name
    while candidate in existing:
        candidate = "_" + candidate
    return candidate


def merge_components(source: Optional[Dict[str, Any]], target: Dict[str, Any], comp_prefix: str) -> List[Tuple[str, str]]:
    """Copy one component category into ``target``; returns the renames made."""
    renamed = []
    for name, value in (source or {}).items():
        name = str(name)
        final_name = unique_component_name(name, target, comp_prefix)
        if final_name != name:
            renamed.append((name, final_name))
        target[final_name] = value
    return renamed


class OpenApiMerger:
    """Accumulates input documents into a single merged document."""

    def __init__(self, title: str = DEFAULT_TITLE, version: str = DEFAULT_VERSION):
        self.document = OpenApiDocument.empty(title, version)
        self.skipped: List[Path] = []
        self.path_collisions: List[PathCollision] = []
        self._path_owners: Dict[str, str] = {}

    def add_file(self, prefix: str, path: Union[str, Path]) -> bool:
        """Parse ``path`` and merge it; unusable files are skipped, not raised."""
        path = Path(path)
        try:
            document = load_document(path)
        except (DocumentParseError, OSError) as e:
            logger.info("Skipping %s, document could not be read: %s", document_uri(path), e)
            self.skipped.append(path)
            return False

        self.add_document(prefix, document)
        return True

    def add_document(self, prefix: str, document: Dict[str, Any]) -> None:
        if not prefix.strip("/"):
            raise ValueError(f"Prefix {prefix!r} is empty once slashes are trimmed")

        self._merge_servers(document.get("servers"))
        path_count = self._merge_paths(prefix, document.get("paths"))

        comp_prefix = component_prefix(prefix)
        components = document.get("components") or {}
        for category in COMPONENT_CATEGORIES:
            renamed = merge_components(components.get(category), self.document.components[category], comp_prefix)
            for old, new in renamed:
                logger.debug("Renamed %s %s -> %s", category, old, new)

        logger.debug("Merged %d paths from %s", path_count, prefix)

    def result(self) -> MergeResult:
        return MergeResult(
            document=self.document,
            skipped=list(self.skipped),
            path_collisions=list(self.path_collisions),
        )

    def _merge_servers(self, servers: Optional[List[Any]]) -> None:
        known = {server.get("url") for server in self.document.servers}
        for server in servers or []:
            if not isinstance(server, dict):
                continue
            url = server.get("url")
            if url in known:
                continue
            self.document.servers.append(server)
            known.add(url)

    def _merge_paths(self, prefix: str, paths: Optional[Dict[Any, Any]]) -> int:
        if not paths:
            return 0

        merged = 0
        for key, item in paths.items():
            if str(key).startswith("x-"):
                continue
            new_key = namespace_path(prefix, str(key))
            if new_key in self.document.paths:
                collision = PathCollision(new_key, self._path_owners[new_key], prefix)
                self.path_collisions.append(collision)
                logger.warning(
                    "Path %s from %s overwrites the one merged from %s",
                    new_key, prefix, collision.previous_prefix,
                )
            self.document.paths[new_key] = item
            self._path_owners[new_key] = prefix
            merged += 1
        return merged


def merge_openapis(
    inputs: Iterable[Tuple[str, Union[str, Path]]],
    title: str = DEFAULT_TITLE,
    version: str = DEFAULT_VERSION,
) -> MergeResult:
    """Merge the ``(prefix, file)`` inputs in order."""
    merger = OpenApiMerger(title, version)
    for prefix, path in inputs:
        merger.add_file(prefix, path)
    return merger.result()
