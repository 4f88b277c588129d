"""Spec file discovery and cleanup of generated source directories."""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from .merge import derive_prefix

logger = logging.getLogger(__name__)

SPEC_EXTENSIONS = (".yaml", ".yml", ".json")


def collect_spec_files(directory: Union[str, Path]) -> List[Path]:
    """List the OpenAPI files directly inside ``directory``, sorted by name."""
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Spec directory does not exist: %s", directory)
        return []

    files = [
        entry for entry in directory.iterdir()
        if entry.is_file() and entry.suffix.lower() in SPEC_EXTENSIONS
    ]
    return sorted(files, key=lambda p: p.name)


def build_inputs(directories: Iterable[Union[str, Path]]) -> List[Tuple[str, Path]]:
    """(prefix, file) merge inputs for every spec file, directory by directory."""
    inputs = []
    for directory in directories:
        for path in collect_spec_files(directory):
            inputs.append((derive_prefix(path), path))
    return inputs


def delete_if_exists(path: Union[str, Path]) -> bool:
    path = Path(path)
    if not path.exists():
        return False
    path.unlink()
    logger.info("Deleted file: %s", path)
    return True


def delete_all_except(directory: Union[str, Path], keep_pattern: str = "*.csproj") -> int:
    """Empty ``directory`` except for files matching ``keep_pattern``.

    Files are deleted first, then subdirectories left empty are removed
    deepest first. A file or directory that can't be removed is logged and
    skipped. Returns the number of files deleted.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Directory does not exist: %s", directory)
        return 0

    deleted = 0
    keep_pattern = keep_pattern.lower()
    try:
        for root, _dirs, files in os.walk(directory):
            for name in files:
                if fnmatch.fnmatchcase(name.lower(), keep_pattern):
                    continue
                file_path = Path(root) / name
                try:
                    file_path.unlink()
                    deleted += 1
                    logger.info("Deleted file: %s", file_path)
                except OSError as e:
                    logger.error("Failed to delete file: %s (%s)", file_path, e)

        subdirectories = [Path(root) for root, _dirs, _files in os.walk(directory)][1:]
        for sub in sorted(subdirectories, key=lambda p: len(str(p)), reverse=True):
            try:
                if sub.is_dir() and not any(sub.iterdir()):
                    sub.rmdir()
                    logger.info("Deleted empty directory: %s", sub)
            except OSError as e:
                logger.error("Failed to delete directory: %s (%s)", sub, e)
    except OSError as e:
        logger.error("An error occurred while cleaning the directory: %s (%s)", directory, e)

    return deleted
