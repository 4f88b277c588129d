"""Rewrite known cross-file $ref pointers that break once documents are merged."""

import logging
from pathlib import Path
from typing import Sequence, Tuple, Union

logger = logging.getLogger(__name__)

Replacement = Tuple[str, str]

DEFAULT_REPLACEMENTS: Tuple[Replacement, ...] = (
    ('"$ref": "../common/common-schemas.json#/components/schemas/BadRequestDTO"',
     '"$ref": "#/components/schemas/BadRequestDTO"'),
    ('"$ref": "../common/common-schemas.json#/components/schemas/UnauthorizedDTO"',
     '"$ref": "#/components/schemas/UnauthorizedDTO"'),
    ('"$ref": "../common/common-schemas.json#/components/schemas/UnprocessableDTO"',
     '"$ref": "#/components/schemas/UnprocessableDTO"'),
)


def _apply(text: str, replacements: Sequence[Replacement]) -> Tuple[str, int]:
    count = 0
    for old_ref, new_ref in replacements:
        occurrences = text.count(old_ref)
        if occurrences:
            text = text.replace(old_ref, new_ref)
            count += occurrences
    return text, count


def replace_refs(text: str, replacements: Sequence[Replacement] = DEFAULT_REPLACEMENTS) -> str:
    """Apply each literal replacement in table order.

    Matching is plain substring matching on the serialized text, so a pointer
    written with different whitespace is left alone.
    """
    return _apply(text, replacements)[0]


def replace_refs_in_file(
    input_path: Union[str, Path],
    output_path: Union[str, Path],
    replacements: Sequence[Replacement] = DEFAULT_REPLACEMENTS,
) -> int:
    """Rewrite refs from ``input_path`` into ``output_path``; both may be the same file."""
    text = Path(input_path).read_text(encoding="utf-8")
    text, count = _apply(text, replacements)
    Path(output_path).write_text(text, encoding="utf-8")

    logger.info("Replaced %d $ref pointer(s) in %s", count, output_path)
    return count
