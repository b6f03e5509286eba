"""Combining extracted units and merging translated content back."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from .models import SourceKind, TextUnit

logger = logging.getLogger(__name__)

TranslatedPairs = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def combine(direct_units: Sequence[TextUnit], tagged_units: Sequence[TextUnit]) -> List[TextUnit]:
    """
    Unify units from both extractors.

    Direct units come first and always win on an id collision; a tagged unit
    is appended only if its id is not in the result yet.

    Example:
        >>> combined = combine(
        ...     [TextUnit("Story_1", "A", "Story_1")],
        ...     [TextUnit("Story_1", "B", "Story_1", source_kind=SourceKind.TAGGED)],
        ... )
        >>> combined[0].content
        'A'
    """
    combined = list(direct_units)
    seen = {unit.unit_id for unit in combined}

    for unit in tagged_units:
        if unit.unit_id in seen:
            continue
        combined.append(unit)
        seen.add(unit.unit_id)

    logger.info(
        f"Found {len(direct_units)} direct units + {len(tagged_units)} tagged units "
        f"= {len(combined)} total"
    )
    return combined


def apply_translations(units: Sequence[TextUnit], translated_pairs: TranslatedPairs) -> List[TextUnit]:
    """
    Replace unit content with translations where available.

    Units without a translation keep their content and are never dropped.
    Empty translations count as missing. Safe to call repeatedly with each
    new status snapshot.

    Args:
        units: Canonical units from extraction
        translated_pairs: Mapping or sequence of (unit id, translated content)

    Returns:
        New list of units, same order and length as ``units``
    """
    translations = dict(translated_pairs)

    merged = []
    applied = 0
    for unit in units:
        translated = translations.get(unit.unit_id)
        if translated:
            merged.append(unit.with_content(translated))
            applied += 1
        else:
            merged.append(unit)

    logger.info(f"Applied {applied} translations to {len(units)} units")
    return merged


def partition_by_source(units: Iterable[TextUnit]) -> Tuple[List[TextUnit], List[TextUnit]]:
    """Split units into (direct, tagged) by the extractor that produced them."""
    direct: List[TextUnit] = []
    tagged: List[TextUnit] = []
    for unit in units:
        (tagged if unit.source_kind is SourceKind.TAGGED else direct).append(unit)
    return direct, tagged


def parse_translation_records(records: Any) -> Dict[str, str]:
    """
    Normalise translation payloads into an id -> content mapping.

    Accepts a plain mapping, or a list of records shaped like
    ``{"id": ..., "translatedContent": ...}`` or ``{"id": ..., "content": ...}``.
    Records without an id are ignored.

    Raises:
        ValueError: If the payload is not a mapping or a list of mappings
    """
    if isinstance(records, Mapping):
        if "translatedTextBoxes" in records:
            return parse_translation_records(records["translatedTextBoxes"])
        return {str(key): str(value) for key, value in records.items()}

    if isinstance(records, (str, bytes)) or not isinstance(records, Iterable):
        raise ValueError(f"Unsupported translation payload: {type(records).__name__}")

    pairs: Dict[str, str] = {}
    for record in records:
        if not isinstance(record, Mapping):
            raise ValueError(f"Translation record must be an object, got {record!r}")
        unit_id = record.get("id")
        if not unit_id:
            logger.warning(f"Ignoring translation record without id: {record!r}")
            continue
        content = record.get("translatedContent", record.get("content"))
        if content is None:
            continue
        pairs[str(unit_id)] = str(content)
    return pairs
