"""Extract -> translate -> rewrite workflow.

High-level entry points tying the extractors, merger and rewriter together.
The translation round trip itself (submission, polling) happens outside;
``localize`` can be called again with every status snapshot it delivers.

Usage:
    >>> package = IDMLPackage.from_path(Path("brochure.idml"))
    >>> units = extract_text_units(package)
    >>> # ... send units out, receive translations ...
    >>> result = localize(package, {"Story_u123": "سلام"}, "fa")
    >>> Path("brochure_fa.idml").write_bytes(result.data)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .direct_extractor import DirectStoryExtractor
from .errors import EmptyResultError
from .languages import LanguageTable
from .merger import TranslatedPairs, apply_translations, combine, partition_by_source
from .models import TextUnit
from .package import IDMLPackage
from .rewriter import DocumentRewriter
from .tagged_extractor import TaggedElementExtractor

logger = logging.getLogger(__name__)

OVERFLOW_WARNING_FACTOR = 1.2


@dataclass
class LocalizationResult:
    """
    Outcome of a rewrite.

    Attributes:
        data: New IDML archive bytes
        units: Units as written (post-merge)
        report: Summary counts for the caller
    """

    data: bytes
    units: List[TextUnit]
    report: Dict[str, Any] = field(default_factory=dict)


def extract_text_units(
    package: IDMLPackage,
    direct_extractor: Optional[DirectStoryExtractor] = None,
    tagged_extractor: Optional[TaggedElementExtractor] = None,
) -> List[TextUnit]:
    """
    Run both extraction strategies and combine their units.

    Raises:
        EmptyResultError: If no story yields any text
    """
    for problem in package.validate_structure():
        logger.warning(f"IDML structure: {problem}")

    direct_units = (direct_extractor or DirectStoryExtractor()).extract(package)
    tagged_units = (tagged_extractor or TaggedElementExtractor()).extract(package)
    units = combine(direct_units, tagged_units)

    if not units:
        raise EmptyResultError("No text units found in the IDML file")
    return units


def select_units(
    units: Sequence[TextUnit], start: Optional[int] = None, end: Optional[int] = None
) -> List[TextUnit]:
    """
    Slice units by an inclusive index range.

    Raises:
        EmptyResultError: If the range selects nothing
    """
    if start is None and end is None:
        return list(units)

    first = start if start is not None else 0
    stop = end + 1 if end is not None else len(units)
    selected = list(units[first:stop])

    if not selected:
        raise EmptyResultError(
            f"No text units found in range {first} to {end if end is not None else 'end'}"
        )

    logger.info(
        f"Selected {len(selected)} units (indices {first}-{first + len(selected) - 1}) "
        f"out of {len(units)} total"
    )
    return selected


def language_warnings(
    source_language: str, target_language: str, table: Optional[LanguageTable] = None
) -> List[str]:
    """Advisory notices about a language pair before submission."""
    table = table or LanguageTable()
    warnings = []

    if not table.is_supported(source_language):
        warnings.append(f"Source language '{source_language}' is not in supported language list")

    if not table.is_supported(target_language):
        warnings.append(f"Target language '{target_language}' is not in supported language list")
        return warnings

    target = table.get(target_language)
    if target.is_rtl:
        warnings.append(
            f"Target language '{target_language}' is RTL - text direction will be automatically set"
        )
    if target.expansion_factor > OVERFLOW_WARNING_FACTOR:
        warnings.append(
            f"Expected text expansion: {round(target.expansion_factor * 100)}% "
            f"- check for potential overflow"
        )

    return warnings


def localize(
    package: IDMLPackage,
    translated_pairs: TranslatedPairs,
    target_language: str,
    rewriter: Optional[DocumentRewriter] = None,
) -> LocalizationResult:
    """
    Merge translations onto freshly extracted units and rewrite the package.

    Args:
        package: Original (untranslated) package
        translated_pairs: Mapping or sequence of (unit id, translated content)
        target_language: Target language code

    Returns:
        LocalizationResult with the new archive bytes

    Raises:
        EmptyResultError: If the package has no text units
        FormatError: If a story cannot be rewritten
    """
    translations = dict(translated_pairs)
    units = extract_text_units(package)
    merged = apply_translations(units, translations)

    direct_units, tagged_units = partition_by_source(merged)
    logger.info(
        f"Updating: {len(direct_units)} direct units, {len(tagged_units)} tagged units"
    )

    rewriter = rewriter or DocumentRewriter()
    data = rewriter.rewrite(package, direct_units + tagged_units, target_language)

    report = {
        "original_unit_count": len(units),
        "translated_unit_count": sum(1 for unit in units if translations.get(unit.unit_id)),
        "direct_unit_count": len(direct_units),
        "tagged_unit_count": len(tagged_units),
        "target_language": target_language,
        "completed_at": datetime.now(timezone.utc).isoformat(),
    }

    return LocalizationResult(data=data, units=merged, report=report)
