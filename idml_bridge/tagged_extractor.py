"""Tagged element text extraction.

Documents with XML structure applied keep their text inside XMLElement
wrappers under the story rather than directly in it. Each top-level tagged
element becomes one unit; paragraphs inside it are joined with a newline.
"""

import logging
from typing import List
import xml.etree.ElementTree as ET

from .models import SourceKind, TextUnit
from .package import IDMLPackage
from .story import (
    CHARACTER_RANGE,
    PARAGRAPH_RANGE,
    TAGGED_ELEMENT,
    iter_stories,
    run_text,
)
from .xml_codec import children_named

logger = logging.getLogger(__name__)


def tagged_text(element: ET.Element) -> str:
    """
    Text of one tagged element.

    Paragraph ranges are joined with "\\n", then character ranges directly
    inside the element are appended, then nested tagged elements.
    """
    parts = []

    paragraphs = children_named(element, PARAGRAPH_RANGE)
    if paragraphs:
        parts.append("\n".join(run_text(p) for p in paragraphs))

    for character_range in children_named(element, CHARACTER_RANGE):
        parts.append(run_text(character_range))

    for nested in children_named(element, TAGGED_ELEMENT):
        parts.append(tagged_text(nested))

    return "".join(parts)


class TaggedElementExtractor:
    """
    Extracts text units from XMLElement trees.

    Every non-empty top-level tagged element yields a unit keyed by its story
    id, so several elements of one story share an id; the merge step keeps
    the first.
    """

    source_kind = SourceKind.TAGGED

    def extract(self, package: IDMLPackage) -> List[TextUnit]:
        units = []
        for story in iter_stories(package):
            for element in story.tagged_elements():
                content = tagged_text(element)
                if not content.strip():
                    continue
                units.append(
                    TextUnit(
                        unit_id=story.story_id,
                        content=content,
                        story_id=story.story_id,
                        source_kind=self.source_kind,
                    )
                )

        logger.info(f"Tagged extraction: {len(units)} units")
        return units
