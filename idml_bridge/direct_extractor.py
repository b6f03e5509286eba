"""Direct story text extraction.

Reads text straight from a story's style ranges:

    1. ParagraphStyleRange > CharacterStyleRange > Content
    2. CharacterStyleRange > Content directly under the story
    3. Bare Content under the story (joined with a single space)

Runs are concatenated with no separator; the first structure with text wins,
so each story yields at most one unit.
"""

import logging
from typing import List

from .geometry import frame_positions
from .models import SourceKind, TextUnit
from .package import IDMLPackage
from .story import IDMLStory, direct_scope, iter_stories

logger = logging.getLogger(__name__)


class DirectStoryExtractor:
    """
    Extracts one text unit per story from plain style-range structures.

    Usage:
        >>> extractor = DirectStoryExtractor()
        >>> units = extractor.extract(package)
        >>> print([unit.unit_id for unit in units])
        ['Story_u123', 'Story_u124']
    """

    source_kind = SourceKind.DIRECT

    def __init__(self, with_positions: bool = True):
        """
        Args:
            with_positions: Look up frame bounds on spreads for each unit
        """
        self.with_positions = with_positions

    def extract(self, package: IDMLPackage) -> List[TextUnit]:
        positions = frame_positions(package) if self.with_positions else {}

        units = []
        for story in iter_stories(package):
            content = self.extract_story_text(story)
            if not content.strip():
                logger.debug(f"{story.story_id}: no direct text")
                continue

            units.append(
                TextUnit(
                    unit_id=story.story_id,
                    content=content,
                    story_id=story.story_id,
                    position=positions.get(story.self_id),
                    source_kind=self.source_kind,
                )
            )

        logger.info(f"Direct extraction: {len(units)} units")
        return units

    def extract_story_text(self, story: IDMLStory) -> str:
        """Text of a single story, or "" if it has no direct text."""
        scope = direct_scope(story)
        return scope.text() if scope is not None else ""
