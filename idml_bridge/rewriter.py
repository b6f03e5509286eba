"""IDML rewrite system.

Writes final (usually translated) text back into the story parts it came
from and reassembles the package.

Workflow:
    1. Resolve direction and font scale for the target language
    2. Group units by story
    3. For each story:
        a. Parse its XML
        b. Set StoryPreference/@StoryDirection
        c. Scale CharacterStyleRange/@PointSize
        d. Write content into the first Content node, clear the rest
        e. Serialize
    4. Re-package; untouched entries pass through byte for byte

Nothing is packaged until every touched story has been rewritten, so a
failure never yields a half-translated file.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional, Sequence, Set

from .errors import FormatError
from .languages import FormattingResolver
from .models import SourceKind, TextUnit, story_id_from_path
from .package import IDMLPackage
from .story import IDMLStory, RunScope, direct_scope, load_story, tagged_scope
from .tagged_extractor import tagged_text

logger = logging.getLogger(__name__)

DEFAULT_POINT_SIZE_ATTR = "PointSize"
DEFAULT_POINT_SIZE = 12.0


class DocumentRewriter:
    """
    Rewrites story content, direction and font size for a target language.

    Usage:
        >>> rewriter = DocumentRewriter()
        >>> new_bytes = rewriter.rewrite(package, units, "fa")
    """

    def __init__(self, resolver: Optional[FormattingResolver] = None):
        self.resolver = resolver or FormattingResolver()

    def rewrite(self, package: IDMLPackage, units: Sequence[TextUnit], target_language: str) -> bytes:
        """
        Produce a new package with the units' content written in.

        Args:
            package: Original package
            units: Units carrying final content
            target_language: Language code driving direction and font scale

        Returns:
            New IDML archive bytes

        Raises:
            NotFoundError: If a unit names a story absent from the package
            FormatError: If a story slated for rewrite cannot be parsed, or
                has no Content node to hold a unit's text
        """
        return package.save(self.rewrite_stories(package, units, target_language))

    def rewrite_stories(
        self, package: IDMLPackage, units: Sequence[TextUnit], target_language: str
    ) -> Dict[str, bytes]:
        """Rewrite touched stories and return their new bytes keyed by entry path."""
        direction = self.resolver.direction(target_language)
        scale = self.resolver.font_scale(target_language)
        logger.info(
            f"Rewriting for {target_language}: direction {direction.value}, "
            f"font scale {scale * 100:.1f}%"
        )

        story_paths = {story_id_from_path(path): path for path in package.story_paths()}

        by_story: "OrderedDict[str, List[TextUnit]]" = OrderedDict()
        for unit in units:
            by_story.setdefault(unit.story_id, []).append(unit)

        overrides: Dict[str, bytes] = {}
        for story_id, story_units in by_story.items():
            entry_path = story_paths.get(story_id, f"Stories/{story_id}.xml")
            story = load_story(package, entry_path)

            if not story.set_direction(direction.value):
                logger.debug(f"{story_id}: no StoryPreference, direction unchanged")

            # Each range is scaled once per story, however many units touch it
            scaled: Set[int] = set()
            for unit in story_units:
                if unit.source_kind is SourceKind.TAGGED:
                    placed = self.rewrite_tagged(story, unit.content, scale, scaled)
                else:
                    placed = self.rewrite_direct(story, unit.content, scale, scaled)
                if not placed:
                    raise FormatError(
                        f"{story_id}: no {unit.source_kind.value} Content node to hold the text"
                    )

            overrides[entry_path] = story.to_bytes()
            logger.debug(f"{story_id}: rewritten ({len(story_units)} units)")

        logger.info(f"Rewrote {len(overrides)} stories")
        return overrides

    def rewrite_direct(
        self, story: IDMLStory, content: str, scale: float, scaled: Optional[Set[int]] = None
    ) -> bool:
        """
        Substitute content in a directly structured story.

        All character ranges are scaled first, then the first Content node
        takes the whole text and every other Content node is emptied.
        """
        scope = direct_scope(story)
        if scope is None:
            return False
        return self._apply(scope, content, scale, scaled)

    def rewrite_tagged(
        self, story: IDMLStory, content: str, scale: float, scaled: Optional[Set[int]] = None
    ) -> bool:
        """
        Substitute content inside the first tagged element holding text.

        Sibling tagged elements are left as they are.
        """
        for element in story.tagged_elements():
            if not tagged_text(element).strip():
                continue
            return self._apply(tagged_scope(element), content, scale, scaled)
        return False

    def _apply(
        self, scope: RunScope, content: str, scale: float, scaled: Optional[Set[int]]
    ) -> bool:
        if not scope.nodes:
            return False

        scaled = set() if scaled is None else scaled
        for character_range in scope.ranges:
            if id(character_range) in scaled:
                continue
            scaled.add(id(character_range))
            scale_point_size(character_range, scale)

        first, rest = scope.nodes[0], scope.nodes[1:]
        first.text = content
        for node in rest:
            node.text = ""
        return True


def scale_point_size(element, scale: float, attr: str = DEFAULT_POINT_SIZE_ATTR) -> bool:
    """
    Multiply the PointSize attribute, rounded to two decimals.

    A range carrying attributes but no explicit size is taken as 12pt and
    gets the scaled size written. A bare range with no attributes is left
    alone; a scale of 1.0 is a no-op.

    Returns:
        True if the attribute was changed
    """
    if scale == 1.0 or not element.attrib:
        return False

    current = element.get(attr)
    if current is None:
        size = DEFAULT_POINT_SIZE
    else:
        try:
            size = float(current)
        except ValueError:
            logger.warning(f"Unreadable {attr} {current!r}, left unscaled")
            return False

    new_size = size * scale
    element.set(attr, f"{new_size:.2f}")
    logger.debug(f"Font size adjusted: {size:.2f}pt -> {new_size:.2f}pt")
    return True
