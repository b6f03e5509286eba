"""Story parts and styled-run traversal.

A Story holds text as nested style ranges:

    <Story Self="u123">
      <StoryPreference StoryDirection="LeftToRightDirection"/>
      <ParagraphStyleRange>
        <CharacterStyleRange PointSize="12">
          <Content>Hello</Content>
        </CharacterStyleRange>
      </ParagraphStyleRange>
    </Story>

Tagged documents wrap the same ranges in (possibly nested) XMLElement nodes.
Extraction and rewrite both go through the traversal helpers here, so the
nodes read on the way out are exactly the nodes written on the way back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional
import xml.etree.ElementTree as ET

from .errors import FormatError
from .models import story_id_from_path
from .package import IDMLPackage
from .xml_codec import (
    XMLDocument,
    children_named,
    find_story_element,
    local_name,
    parse,
    serialize,
)

logger = logging.getLogger(__name__)

PARAGRAPH_RANGE = "ParagraphStyleRange"
CHARACTER_RANGE = "CharacterStyleRange"
CONTENT = "Content"
TAGGED_ELEMENT = "XMLElement"
STORY_PREFERENCE = "StoryPreference"

RUN_CONTAINERS = (PARAGRAPH_RANGE, CHARACTER_RANGE)


@dataclass
class IDMLStory:
    """
    Represents a single parsed Story part.

    Attributes:
        story_id: Story identifier derived from the entry path (e.g. "Story_u123")
        entry_path: Archive path (e.g. "Stories/Story_u123.xml")
        document: Parsed XML part
        element: The Story element inside the part
    """

    story_id: str
    entry_path: str
    document: XMLDocument
    element: ET.Element

    @property
    def self_id(self) -> str:
        """Self attribute of the Story element, as referenced by TextFrame/@ParentStory."""
        return self.element.get("Self") or self.story_id.replace("Story_", "", 1)

    def paragraphs(self) -> List[ET.Element]:
        return children_named(self.element, PARAGRAPH_RANGE)

    def character_ranges(self) -> List[ET.Element]:
        return children_named(self.element, CHARACTER_RANGE)

    def contents(self) -> List[ET.Element]:
        return children_named(self.element, CONTENT)

    def tagged_elements(self) -> List[ET.Element]:
        return children_named(self.element, TAGGED_ELEMENT)

    def set_direction(self, direction: str) -> bool:
        """
        Set StoryPreference/@StoryDirection.

        Returns:
            False if the story has no StoryPreference to carry the direction
        """
        preferences = children_named(self.element, STORY_PREFERENCE)
        if not preferences:
            return False
        preferences[0].set("StoryDirection", direction)
        return True

    def to_bytes(self) -> bytes:
        return serialize(self.document)


def load_story(package: IDMLPackage, entry_path: str) -> IDMLStory:
    """
    Parse one story entry.

    Raises:
        NotFoundError: If the entry is absent
        FormatError: If the XML is malformed or holds no Story element
    """
    document = parse(package.read_entry(entry_path))
    element = find_story_element(document.root)
    if element is None:
        raise FormatError(f"No Story element in {entry_path}")

    return IDMLStory(
        story_id=story_id_from_path(entry_path),
        entry_path=entry_path,
        document=document,
        element=element,
    )


def iter_stories(package: IDMLPackage) -> Iterator[IDMLStory]:
    """
    Yield every parseable story in lexical path order.

    Broken stories are logged and skipped so one bad part does not abort
    extraction of the whole document.
    """
    for entry_path in package.story_paths():
        try:
            yield load_story(package, entry_path)
        except FormatError as exc:
            logger.warning(f"Skipping {entry_path}: {exc}")


def content_nodes(container: ET.Element) -> List[ET.Element]:
    """
    Content nodes under a style range, in document order.

    Only Content held by a paragraph or character range counts. XMLElement
    wrappers nested inside a range are not entered.
    """
    nodes = []
    inside_run = local_name(container) in RUN_CONTAINERS
    for child in container:
        name = local_name(child)
        if name == CONTENT:
            if inside_run:
                nodes.append(child)
        elif name in RUN_CONTAINERS:
            nodes.extend(content_nodes(child))
    return nodes


def character_ranges_under(container: ET.Element) -> List[ET.Element]:
    """CharacterStyleRange nodes under a container, in document order."""
    ranges = []
    for child in container:
        name = local_name(child)
        if name == CHARACTER_RANGE:
            ranges.append(child)
            ranges.extend(character_ranges_under(child))
        elif name == PARAGRAPH_RANGE:
            ranges.extend(character_ranges_under(child))
    return ranges


def run_text(container: ET.Element) -> str:
    """Concatenate raw Content under a style range with no separator."""
    return "".join(node.text or "" for node in content_nodes(container))


@dataclass
class RunScope:
    """
    Text-bearing nodes one text unit maps onto.

    Attributes:
        ranges: Character ranges whose PointSize follows the target language
        nodes: Content nodes in document order
        separator: Joiner used when reading the nodes as one string
        bare: True for Content directly under the story (text is trimmed)
    """

    ranges: List[ET.Element] = field(default_factory=list)
    nodes: List[ET.Element] = field(default_factory=list)
    separator: str = ""
    bare: bool = False

    def text(self) -> str:
        text = self.separator.join(node.text or "" for node in self.nodes)
        return text.strip() if self.bare else text


def direct_scope(story: IDMLStory) -> Optional[RunScope]:
    """
    Pick the direct-story structure carrying the text.

    Checked in order: paragraph ranges, character ranges directly under the
    story, bare Content. The first one with non-blank text wins, so a story
    yields at most one direct unit.
    """
    candidates = []

    paragraphs = story.paragraphs()
    if paragraphs:
        candidates.append(RunScope(
            ranges=[r for p in paragraphs for r in character_ranges_under(p)],
            nodes=[n for p in paragraphs for n in content_nodes(p)],
        ))

    ranges = story.character_ranges()
    if ranges:
        candidates.append(RunScope(
            ranges=[r for c in ranges for r in [c] + character_ranges_under(c)],
            nodes=[n for c in ranges for n in content_nodes(c)],
        ))

    contents = story.contents()
    if contents:
        candidates.append(RunScope(nodes=contents, separator=" ", bare=True))

    for scope in candidates:
        if scope.text().strip():
            return scope
    return None


def tagged_scope(element: ET.Element) -> RunScope:
    """
    Character ranges and Content nodes of a tagged element.

    Walks the same nodes as ``tagged_text``, in the same order: paragraph
    ranges, then character ranges directly inside the element, then nested
    XMLElement children. XMLElements sitting inside a range are not entered.
    """
    scope = RunScope()

    for paragraph in children_named(element, PARAGRAPH_RANGE):
        scope.ranges.extend(character_ranges_under(paragraph))
        scope.nodes.extend(content_nodes(paragraph))

    for character_range in children_named(element, CHARACTER_RANGE):
        scope.ranges.append(character_range)
        scope.ranges.extend(character_ranges_under(character_range))
        scope.nodes.extend(content_nodes(character_range))

    for nested in children_named(element, TAGGED_ELEMENT):
        inner = tagged_scope(nested)
        scope.ranges.extend(inner.ranges)
        scope.nodes.extend(inner.nodes)

    return scope
