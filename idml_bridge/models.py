"""Core data structures for IDML text extraction.

A TextUnit is the translatable chunk handed to the translation workflow.
Its id doubles as the owning story identifier ("Story_u123"), so one story
normally maps to one unit.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, Optional


class SourceKind(Enum):
    """Which extraction strategy produced a unit."""

    DIRECT = "direct"
    TAGGED = "tagged"


@dataclass(frozen=True)
class FramePosition:
    """
    Geometric bounds of the text frame that displays a story.

    Attributes:
        x: Left edge in points (spread coordinates)
        y: Top edge in points
        width: Frame width in points
        height: Frame height in points
    """

    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class TextUnit:
    """
    Single translatable text entity extracted from a story.

    Attributes:
        unit_id: Stable identifier (the story identifier, e.g. "Story_u123")
        content: Plain text payload
        story_id: Owning story, used to locate the story file on rewrite
        position: Frame bounds, only for direct units with a known frame
        source_kind: Extractor that produced the unit
    """

    unit_id: str
    content: str
    story_id: str
    position: Optional[FramePosition] = None
    source_kind: SourceKind = SourceKind.DIRECT

    def with_content(self, content: str) -> "TextUnit":
        """Return a copy carrying new content."""
        return replace(self, content=content)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the shape consumed by translation collaborators."""
        data: Dict[str, Any] = {
            "id": self.unit_id,
            "content": self.content,
            "storyId": self.story_id,
            "sourceKind": self.source_kind.value,
        }
        if self.position is not None:
            data["position"] = self.position.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextUnit":
        position = data.get("position")
        return cls(
            unit_id=data["id"],
            content=data.get("content", ""),
            story_id=data.get("storyId", data["id"]),
            position=FramePosition(**position) if position else None,
            source_kind=SourceKind(data.get("sourceKind", SourceKind.DIRECT.value)),
        )


def story_id_from_path(entry_path: str) -> str:
    """
    Derive the story identifier from an archive path.

    Example:
        >>> story_id_from_path("Stories/Story_u123.xml")
        'Story_u123'
    """
    return PurePosixPath(entry_path).stem
