"""Text frame geometry lookup.

Spreads position TextFrames; each frame names the story it shows through
its ParentStory attribute. A story threaded through several frames takes the
first frame found in lexical spread order.

Frame bounds come from GeometricBounds ("top left bottom right") when
present, otherwise from the PathGeometry anchors mapped through
ItemTransform ("a b c d tx ty").
"""

import logging
from typing import Dict, List, Optional, Tuple
import xml.etree.ElementTree as ET

from .errors import FormatError
from .models import FramePosition
from .package import IDMLPackage
from .xml_codec import iter_named, parse

logger = logging.getLogger(__name__)

IDENTITY_TRANSFORM = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def frame_positions(package: IDMLPackage) -> Dict[str, FramePosition]:
    """
    Map story Self ids to the bounds of the frame displaying them.

    Args:
        package: Loaded IDML package

    Returns:
        Dictionary of story Self id (e.g. "u123") -> FramePosition
    """
    positions: Dict[str, FramePosition] = {}

    for spread_path in package.spread_paths():
        try:
            document = parse(package.read_entry(spread_path))
        except FormatError as exc:
            logger.warning(f"Skipping {spread_path} for frame geometry: {exc}")
            continue

        for frame in iter_named(document.root, "TextFrame"):
            # Handle both "u123" and "Story_u123" references
            parent_story = frame.get("ParentStory", "").replace("Story_", "", 1)
            if not parent_story or parent_story in positions:
                continue

            position = frame_position(frame)
            if position is not None:
                positions[parent_story] = position

    return positions


def frame_position(frame: ET.Element) -> Optional[FramePosition]:
    """Bounds of a single TextFrame, or None if not derivable."""
    try:
        bounds = frame.get("GeometricBounds")
        if bounds:
            values = [float(v) for v in bounds.split()]
            if len(values) == 4:
                top, left, bottom, right = values
                return FramePosition(x=left, y=top, width=right - left, height=bottom - top)

        anchors = _path_anchors(frame)
        if not anchors:
            return None

        a, b, c, d, tx, ty = _parse_transform(frame.get("ItemTransform"))
        xs = [a * x + c * y + tx for x, y in anchors]
        ys = [b * x + d * y + ty for x, y in anchors]
    except ValueError:
        logger.debug(f"Unreadable geometry on TextFrame {frame.get('Self', '?')}")
        return None

    return FramePosition(
        x=min(xs),
        y=min(ys),
        width=max(xs) - min(xs),
        height=max(ys) - min(ys),
    )


def _path_anchors(frame: ET.Element) -> List[Tuple[float, float]]:
    anchors = []
    for point in iter_named(frame, "PathPointType"):
        anchor = point.get("Anchor")
        if not anchor:
            continue
        x, y = anchor.split()
        anchors.append((float(x), float(y)))
    return anchors


def _parse_transform(value: Optional[str]) -> Tuple[float, ...]:
    if not value:
        return IDENTITY_TRANSFORM
    parts = [float(v) for v in value.split()]
    if len(parts) != 6:
        return IDENTITY_TRANSFORM
    return tuple(parts)
