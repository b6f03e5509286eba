"""Unit tests for text frame geometry lookup."""

import xml.etree.ElementTree as ET

from idml_bridge.geometry import frame_position, frame_positions
from idml_bridge.models import FramePosition
from idml_bridge.package import IDMLPackage


def _spread(frames: str) -> str:
    return f"<Spread Self='s1'>{frames}</Spread>"


class TestFramePosition:
    """Test bounds of a single frame."""

    def test_geometric_bounds(self):
        frame = ET.fromstring('<TextFrame GeometricBounds="10 20 110 220" />')

        assert frame_position(frame) == FramePosition(x=20.0, y=10.0, width=200.0, height=100.0)

    def test_path_anchors_with_transform(self):
        frame = ET.fromstring(
            '<TextFrame ItemTransform="1 0 0 1 10 10"><PathPointArray>'
            '<PathPointType Anchor="0 0" /><PathPointType Anchor="0 40" />'
            '<PathPointType Anchor="60 40" /><PathPointType Anchor="60 0" />'
            "</PathPointArray></TextFrame>"
        )

        assert frame_position(frame) == FramePosition(x=10.0, y=10.0, width=60.0, height=40.0)

    def test_missing_transform_is_identity(self):
        frame = ET.fromstring(
            '<TextFrame><PathPointType Anchor="5 5" /><PathPointType Anchor="15 25" /></TextFrame>'
        )

        assert frame_position(frame) == FramePosition(x=5.0, y=5.0, width=10.0, height=20.0)

    def test_no_geometry(self):
        assert frame_position(ET.fromstring("<TextFrame />")) is None

    def test_unreadable_geometry(self):
        frame = ET.fromstring('<TextFrame><PathPointType Anchor="left top" /></TextFrame>')

        assert frame_position(frame) is None


class TestFramePositions:
    """Test story -> frame lookup across spreads."""

    def test_sample_spread(self, sample_package):
        positions = frame_positions(sample_package)

        assert set(positions) == {"u1"}

    def test_story_prefix_in_parent_story(self, idml_factory, story_xml):
        spread = _spread('<TextFrame ParentStory="Story_u1" GeometricBounds="0 0 10 10" />')
        package = IDMLPackage.load(idml_factory({"u1": story_xml("")}, spreads={"s1": spread}))

        assert "u1" in frame_positions(package)

    def test_first_frame_wins(self, idml_factory, story_xml):
        """A threaded story takes the first frame in spread order."""
        package = IDMLPackage.load(
            idml_factory(
                {"u1": story_xml("")},
                spreads={
                    "b": _spread('<TextFrame ParentStory="u1" GeometricBounds="0 0 50 50" />'),
                    "a": _spread('<TextFrame ParentStory="u1" GeometricBounds="0 0 10 10" />'),
                },
            )
        )

        assert frame_positions(package)["u1"].width == 10.0

    def test_malformed_spread_skipped(self, idml_factory, story_xml):
        package = IDMLPackage.load(
            idml_factory(
                {"u1": story_xml("")},
                spreads={
                    "a": "<Spread><TextFrame></Spread>",
                    "b": _spread('<TextFrame ParentStory="u1" GeometricBounds="0 0 10 10" />'),
                },
            )
        )

        assert "u1" in frame_positions(package)
