"""Pytest fixtures for idml_bridge tests (packages, stories, spreads)."""

import io
import zipfile
from typing import Callable, Dict, Optional

import pytest

from idml_bridge.package import IDML_MIMETYPE, IDMLPackage

PACKAGING_NS = "http://ns.adobe.com/AdobeInDesign/idml/1.0/packaging"

STORY_TEMPLATE = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<?aid style="50" type="document" readerVersion="6.0" featureSet="257" product="8.0(370)" ?>
<idPkg:Story xmlns:idPkg="{ns}" DOMVersion="8.0">
\t<Story Self="{self_id}" AppliedTOCStyle="n" TrackChanges="false">
\t\t<StoryPreference OpticalMarginAlignment="false" StoryDirection="{direction}" />
{body}
\t</Story>
</idPkg:Story>
"""

DESIGNMAP = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<?aid style="50" type="document" readerVersion="6.0" featureSet="257" product="8.0(370)" ?>
<Document xmlns:idPkg="{ns}" DOMVersion="8.0" Self="d">
\t<idPkg:Story src="Stories/Story_u1.xml" />
</Document>
""".format(ns=PACKAGING_NS)


def build_story(body: str, self_id: str = "u1", direction: str = "LeftToRightDirection") -> str:
    """Wrap story body XML the way InDesign writes a story part."""
    return STORY_TEMPLATE.format(ns=PACKAGING_NS, self_id=self_id, direction=direction, body=body)


def build_idml(
    stories: Dict[str, str],
    spreads: Optional[Dict[str, str]] = None,
    extra: Optional[Dict[str, bytes]] = None,
    mimetype: str = IDML_MIMETYPE,
) -> bytes:
    """
    Build an IDML archive in memory.

    Args:
        stories: Story id (e.g. "u1") -> story XML
        spreads: Spread id -> spread XML
        extra: Additional entries
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("mimetype", mimetype, compress_type=zipfile.ZIP_STORED)
        zf.writestr("designmap.xml", DESIGNMAP, compress_type=zipfile.ZIP_DEFLATED)
        for story_id, xml in stories.items():
            zf.writestr(f"Stories/Story_{story_id}.xml", xml, compress_type=zipfile.ZIP_DEFLATED)
        for spread_id, xml in (spreads or {}).items():
            zf.writestr(f"Spreads/Spread_{spread_id}.xml", xml, compress_type=zipfile.ZIP_DEFLATED)
        for name, data in (extra or {}).items():
            zf.writestr(name, data, compress_type=zipfile.ZIP_DEFLATED)
    return buffer.getvalue()


def read_entries(data: bytes) -> Dict[str, bytes]:
    """All entries of an archive as name -> bytes."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {info.filename: zf.read(info) for info in zf.infolist()}


# ============================================================================
# STORY BODIES
# ============================================================================

DIRECT_BODY = """\t\t<ParagraphStyleRange AppliedParagraphStyle="ParagraphStyle/$ID/NormalParagraphStyle">
\t\t\t<CharacterStyleRange AppliedCharacterStyle="CharacterStyle/$ID/[No character style]" PointSize="12">
\t\t\t\t<Content>Hello</Content>
\t\t\t</CharacterStyleRange>
\t\t\t<CharacterStyleRange AppliedCharacterStyle="CharacterStyle/Bold" PointSize="12">
\t\t\t\t<Content>World</Content>
\t\t\t</CharacterStyleRange>
\t\t</ParagraphStyleRange>"""

TAGGED_BODY = """\t\t<XMLElement Self="di2" MarkupTag="XMLTag/Article">
\t\t\t<ParagraphStyleRange AppliedParagraphStyle="ParagraphStyle/Body">
\t\t\t\t<CharacterStyleRange AppliedCharacterStyle="CharacterStyle/$ID/[No character style]" PointSize="10">
\t\t\t\t\t<Content>Foo</Content>
\t\t\t\t</CharacterStyleRange>
\t\t\t</ParagraphStyleRange>
\t\t\t<ParagraphStyleRange AppliedParagraphStyle="ParagraphStyle/Body">
\t\t\t\t<CharacterStyleRange AppliedCharacterStyle="CharacterStyle/$ID/[No character style]" PointSize="10">
\t\t\t\t\t<Content>Bar</Content>
\t\t\t\t</CharacterStyleRange>
\t\t\t</ParagraphStyleRange>
\t\t</XMLElement>"""

SINGLE_RUN_BODY = """\t\t<ParagraphStyleRange AppliedParagraphStyle="ParagraphStyle/$ID/NormalParagraphStyle">
\t\t\t<CharacterStyleRange AppliedCharacterStyle="CharacterStyle/$ID/[No character style]" PointSize="14">
\t\t\t\t<Content>Keep me</Content>
\t\t\t</CharacterStyleRange>
\t\t</ParagraphStyleRange>"""

SPREAD_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<idPkg:Spread xmlns:idPkg="{ns}" DOMVersion="8.0">
\t<Spread Self="s1">
\t\t<Page Self="p1" />
\t\t<TextFrame Self="tf1" ParentStory="u1" ItemTransform="1 0 0 1 100 50">
\t\t\t<Properties>
\t\t\t\t<PathGeometry>
\t\t\t\t\t<GeometryPathType PathOpen="false">
\t\t\t\t\t\t<PathPointArray>
\t\t\t\t\t\t\t<PathPointType Anchor="-50 -20" LeftDirection="-50 -20" RightDirection="-50 -20" />
\t\t\t\t\t\t\t<PathPointType Anchor="-50 30" LeftDirection="-50 30" RightDirection="-50 30" />
\t\t\t\t\t\t\t<PathPointType Anchor="150 30" LeftDirection="150 30" RightDirection="150 30" />
\t\t\t\t\t\t\t<PathPointType Anchor="150 -20" LeftDirection="150 -20" RightDirection="150 -20" />
\t\t\t\t\t\t</PathPointArray>
\t\t\t\t\t</GeometryPathType>
\t\t\t\t</PathGeometry>
\t\t\t</Properties>
\t\t</TextFrame>
\t</Spread>
</idPkg:Spread>
""".format(ns=PACKAGING_NS)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def story_xml() -> Callable[..., str]:
    """Factory wrapping a story body in an idPkg:Story part."""
    return build_story


@pytest.fixture
def idml_factory() -> Callable[..., bytes]:
    """Factory building IDML archives from story and spread XML."""
    return build_idml


@pytest.fixture
def entries_of() -> Callable[[bytes], Dict[str, bytes]]:
    """Reader returning every entry of an archive."""
    return read_entries


@pytest.fixture
def sample_idml_bytes() -> bytes:
    """
    IDML with three stories and one spread.

    Contains:
    - Story_u1: direct story, one paragraph, runs "Hello" + "World" at 12pt
    - Story_u2: tagged story, one XMLElement with paragraphs "Foo" and "Bar"
    - Story_u3: direct story, single run "Keep me" at 14pt
    - Spread_s1: TextFrame showing u1
    """
    return build_idml(
        stories={
            "u1": build_story(DIRECT_BODY, self_id="u1"),
            "u2": build_story(TAGGED_BODY, self_id="u2"),
            "u3": build_story(SINGLE_RUN_BODY, self_id="u3"),
        },
        spreads={"s1": SPREAD_XML},
    )


@pytest.fixture
def sample_package(sample_idml_bytes) -> IDMLPackage:
    return IDMLPackage.load(sample_idml_bytes)
