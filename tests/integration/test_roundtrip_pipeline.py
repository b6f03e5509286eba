"""
Integration tests: extract -> translate -> rewrite -> extract.

Exercises the full pipeline on an in-memory document with direct and tagged
stories, checking that a rewrite touches only what it has to.
"""

import xml.etree.ElementTree as ET

from idml_bridge import (
    DocumentRewriter,
    IDMLPackage,
    extract_text_units,
    localize,
    parse_translation_records,
)
from idml_bridge.story import load_story


def _same_tree(left: ET.Element, right: ET.Element) -> bool:
    if (left.tag, left.attrib, left.text or "", left.tail or "") != (
        right.tag, right.attrib, right.text or "", right.tail or ""
    ):
        return False
    return len(left) == len(right) and all(_same_tree(a, b) for a, b in zip(left, right))


class TestRoundTrip:
    """Rewrite with unchanged content leaves the document equivalent."""

    def test_identity_rewrite_single_run_story(self, sample_package):
        """Writing a single-run story back in English yields the same tree."""
        units = [u for u in extract_text_units(sample_package) if u.unit_id == "Story_u3"]

        data = DocumentRewriter().rewrite(sample_package, units, "en")

        before = load_story(sample_package, "Stories/Story_u3.xml").document.root
        after = load_story(IDMLPackage.load(data), "Stories/Story_u3.xml").document.root
        assert _same_tree(before, after)

    def test_unaffected_entries_preserved(self, sample_package, entries_of):
        result = localize(sample_package, {"Story_u1": "Bonjour"}, "fr")
        entries = entries_of(result.data)

        assert list(entries)[0] == "mimetype"
        for name in ("mimetype", "designmap.xml", "Spreads/Spread_s1.xml"):
            assert entries[name] == sample_package.read_entry(name)
        assert set(entries) == set(sample_package.entry_names)


class TestTranslationPipeline:
    """Full translation round trip."""

    def test_translate_every_unit(self, sample_package):
        units = extract_text_units(sample_package)
        payload = {
            "translatedTextBoxes": [
                {"id": unit.unit_id, "translatedContent": f"[fa] {unit.content}"} for unit in units
            ]
        }

        result = localize(sample_package, parse_translation_records(payload), "fa")
        reread = extract_text_units(IDMLPackage.load(result.data))

        assert [unit.content for unit in reread[:2]] == ["[fa] HelloWorld", "[fa] Keep me"]
        # The emptied second paragraph still contributes its separator
        assert reread[2].content == "[fa] Foo\nBar\n"
        assert result.report["translated_unit_count"] == 3

    def test_partial_translation_keeps_source_text(self, sample_package):
        result = localize(sample_package, {"Story_u3": "Behalten"}, "de")
        reread = {unit.unit_id: unit.content for unit in extract_text_units(IDMLPackage.load(result.data))}

        assert reread["Story_u3"] == "Behalten"
        assert reread["Story_u1"] == "HelloWorld"

    def test_positions_survive_rewrite(self, sample_package):
        result = localize(sample_package, {"Story_u1": "Hola"}, "es")

        before = extract_text_units(sample_package)[0].position
        after = extract_text_units(IDMLPackage.load(result.data))[0].position

        assert before == after
