"""IDML text extraction and translation re-injection.

Pulls translatable text out of Adobe InDesign IDML packages and writes
translated text back, applying the target language's story direction and
font-size compensation.

Components:
- package.py: ZIP container load/save with byte-exact passthrough
- xml_codec.py: Story XML parse/serialize
- story.py: Story parts and styled-run traversal
- direct_extractor.py: Text from ParagraphStyleRange/CharacterStyleRange
- tagged_extractor.py: Text from XMLElement trees
- geometry.py: Text frame bounds from spreads
- merger.py: Combining units and merging translations
- languages.py: Direction and expansion metadata per language
- rewriter.py: Content substitution and package reassembly
- workflow.py: Extract / select / localize entry points
- cli.py: Command line interface

Usage:
    from idml_bridge import IDMLPackage, extract_text_units, localize

    package = IDMLPackage.from_path(Path("brochure.idml"))
    units = extract_text_units(package)
    result = localize(package, {"Story_u123": "Hola"}, "es")
"""

from .errors import EmptyResultError, FormatError, IDMLBridgeError, NotFoundError
from .models import FramePosition, SourceKind, TextUnit, story_id_from_path
from .package import IDMLPackage
from .direct_extractor import DirectStoryExtractor
from .tagged_extractor import TaggedElementExtractor
from .merger import apply_translations, combine, parse_translation_records, partition_by_source
from .languages import (
    BUILTIN_LANGUAGES,
    FormattingResolver,
    LanguageConfig,
    LanguageTable,
    TextDirection,
)
from .rewriter import DocumentRewriter
from .workflow import (
    LocalizationResult,
    extract_text_units,
    language_warnings,
    localize,
    select_units,
)

__version__ = "1.0.0"

__all__ = [
    # Errors
    "IDMLBridgeError",
    "FormatError",
    "NotFoundError",
    "EmptyResultError",
    # Model
    "TextUnit",
    "FramePosition",
    "SourceKind",
    "story_id_from_path",
    # Package
    "IDMLPackage",
    # Extraction
    "DirectStoryExtractor",
    "TaggedElementExtractor",
    # Merge
    "combine",
    "apply_translations",
    "partition_by_source",
    "parse_translation_records",
    # Languages
    "BUILTIN_LANGUAGES",
    "LanguageConfig",
    "LanguageTable",
    "FormattingResolver",
    "TextDirection",
    # Rewrite
    "DocumentRewriter",
    # Workflow
    "LocalizationResult",
    "extract_text_units",
    "select_units",
    "language_warnings",
    "localize",
]
