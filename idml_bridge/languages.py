"""Language formatting metadata.

Target languages drive two rewrite adjustments: the story direction written
to StoryPreference, and a font-size scale of ``1 / expansion_factor`` that
compensates for translations running longer (or shorter) than English.

The builtin table can be overlaid from YAML:

    languages:
      fa:
        name: "Persian (Farsi)"
        direction: RightToLeftDirection
        expansion_factor: 1.3
        fonts: ["Tahoma", "Nazanin"]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

from .errors import NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_FONTS = ("Arial", "Times New Roman")


class TextDirection(str, Enum):
    """StoryDirection attribute values."""

    LEFT_TO_RIGHT = "LeftToRightDirection"
    RIGHT_TO_LEFT = "RightToLeftDirection"


@dataclass(frozen=True)
class LanguageConfig:
    """
    Formatting metadata for one language.

    Attributes:
        code: Lowercase language code (e.g. "fa")
        name: Display name
        direction: Story direction
        fonts: Recommended fonts
        expansion_factor: Typical text length relative to English
    """

    code: str
    name: str
    direction: TextDirection = TextDirection.LEFT_TO_RIGHT
    fonts: Tuple[str, ...] = field(default_factory=tuple)
    expansion_factor: float = 1.0

    @property
    def is_rtl(self) -> bool:
        return self.direction is TextDirection.RIGHT_TO_LEFT

    @classmethod
    def from_dict(cls, code: str, data: Mapping) -> "LanguageConfig":
        expansion_factor = float(data.get("expansion_factor", 1.0))
        if expansion_factor <= 0:
            raise ValueError(f"expansion_factor must be positive, got {expansion_factor}")
        return cls(
            code=code.lower(),
            name=data.get("name", code),
            direction=TextDirection(data.get("direction", TextDirection.LEFT_TO_RIGHT.value)),
            fonts=tuple(data.get("fonts", ())),
            expansion_factor=expansion_factor,
        )


_LTR = TextDirection.LEFT_TO_RIGHT
_RTL = TextDirection.RIGHT_TO_LEFT

BUILTIN_LANGUAGES: Tuple[LanguageConfig, ...] = (
    # Left-to-right
    LanguageConfig("en", "English", _LTR, (), 1.0),
    LanguageConfig("es", "Spanish", _LTR, ("Arial", "Times New Roman", "Calibri"), 1.15),
    LanguageConfig("fr", "French", _LTR, ("Arial", "Times New Roman", "Calibri"), 1.10),
    LanguageConfig("de", "German", _LTR, ("Arial", "Times New Roman", "Calibri"), 1.20),
    LanguageConfig("pt", "Portuguese", _LTR, ("Arial", "Times New Roman", "Calibri"), 1.15),
    LanguageConfig("it", "Italian", _LTR, ("Arial", "Times New Roman", "Calibri"), 1.10),
    LanguageConfig("ru", "Russian", _LTR, ("Arial Unicode MS", "Times New Roman", "Calibri"), 1.15),
    LanguageConfig("zh", "Chinese (Simplified)", _LTR, ("SimSun", "Microsoft YaHei", "Arial Unicode MS"), 0.8),
    LanguageConfig("ja", "Japanese", _LTR, ("MS Gothic", "Hiragino Sans", "Arial Unicode MS"), 0.9),
    LanguageConfig("ko", "Korean", _LTR, ("Malgun Gothic", "Dotum", "Arial Unicode MS"), 0.85),
    # Right-to-left
    LanguageConfig("ar", "Arabic", _RTL, ("Tahoma", "Arial Unicode MS", "Times New Roman"), 1.25),
    LanguageConfig("fa", "Persian (Farsi)", _RTL, ("Tahoma", "Nazanin", "Arial Unicode MS"), 1.30),
    LanguageConfig("he", "Hebrew", _RTL, ("Tahoma", "Arial Unicode MS", "Times New Roman"), 1.10),
    LanguageConfig("ur", "Urdu", _RTL, ("Tahoma", "Arial Unicode MS", "Jameel Noori Nastaleeq"), 1.35),
)


class LanguageTable:
    """
    Read-only language lookup, keyed case-insensitively by code.

    Example:
        >>> table = LanguageTable()
        >>> table.get("FA").direction
        <TextDirection.RIGHT_TO_LEFT: 'RightToLeftDirection'>
        >>> table = LanguageTable.from_yaml(Path("config/languages.yaml"))
    """

    def __init__(self, languages: Optional[Iterable[LanguageConfig]] = None):
        entries = BUILTIN_LANGUAGES if languages is None else languages
        self._languages: Mapping[str, LanguageConfig] = MappingProxyType(
            {lang.code.lower(): lang for lang in entries}
        )

    @classmethod
    def from_yaml(cls, yaml_path: Path, include_builtin: bool = True) -> "LanguageTable":
        """
        Build a table from a YAML file, overlaid on the builtin languages.

        Invalid entries are logged and skipped.

        Raises:
            NotFoundError: If the file does not exist
        """
        if not yaml_path.exists():
            raise NotFoundError(f"Language file not found: {yaml_path}")

        logger.info(f"Loading languages from: {yaml_path}")

        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        merged: Dict[str, LanguageConfig] = {}
        if include_builtin:
            merged.update((lang.code, lang) for lang in BUILTIN_LANGUAGES)

        if not data or "languages" not in data:
            logger.warning(f"No languages found in {yaml_path}")
            return cls(merged.values())

        count = 0
        for code, config in data["languages"].items():
            try:
                language = LanguageConfig.from_dict(str(code), config or {})
            except (TypeError, ValueError) as e:
                logger.error(f"Failed to load language '{code}': {e}")
                continue
            merged[language.code] = language
            count += 1

        logger.info(f"Loaded {count} languages from {yaml_path}")
        return cls(merged.values())

    def __contains__(self, code: str) -> bool:
        return self.is_supported(code)

    def __iter__(self):
        return iter(self._languages.values())

    def __len__(self) -> int:
        return len(self._languages)

    def is_supported(self, code: str) -> bool:
        return code.lower() in self._languages

    def get(self, code: str) -> Optional[LanguageConfig]:
        return self._languages.get(code.lower())

    def rtl_languages(self) -> List[LanguageConfig]:
        return [lang for lang in self if lang.is_rtl]

    def ltr_languages(self) -> List[LanguageConfig]:
        return [lang for lang in self if not lang.is_rtl]


class FormattingResolver:
    """
    Resolve direction and font scaling for a target language.

    Unknown codes fall back to left-to-right with no scaling.
    """

    def __init__(self, table: Optional[LanguageTable] = None):
        self.table = table or LanguageTable()

    def direction(self, code: str) -> TextDirection:
        language = self.table.get(code)
        return language.direction if language else TextDirection.LEFT_TO_RIGHT

    def is_rtl(self, code: str) -> bool:
        return self.direction(code) is TextDirection.RIGHT_TO_LEFT

    def expansion_factor(self, code: str) -> float:
        language = self.table.get(code)
        return language.expansion_factor if language else 1.0

    def font_scale(self, code: str) -> float:
        """Font-size multiplier: a language growing text by 30% scales to 1/1.30."""
        return 1.0 / self.expansion_factor(code)

    def recommended_fonts(self, code: str) -> List[str]:
        language = self.table.get(code)
        if language and language.fonts:
            return list(language.fonts)
        return list(DEFAULT_FONTS)
