"""Core type definitions"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List

from wasm_runtime.constants import WASM_EXT
from wasm_runtime.errors import InvalidLanguageError


class Language(Enum):
    """Guest languages with a published WASM interpreter."""

    NODEJS = "nodejs"
    PYTHON = "python"
    RUBY = "ruby"
    PHP = "php"
    GO = "go"
    RUST = "rust"

    @classmethod
    def parse(cls, text: str) -> "Language":
        """Parse a language name or alias, ignoring case."""
        language = LANGUAGE_ALIASES.get(text.lower())
        if language is None:
            raise InvalidLanguageError(text)
        return language

    @classmethod
    def all(cls) -> List["Language"]:
        return list(cls)

    @property
    def canonical_name(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


LANGUAGE_ALIASES: Dict[str, Language] = {
    "nodejs": Language.NODEJS,
    "node": Language.NODEJS,
    "node.js": Language.NODEJS,
    "python": Language.PYTHON,
    "py": Language.PYTHON,
    "ruby": Language.RUBY,
    "rb": Language.RUBY,
    "php": Language.PHP,
    "go": Language.GO,
    "golang": Language.GO,
    "rust": Language.RUST,
    "rs": Language.RUST,
}


@dataclass(frozen=True)
class Runtime:
    """A verified runtime binary on local disk"""
    language: Language
    version: str
    path: Path
    size: int
    sha256: str

    @property
    def filename(self) -> str:
        return f"{self.language.canonical_name}-{self.version}{WASM_EXT}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language.canonical_name,
            "version": self.version,
            "path": str(self.path),
            "size": self.size,
            "sha256": self.sha256,
        }
