"""
Data model for character tables.

Enumerations are looked up by their nick (the label used in table files and
filenames) and reject anything outside the known set.
"""

from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, NamedTuple


class _NickEnum(Enum):
    """Enum whose values are the nicks used in source files."""

    @classmethod
    def from_nick(cls, nick: str):
        """
        Look up a member by nick.

        Raises:
            ValueError: If the nick is not a known member
        """
        for member in cls:
            if member.value == nick:
                return member
        known = ', '.join(m.value for m in cls)
        raise ValueError(f"Unknown {cls.__name__} '{nick}' (expected one of: {known})")

    @property
    def nick(self) -> str:
        return self.value


class Version(_NickEnum):
    """Release of the Cangjie table a record comes from."""

    V3 = '3'
    V5 = '5'
    V2010 = '2010'


class Orientation(_NickEnum):
    """How a character's shape is composed."""

    BOTH = 'both'
    VERTICAL = 'vertical'
    HORIZONTAL = 'horizontal'


@dataclass(frozen=True)
class SourceTable:
    """One input table file and its version tag."""

    path: Path
    version: Version

    @property
    def name(self) -> str:
        return self.path.name


class RawRecord(NamedTuple):
    """Typed fields of one table line, in file order."""

    chchar: str
    simpchar: str
    zh: bool
    big5: bool
    hkscs: bool
    zhuyin: bool
    kanji: bool
    hiragana: bool
    katakana: bool
    punctuation: bool
    symbol: bool
    orientation: Orientation
    code: str
    short_code: str
    frequency: int


FLAG_FIELDS = (
    'zh', 'big5', 'hkscs', 'zhuyin', 'kanji',
    'hiragana', 'katakana', 'punctuation', 'symbol',
)


@dataclass(frozen=True)
class CharacterRecord:
    """A validated character entry, ready to be persisted."""

    chchar: str
    simpchar: str
    zh: bool
    big5: bool
    hkscs: bool
    zhuyin: bool
    kanji: bool
    hiragana: bool
    katakana: bool
    punctuation: bool
    symbol: bool
    orientation: Orientation
    version: Version
    code: str
    short_code: str
    frequency: int

    @classmethod
    def from_raw(cls, raw: RawRecord, version: Version) -> 'CharacterRecord':
        return cls(version=version, **raw._asdict())

    def to_row(self) -> Dict[str, Any]:
        """Column mapping for the ``chars`` table."""
        row = {f.name: getattr(self, f.name) for f in fields(self)}
        row['orientation'] = self.orientation.nick
        row['version'] = self.version.nick
        return row

    def to_fields(self) -> List[str]:
        """Render the record back into the 15 table tokens."""
        tokens = [self.chchar, self.simpchar]
        tokens.extend('1' if getattr(self, name) else '0' for name in FLAG_FIELDS)
        tokens.extend([
            self.orientation.nick,
            self.code,
            self.short_code,
            str(self.frequency),
        ])
        return tokens
