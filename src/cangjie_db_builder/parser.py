"""
Line tokenizer and record builder.

A table line holds 15 tab-separated fields:

    char, simplified char, zh, big5, hkscs, zhuyin, kanji, hiragana,
    katakana, punctuation, symbol, orientation, code, short code, frequency

Both functions here are pure; file context is added by the reader.
"""

import re
from typing import List, Optional

from .exceptions import MalformedRecordError
from .models import CharacterRecord, FLAG_FIELDS, Orientation, RawRecord, Version

NUM_FIELDS = 15

_INT_RE = re.compile(r"-?[0-9]+")


def _parse_int(token: str, name: str) -> int:
    # ASCII digits with an optional minus sign
    match = _INT_RE.fullmatch(token.strip())
    if match is None:
        raise MalformedRecordError(f"Field '{name}' is not an integer: {token!r}")
    return int(match.group())


def tokenize_line(line: str) -> RawRecord:
    """
    Split one table line into typed fields.

    The split is bounded, so the last field keeps any extra tabs.

    Args:
        line: Line without its trailing newline

    Returns:
        Parsed RawRecord

    Raises:
        MalformedRecordError: On a short line, a non-integer flag or
            frequency, a negative frequency or an unknown orientation
    """
    tokens: List[str] = line.split('\t', NUM_FIELDS - 1)
    if len(tokens) < NUM_FIELDS:
        raise MalformedRecordError(
            f"Expected {NUM_FIELDS} tab-separated fields, got {len(tokens)}"
        )

    flags = [bool(_parse_int(token, name)) for name, token in zip(FLAG_FIELDS, tokens[2:11])]

    try:
        orientation = Orientation.from_nick(tokens[11])
    except ValueError as e:
        raise MalformedRecordError(str(e)) from None

    frequency = _parse_int(tokens[14], 'frequency')
    if frequency < 0:
        raise MalformedRecordError(f"Frequency must not be negative: {frequency}")

    return RawRecord(
        tokens[0],
        tokens[1],
        *flags,
        orientation,
        tokens[12],
        tokens[13],
        frequency,
    )


def build_record(raw: RawRecord, version: Version) -> Optional[CharacterRecord]:
    """
    Build a CharacterRecord from parsed fields.

    Returns:
        The record, or None when both codes are empty (such a character
        would be useless in the database)
    """
    if raw.code == '' and raw.short_code == '':
        return None
    return CharacterRecord.from_raw(raw, version)
