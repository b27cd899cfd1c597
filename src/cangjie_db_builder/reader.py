"""
Table reader for versioned Cangjie source files.

Table files are named ``table-<version>.txt``; the version tag is stored on
every record read from the file.
"""

import logging
from pathlib import Path
from typing import Iterator, Tuple, Union

from .exceptions import BadFilenameError, MalformedRecordError, ReadError
from .models import CharacterRecord, SourceTable, Version
from .parser import build_record, tokenize_line

logger = logging.getLogger(__name__)


def parse_version(path: Union[str, Path]) -> Version:
    """
    Derive the version tag from a table filename.

    The tag is the text between the first '-' and the last '.' of the
    basename, e.g. ``table-2010.txt`` -> ``Version.V2010``.

    Raises:
        BadFilenameError: If the name has no such part or it is not a known version
    """
    basename = Path(path).name
    hyphen = basename.find('-')
    dot = basename.rfind('.')

    if hyphen < 0 or dot < 0 or dot <= hyphen:
        raise BadFilenameError(str(path), "expected a name like table-<version>.txt")

    nick = basename[hyphen + 1:dot]
    try:
        return Version.from_nick(nick)
    except ValueError as e:
        raise BadFilenameError(str(path), str(e)) from None


class TableReader:
    """
    Streams records out of one source table.

    Each call to ``iter_lines``/``iter_records`` re-opens the file and starts
    from the top. Empty lines and lines starting with '#' are skipped and
    not counted.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Args:
            path: Path to a ``table-<version>.txt`` file

        Raises:
            BadFilenameError: If the filename carries no known version
        """
        path = Path(path)
        self.table = SourceTable(path=path, version=parse_version(path))
        self.lines_processed = 0
        self.records_discarded = 0
        self.records_skipped = 0

    @property
    def path(self) -> Path:
        return self.table.path

    @property
    def version(self) -> Version:
        return self.table.version

    def iter_lines(self) -> Iterator[Tuple[int, str]]:
        """
        Iterate over content lines.

        Yields:
            Tuple of (physical line number, line without newline)

        Raises:
            ReadError: If the file cannot be opened or read
        """
        try:
            f = open(self.path, 'rb')
        except OSError as e:
            raise ReadError(str(self.path), 0, e) from e

        with f:
            line_no = 0
            while True:
                line_no += 1
                # Decode line by line so a bad byte is reported on its own line
                try:
                    raw = f.readline()
                    if not raw:
                        break
                    line = raw.decode('utf-8').rstrip('\r\n')
                except (OSError, UnicodeDecodeError) as e:
                    raise ReadError(str(self.path), line_no, e) from e

                if not line or line.startswith('#'):
                    continue
                yield line_no, line

    def iter_records(self, skip_malformed: bool = False) -> Iterator[CharacterRecord]:
        """
        Iterate over the records of the table.

        Args:
            skip_malformed: Log and skip unparseable lines instead of failing

        Yields:
            CharacterRecord objects tagged with this table's version

        Raises:
            MalformedRecordError: On an unparseable line (unless skipped)
            ReadError: On an I/O failure
        """
        for line_no, line in self.iter_lines():
            self.lines_processed += 1
            try:
                raw = tokenize_line(line)
            except MalformedRecordError as e:
                if not skip_malformed:
                    raise MalformedRecordError(e.message, str(self.path), line_no) from e
                logger.warning(f"Skipping malformed line {line_no} of {self.path}: {e.message}")
                self.records_skipped += 1
                continue

            record = build_record(raw, self.version)
            if record is None:
                logger.debug(f"Discarding {raw.chchar!r} at line {line_no}: no code")
                self.records_discarded += 1
                continue

            yield record
