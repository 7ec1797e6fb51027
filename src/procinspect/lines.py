"""
Line source and field tokenizer shared by every procfs extractor.

Pseudo-files under procfs report a size of zero and may only support a
single sequential read, so they are streamed in small chunks and re-split on
newline boundaries rather than read by size.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from procinspect.errors import OpenError, ParseError, ReadError

DEFAULT_CHUNK_SIZE = 4096
# /proc/stat "intr" lines run to several KiB on large machines.
MAX_LINE_LENGTH = 64 * 1024

WHITESPACE = " \t"


class TokenCursor:
    """
    Mutable cursor over one line of text.

    Each call to next() skips leading delimiters, returns the following run of
    non-delimiter characters and steps over at most one trailing delimiter.
    Once no token remains the cursor is exhausted and keeps returning None.
    """

    __slots__ = ("_text", "_pos")

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos: int | None = 0

    @property
    def exhausted(self) -> bool:
        """True once the cursor has passed its last token."""
        return self._pos is None

    @property
    def remainder(self) -> str:
        """Text not yet consumed by the cursor."""
        if self._pos is None:
            return ""
        return self._text[self._pos :]

    def next(self, delimiters: str) -> str | None:
        """Return the next token, or None when no tokens remain."""
        if self._pos is None:
            return None

        text = self._text
        length = len(text)
        start = self._pos
        while start < length and text[start] in delimiters:
            start += 1
        end = start
        while end < length and text[end] not in delimiters:
            end += 1

        if end == start:
            self._pos = None
            return None

        self._pos = end + 1 if end < length else None
        return text[start:end]


def next_token(cursor: TokenCursor, delimiters: str) -> str | None:
    """Return the next token from cursor, or None once it is exhausted."""
    return cursor.next(delimiters)


def tokenize(text: str, delimiters: str = WHITESPACE) -> list[str]:
    """Split text into all of its non-empty tokens."""
    cursor = TokenCursor(text)
    tokens: list[str] = []
    while (token := cursor.next(delimiters)) is not None:
        tokens.append(token)
    return tokens


def _decode(raw: bytes | bytearray) -> str:
    return raw.decode("utf-8", errors="replace")


def iter_lines(
    stream: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_line_length: int = MAX_LINE_LENGTH,
    path: Path | str | None = None,
) -> Iterator[str]:
    """
    Yield the lines of a binary stream without their trailing newline.

    A non-empty partial line at end of stream is yielded last. Lines longer
    than max_line_length raise ParseError instead of being truncated.

    Args:
        stream: Readable binary stream, already open.
        chunk_size: Bytes requested per read call.
        max_line_length: Longest line accepted, in bytes.
        path: Path reported in errors.
    """
    pending = bytearray()
    while True:
        try:
            chunk = stream.read(chunk_size)
        except OSError as exc:
            raise ReadError(f"read failed: {exc.strerror or exc}", path) from exc
        if not chunk:
            break

        pending += chunk
        start = 0
        while (newline := pending.find(b"\n", start)) != -1:
            if newline - start > max_line_length:
                raise ParseError(f"line exceeds {max_line_length} bytes", path)
            yield _decode(pending[start:newline])
            start = newline + 1
        del pending[:start]

        if len(pending) > max_line_length:
            raise ParseError(f"line exceeds {max_line_length} bytes", path)

    if pending:
        yield _decode(pending)


@contextmanager
def open_source(procfs_root: Path | str, relative: str) -> Iterator[BinaryIO]:
    """
    Open a pseudo-file below the procfs root for a single streamed read.

    The handle is closed on every exit path, including parse failures raised
    by the caller inside the with block.
    """
    path = Path(procfs_root, relative)
    try:
        stream = open(path, "rb", buffering=0)
    except OSError as exc:
        raise OpenError(f"cannot open: {exc.strerror or exc}", path) from exc
    with stream:
        yield stream


def read_first_line(procfs_root: Path | str, relative: str) -> str:
    """Return the first line of a pseudo-file."""
    path = Path(procfs_root, relative)
    with open_source(procfs_root, relative) as stream:
        for line in iter_lines(stream, path=path):
            return line
    raise ParseError("pseudo-file is empty", path)
