"""Parser module for go-sortimports.

This module finds the grouped import declaration of a Go source file and
turns its interior into a list of ``Import`` records.
"""

from dataclasses import dataclass
import enum
import re
from typing import List, Optional, Tuple

from go_sortimports.errors import DanglingComment
from go_sortimports.errors import InvalidImportLine
from go_sortimports.errors import MalformedImportBlock
from go_sortimports.errors import UnquotableImportPath


@dataclass(frozen=True)
class Import:
    """A single import spec and the comments attached to it."""

    path: str
    alias: Optional[str] = None
    leading_comments: Tuple[str, ...] = ()
    trailing_comment: Optional[str] = None


@dataclass(frozen=True)
class ImportBlock:
    """A file split around the interior of its ``import ( ... )`` block.

    ``prefix`` ends with the opening parenthesis and ``suffix`` starts with
    the closing one, so ``prefix + body + suffix`` is the original text.
    """

    prefix: str
    body: str
    suffix: str
    lineno: int = 1

    def parse_imports(self) -> List[Import]:
        return parse_imports(self.body, self.lineno)

    def replace_body(self, body: str) -> str:
        return self.prefix + body + self.suffix


_IMPORT_START = re.compile(r"^import \(", re.MULTILINE)

# Inside a block a closing parenthesis only counts outside literals and comments.
_BLOCK_TOKEN = re.compile(r'"(?:[^"\\\n]|\\.)*"?|`[^`]*`?|//[^\n]*|\)')

_LINE_TOKEN = re.compile(r'"(?:[^"\\]|\\.)*"|`[^`]*`|//')


def locate_import_block(text: str) -> Optional[ImportBlock]:
    """Find the first grouped import declaration in ``text``.

    Returns None when the file has no ``import (`` line.

    Raises:
        MalformedImportBlock: The block is never closed.
    """
    start = _IMPORT_START.search(text)
    if start is None:
        return None
    body_start = start.end()
    for token in _BLOCK_TOKEN.finditer(text, body_start):
        if token.group() == ")":
            body_end = token.start()
            break
    else:
        lineno = text.count("\n", 0, start.start()) + 1
        raise MalformedImportBlock(f"line {lineno}: import block is not closed")
    return ImportBlock(
        prefix=text[:body_start],
        body=text[body_start:body_end],
        suffix=text[body_end:],
        lineno=text.count("\n", 0, body_start) + 1,
    )


class _State(enum.Enum):
    BETWEEN_IMPORTS = "between imports"
    ACCUMULATING_COMMENTS = "accumulating comments"


def parse_imports(body: str, first_lineno: int = 1) -> List[Import]:
    """Parse the interior of an import block.

    Comment lines are attached to the import that follows them; blank lines
    are dropped.

    Args:
        body: Text between the parentheses of the block.
        first_lineno: File line number of the first line of ``body``, used
            in error messages.

    Returns:
        The imports in source order.

    Raises:
        DanglingComment: Comments are not followed by an import.
        InvalidImportLine: A line has no fields or more than two.
        UnquotableImportPath: The path is not a valid string literal.
    """
    imports: List[Import] = []
    state = _State.BETWEEN_IMPORTS
    comments: List[str] = []
    comments_lineno = first_lineno

    for lineno, line in enumerate(body.split("\n"), first_lineno):
        text = line.strip()
        if not text:
            continue
        if text.startswith("//"):
            if state is _State.BETWEEN_IMPORTS:
                comments_lineno = lineno
                state = _State.ACCUMULATING_COMMENTS
            comments.append(text)
            continue
        imports.append(_parse_import_line(text, lineno, tuple(comments)))
        comments = []
        state = _State.BETWEEN_IMPORTS

    if state is _State.ACCUMULATING_COMMENTS:
        raise DanglingComment(f"line {comments_lineno}: found comments not attached to import")
    return imports


def _parse_import_line(text: str, lineno: int, leading_comments: Tuple[str, ...]) -> Import:
    code, trailing_comment = split_comment(text)
    fields = code.split()
    if not fields or len(fields) > 2:
        raise InvalidImportLine(f"line {lineno}: invalid import line {text!r}")
    try:
        path = unquote(fields[-1])
    except ValueError:
        raise UnquotableImportPath(f"line {lineno}: cannot parse {text!r} as string literal") from None
    return Import(
        path=path,
        alias=fields[0] if len(fields) == 2 else None,
        leading_comments=leading_comments,
        trailing_comment=trailing_comment,
    )


def split_comment(text: str) -> Tuple[str, Optional[str]]:
    """Split a line into its code and a trailing ``//`` comment, if any."""
    for token in _LINE_TOKEN.finditer(text):
        if token.group() == "//":
            return text[:token.start()], text[token.start():].rstrip()
    return text, None


_ESCAPE = re.compile(
    r'\\(?:(?P<char>[abfnrtv\\"])'
    r"|x(?P<hex>[0-9a-fA-F]{2})"
    r"|(?P<oct>[0-7]{3})"
    r"|u(?P<u4>[0-9a-fA-F]{4})"
    r"|U(?P<u8>[0-9a-fA-F]{8}))"
)

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
}

_QUOTE_ESCAPES = {value: "\\" + key for key, value in _SIMPLE_ESCAPES.items()}


def unquote(literal: str) -> str:
    """Return the value of a Go string literal.

    Both interpreted (``"..."``) and raw (backquoted) literals are accepted.
    ``\\x`` and octal escapes are bytes; the result is their UTF-8 decoding,
    with bytes that are not valid UTF-8 kept as surrogate escapes so that
    ``quote`` writes them back unchanged.

    Raises:
        ValueError: ``literal`` is not a valid string literal.
    """
    if len(literal) < 2 or literal[0] != literal[-1] or literal[0] not in "\"`":
        raise ValueError(f"invalid string literal: {literal!r}")
    body = literal[1:-1]
    if literal[0] == "`":
        if "`" in body:
            raise ValueError(f"invalid string literal: {literal!r}")
        return body.replace("\r", "")

    out = bytearray()
    pos = 0
    while pos < len(body):
        backslash = body.find("\\", pos)
        chunk = body[pos:] if backslash == -1 else body[pos:backslash]
        if '"' in chunk or "\n" in chunk:
            raise ValueError(f"invalid string literal: {literal!r}")
        out += chunk.encode("utf-8", "surrogateescape")
        if backslash == -1:
            break
        match = _ESCAPE.match(body, backslash)
        if match is None:
            raise ValueError(f"invalid escape in string literal: {literal!r}")
        out += _decode_escape(match)
        pos = match.end()
    return out.decode("utf-8", "surrogateescape")


def _decode_escape(match: "re.Match[str]") -> bytes:
    if match.group("char"):
        return _SIMPLE_ESCAPES[match.group("char")].encode("ascii")
    if match.group("hex"):
        return bytes([int(match.group("hex"), 16)])
    if match.group("oct"):
        value = int(match.group("oct"), 8)
        if value > 0xFF:
            raise ValueError(f"octal escape out of range: {match.group()!r}")
        return bytes([value])
    value = int(match.group("u4") or match.group("u8"), 16)
    if value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
        raise ValueError(f"invalid unicode escape: {match.group()!r}")
    return chr(value).encode("utf-8")


def path_bytes(value: str) -> bytes:
    """Return the bytes of an unquoted path, undoing surrogate escapes."""
    return value.encode("utf-8", "surrogateescape")


def quote(value: str) -> str:
    """Return ``value`` as a double-quoted Go string literal.

    Bytes that are not valid UTF-8 come out as ``\\x`` escapes.
    """
    out = ['"']
    for char in value:
        code = ord(char)
        if char in _QUOTE_ESCAPES:
            out.append(_QUOTE_ESCAPES[char])
        elif 0xDC80 <= code <= 0xDCFF:
            out.append(f"\\x{code - 0xDC00:02x}")
        elif char.isprintable():
            out.append(char)
        elif code < 0x80:
            out.append(f"\\x{code:02x}")
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)
