"""Parser for the static metric definition language.

The language declares label enums and metric structs::

    pub label_enum Methods { post, get: "get_name" }

    pub struct HttpRequests: Counter {
        "method" => Methods,
        "product" => { foo, bar: "bar_name" },
    }
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Mapping, Union


class ParseError(ValueError):
    """Raised when a definition cannot be parsed or resolved."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        if line is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


_KEYWORDS = frozenset(
    """
    _ as break const continue crate else enum extern false fn for if impl in let
    loop match mod move mut pub ref return self Self static struct super trait
    true type unsafe use where while async await dyn abstract become box do
    final macro override priv typeof unsized virtual yield try
    """.split()
)

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<line_comment>//[^\n]*)
    |(?P<block_comment>/\*.*?\*/)
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<string>"(?:[^"\\]|\\.)*")
    |(?P<punct>=>|::|[{}(),:])
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPE_RE = re.compile(r"\\(x[0-7][0-9a-fA-F]|u\{[0-9a-fA-F_]{1,8}\}|\n\s*|.)", re.DOTALL)
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", "0": "\0", "'": "'", '"': '"'}


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    pos: int


def _line_col(text: str, pos: int) -> tuple[int, int]:
    line = text.count("\n", 0, pos) + 1
    column = pos - (text.rfind("\n", 0, pos) + 1) + 1
    return line, column


def _unescape(body: str, text: str, pos: int) -> str:
    def replace(match: re.Match[str]) -> str:
        esc = match.group(1)
        if esc in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[esc]
        if esc.startswith("\n"):
            return ""
        if esc.startswith("x"):
            return chr(int(esc[1:], 16))
        if esc.startswith("u{"):
            code = int(esc[2:-1].replace("_", ""), 16)
            if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                raise ParseError(f"invalid unicode escape \\{esc}", *_line_col(text, pos))
            return chr(code)
        raise ParseError(f"unknown character escape \\{esc}", *_line_col(text, pos))

    return _ESCAPE_RE.sub(replace, body)


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            if text.startswith('"', pos):
                raise ParseError("unterminated string literal", *_line_col(text, pos))
            raise ParseError(f"unexpected character {text[pos]!r}", *_line_col(text, pos))
        kind = match.lastgroup
        raw = match.group()
        if kind == "string":
            tokens.append(_Token("string", _unescape(raw[1:-1], text, pos), pos))
        elif kind in ("ident", "punct"):
            tokens.append(_Token(kind, raw, pos))
        pos = match.end()
    return tokens


@dataclass(frozen=True)
class MetricValueDef:
    """A label value: the field ``name`` and the label ``value`` it stands for."""

    name: str
    value: str


@dataclass(frozen=True)
class MetricValueDefList:
    """An ordered list of label value definitions."""

    defs: tuple[MetricValueDef, ...] = ()

    def __iter__(self) -> Iterator[MetricValueDef]:
        return iter(self.defs)

    def __len__(self) -> int:
        return len(self.defs)

    def names(self) -> list[str]:
        """Return the field names in definition order."""
        return [d.name for d in self.defs]

    def values(self) -> list[str]:
        """Return the label values in definition order."""
        return [d.value for d in self.defs]


@dataclass(frozen=True)
class MetricEnumDef:
    """A ``label_enum`` definition."""

    visibility: str
    enum_name: str
    definitions: MetricValueDefList

    @property
    def is_public(self) -> bool:
        return self.visibility == "pub"


@dataclass(frozen=True)
class MetricLabelDef:
    """A label of a metric, with inline values or a reference to a label enum."""

    label_key: str
    values: MetricValueDefList | None = None
    enum_ref: str | None = None

    def __post_init__(self) -> None:
        if (self.values is None) == (self.enum_ref is None):
            raise ValueError("a label needs either inline values or an enum reference")

    def value_def_list(self, enum_definitions: Mapping[str, MetricEnumDef]) -> MetricValueDefList:
        """Return the values, looking them up in ``enum_definitions`` for enum labels."""
        if self.values is not None:
            return self.values
        try:
            return enum_definitions[self.enum_ref].definitions
        except KeyError:
            raise ParseError(f"Label enum `{self.enum_ref}` is undefined.") from None

    def enum_name(self) -> str | None:
        """Return the referenced enum name, or None for inline values."""
        return self.enum_ref


@dataclass(frozen=True)
class MetricDef:
    """A metric struct definition."""

    visibility: str
    struct_name: str
    metric_type: str
    labels: tuple[MetricLabelDef, ...]

    @property
    def is_public(self) -> bool:
        return self.visibility == "pub"


MacroItem = Union[MetricDef, MetricEnumDef]


@dataclass(frozen=True)
class StaticMetricMacroBody:
    """All items of a definition, in source order."""

    items: tuple[MacroItem, ...]


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.index = 0

    def _error(self, message: str) -> ParseError:
        if self.index < len(self.tokens):
            return ParseError(message, *_line_col(self.text, self.tokens[self.index].pos))
        return ParseError(f"{message}, found end of input")

    def _peek(self, offset: int = 0) -> _Token | None:
        i = self.index + offset
        return self.tokens[i] if i < len(self.tokens) else None

    def _is(self, kind: str, text: str | None = None, offset: int = 0) -> bool:
        tok = self._peek(offset)
        return tok is not None and tok.kind == kind and (text is None or tok.text == text)

    def _next(self) -> _Token:
        tok = self._peek()
        if tok is None:
            raise self._error("unexpected end of input")
        self.index += 1
        return tok

    def _punct(self, text: str) -> None:
        if not self._is("punct", text):
            raise self._error(f"expected `{text}`")
        self.index += 1

    def _ident(self) -> str:
        if not self._is("ident") or self._peek().text in _KEYWORDS:
            raise self._error("expected identifier")
        return self._next().text

    def _string(self) -> str:
        if not self._is("string"):
            raise self._error("expected string literal")
        return self._next().text

    def _comma_list(self, parse_one) -> list:
        items = []
        while not self._is("punct", "}"):
            items.append(parse_one())
            if self._is("punct", ","):
                self.index += 1
            elif not self._is("punct", "}"):
                raise self._error("expected `,`")
        return items

    def _visibility(self) -> str:
        if not self._is("ident", "pub"):
            return ""
        self.index += 1
        if not self._is("punct", "("):
            return "pub"
        self.index += 1
        parts = []
        while not self._is("punct", ")"):
            parts.append(self._next().text)
        self.index += 1
        if not parts:
            raise self._error("expected visibility restriction")
        return f"pub({' '.join(parts)})"

    def _value_def(self) -> MetricValueDef:
        name = self._ident()
        if self._is("punct", ":"):
            self.index += 1
            return MetricValueDef(name, self._string())
        return MetricValueDef(name, name)

    def _value_def_list(self) -> MetricValueDefList:
        self._punct("{")
        defs = self._comma_list(self._value_def)
        self._punct("}")
        return MetricValueDefList(tuple(defs))

    def _label_def(self) -> MetricLabelDef:
        key = self._string()
        self._punct("=>")
        if self._is("punct", "{"):
            return MetricLabelDef(key, values=self._value_def_list())
        return MetricLabelDef(key, enum_ref=self._ident())

    def _item(self) -> MacroItem:
        visibility = self._visibility()
        if self._is("ident", "struct"):
            self.index += 1
            name = self._ident()
            self._punct(":")
            metric_type = self._ident()
            self._punct("{")
            labels = self._comma_list(self._label_def)
            self._punct("}")
            return MetricDef(visibility, name, metric_type, tuple(labels))
        if not self._is("ident", "label_enum"):
            raise self._error("Expected `label_enum`")
        self.index += 1
        name = self._ident()
        return MetricEnumDef(visibility, name, self._value_def_list())

    def parse(self) -> StaticMetricMacroBody:
        items = []
        while self._peek() is not None:
            items.append(self._item())
        return StaticMetricMacroBody(tuple(items))


def parse_macro_body(text: str) -> StaticMetricMacroBody:
    """Parse label enum and metric struct definitions from ``text``."""
    return _Parser(text).parse()