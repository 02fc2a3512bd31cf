import dataclasses
import enum
import hashlib
import re
from typing import Iterator, List, Optional, Tuple

from embed_header.errors import EncodingError, InvalidArgumentsError


BANNER = "// Generated by embed-header. Do not edit."
INDENT = "    "

IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
# reserved for the implementation: any "__", or a leading "_" + uppercase letter
RESERVED_RE = re.compile(r"__|^_[A-Z]")

CXX_KEYWORDS = frozenset(
    """
    alignas alignof and and_eq asm auto bitand bitor bool break case catch char char8_t
    char16_t char32_t class compl concept const consteval constexpr constinit const_cast
    continue co_await co_return co_yield decltype default delete do double dynamic_cast
    else enum explicit export extern false float for friend goto if inline int long
    mutable namespace new noexcept not not_eq nullptr operator or or_eq private protected
    public register reinterpret_cast requires return short signed sizeof static
    static_assert static_cast struct switch template this thread_local throw true try
    typedef typeid typename union unsigned using virtual void volatile wchar_t while xor
    xor_eq
    """.split()
)

# bytes that stand for themselves inside a string literal; '?' is excluded (trigraphs)
_PRINTABLE = frozenset(range(0x20, 0x7F)) - {ord("\\"), ord('"'), ord("?")}
_SHORT_ESCAPES = {
    ord("\\"): "\\\\",
    ord('"'): '\\"',
    ord("?"): "\\?",
    ord("\n"): "\\n",
    ord("\r"): "\\r",
    ord("\t"): "\\t",
}


class Mode(enum.Enum):
    BINARY = "binary"
    TEXT = "text"


class ArrayStyle(enum.Enum):
    ARRAY = "array"
    STRING_VIEW = "string-view"
    C_STRING = "c-string"

    @property
    def is_string(self) -> bool:
        return self is not ArrayStyle.ARRAY


def is_valid_identifier(name: str) -> bool:
    return bool(IDENT_RE.match(name)) and name not in CXX_KEYWORDS and not RESERVED_RE.search(name)


@dataclasses.dataclass(frozen=True)
class RenderOptions:
    symbol_name: str
    mode: Mode = Mode.BINARY
    line_width: int = 12
    array_style: ArrayStyle = ArrayStyle.ARRAY
    namespace: Optional[str] = None

    def __post_init__(self):
        if not is_valid_identifier(self.symbol_name):
            raise InvalidArgumentsError(f"Invalid C++ identifier for symbol name: {self.symbol_name!r}")
        if self.namespace is not None:
            parts = self.namespace.split("::")
            if not all(is_valid_identifier(p) for p in parts):
                raise InvalidArgumentsError(f"Invalid C++ namespace: {self.namespace!r}")
        if isinstance(self.line_width, bool) or not isinstance(self.line_width, int) or self.line_width < 1:
            raise InvalidArgumentsError(f"Line width must be a positive integer, got: {self.line_width!r}")
        if not isinstance(self.mode, Mode):
            raise InvalidArgumentsError(f"Unknown mode: {self.mode!r}")
        if not isinstance(self.array_style, ArrayStyle):
            raise InvalidArgumentsError(f"Unknown array style: {self.array_style!r}")


@dataclasses.dataclass(frozen=True)
class RenderedOutput:
    header: Tuple[str, ...]
    body: Tuple[str, ...]
    footer: Tuple[str, ...]

    @property
    def lines(self) -> Tuple[str, ...]:
        return self.header + self.body + self.footer

    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


def qualified_name(opts: RenderOptions) -> str:
    return f"{opts.namespace}::{opts.symbol_name}" if opts.namespace else opts.symbol_name


def include_guard(opts: RenderOptions) -> str:
    """Readable prefix plus a digest of the case-sensitive qualified name.

    The readable part alone is ambiguous ("a" + "b_c" vs "a::b" + "c", "foo" vs "FOO").
    """
    parts = ["EMBED"]
    if opts.namespace:
        parts.extend(opts.namespace.split("::"))
    parts.append(opts.symbol_name)
    digest = hashlib.sha1(qualified_name(opts).encode("ascii"), usedforsecurity=False).hexdigest()[:8]
    parts.append(digest)
    parts.append("HPP")
    return "_".join(p.strip("_").upper() for p in parts)


def escape_byte(b: int) -> str:
    if b in _PRINTABLE:
        return chr(b)
    short = _SHORT_ESCAPES.get(b)
    if short is not None:
        return short
    # always three digits, so a following digit can't extend the escape
    return f"\\{b:03o}"


def chunk(data: bytes, width: int, split_lines: bool = False) -> Iterator[bytes]:
    """Yield contiguous runs of at most `width` bytes, in order.

    With `split_lines`, a run also ends right after every newline byte.
    """
    start = 0
    n = len(data)
    while start < n:
        end = min(start + width, n)
        if split_lines:
            nl = data.find(b"\n", start, end)
            if nl != -1:
                end = nl + 1
        yield data[start:end]
        start = end


def _array_line(run: bytes) -> str:
    return INDENT + " ".join(f"0x{b:02x}," for b in run)


def _string_line(run: bytes) -> str:
    return INDENT + '"' + "".join(escape_byte(b) for b in run) + '"'


def _includes(style: ArrayStyle) -> List[str]:
    if style is ArrayStyle.ARRAY:
        return ["#include <array>", "#include <cstdint>"]
    if style is ArrayStyle.C_STRING:
        return ["#include <cstddef>"]
    return ["#include <string_view>"]


def render(data: bytes, opts: RenderOptions) -> RenderedOutput:
    if opts.mode is Mode.TEXT:
        try:
            data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(
                f"Input is not valid UTF-8 text (byte 0x{data[exc.start]:02x} at offset {exc.start}); "
                f"use binary mode to embed it"
            ) from exc

    name = opts.symbol_name
    size = len(data)
    style = opts.array_style
    guard = include_guard(opts)

    header = [BANNER, f"#ifndef {guard}", f"#define {guard}", ""]
    header.extend(_includes(style))
    header.append("")
    if opts.namespace:
        header.append(f"namespace {opts.namespace} {{")
        header.append("")

    split_lines = opts.mode is Mode.TEXT and style.is_string
    runs = chunk(data, opts.line_width, split_lines=split_lines)

    if style is ArrayStyle.ARRAY:
        header.append(f"constexpr std::array<std::uint8_t, {size}> {name}{{")
        body = [_array_line(run) for run in runs]
        footer = ["};"]
    else:
        array_name = name if style is ArrayStyle.C_STRING else f"{name}_data"
        header.append(f"constexpr char {array_name}[{size} + 1]{{")
        body = [_string_line(run) for run in runs] or [INDENT + '""']
        footer = ["};"]
        if style is ArrayStyle.C_STRING:
            footer.append(f"constexpr std::size_t {name}_len = {size};")
        else:
            footer.append(f"constexpr std::string_view {name}{{{array_name}, {size}}};")

    if opts.namespace:
        footer.append("")
        footer.append(f"}}  // namespace {opts.namespace}")
    footer.append("")
    footer.append(f"#endif  // {guard}")

    return RenderedOutput(header=tuple(header), body=tuple(body), footer=tuple(footer))
