r"""
Terse sigil grammar: pure recognizers and extractors for the compact syntax.

Overview
- Token shape
  • is_flag("-x") / is_short_flag("-x") / is_long_flag("--name")
- Definition pieces
  • extract("name <hint>") -> "hint"  (first balanced pair, any boundary symbols)
  • sigil("!verbose") -> OptionType.BOOLEAN  ('-' number, '!' boolean, '.' array)
  • clean("!mean! <n|m> | boolean") -> "mean!"  (required marker is kept)
  • split("t,ta, target <a,b>") -> ["t", "ta", "target <a,b>"]
  • parse_command("i,in, install [pkg!, ...files] <lodash>")
      -> ("install", ("i", "in"), "lodash", "pkg!, ...files")

Scanner
- Every function above is built on a single left-to-right scan (_tokenize) with
  three explicit states:
  • outside: commas separate segments, '|' starts the type suffix.
  • inside an angle hint  <...>: everything is hint content (commas, pipes, brackets).
  • inside a square group [...]: everything is group content (commas, pipes, hints).
- Brackets nest by kind, an opener without its closer is plain text.
- Because hint and group content is consumed as a single token, a comma in a hint
  or a '|' in a group can never be mistaken for a separator.

Nothing here holds state or raises definition errors: the schema compiler decides
what a malformed piece means.
"""
import functools
from enum import Enum, StrEnum, auto
from typing import NamedTuple

from .utils import Unset


class OptionType(StrEnum):
    """
    value type of a flag or positional parameter.
    """
    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    ARRAY = "array"


class _Kind(Enum):
    TEXT = auto()
    HINT = auto()
    GROUP = auto()
    COMMA = auto()
    PIPE = auto()


class _Token(NamedTuple):
    kind: _Kind
    text: str  # content (without boundary symbols for hints/groups)
    raw: str  # exact source slice


_BOUNDARIES = {"<": ">", "[": "]"}


def is_flag(token, /):
    """
    check if a token is a flag (e.g., `-f`, `--option`, `--option=value`).
    """
    return token[:1] == "-"


def is_short_flag(token, /):
    """
    check if a token is a short flag (e.g., `-f`, `-abc`).
    """
    return is_flag(token) and token[1:2] != "-"


def is_long_flag(token, /):
    """
    check if a token is a long flag (e.g., `--option`, `--option=value`).
    """
    return is_flag(token) and token[1:2] == "-"


def _closing(source, start, opener, closer, /):
    """
    index of the closer balancing source[start] (an opener), or -1 when unbalanced.
    """
    depth = 0
    for index in range(start, len(source)):
        if source[index] == opener:
            depth += 1
        elif source[index] == closer:
            depth -= 1
            if not depth:
                return index
    return -1


@functools.cache
def _tokenize(source, /):
    """
    scan a definition into top-level tokens.

    returns a tuple of _Token; TEXT tokens hold the text between structural
    characters, HINT/GROUP tokens hold bracket content, COMMA/PIPE are separators.
    """
    tokens = []
    buffer = []
    index = 0

    def flush():
        if buffer:
            tokens.append(_Token(_Kind.TEXT, text := "".join(buffer), text))
            buffer.clear()

    while index < len(source):
        char = source[index]
        if char in _BOUNDARIES:
            close = _closing(source, index, char, _BOUNDARIES[char])
            if close < 0:
                buffer.append(char)
            else:
                flush()
                kind = _Kind.HINT if char == "<" else _Kind.GROUP
                tokens.append(_Token(kind, source[index + 1:close], source[index:close + 1]))
                index = close
        elif char == ",":
            flush()
            tokens.append(_Token(_Kind.COMMA, char, char))
        elif char == "|":
            flush()
            tokens.append(_Token(_Kind.PIPE, char, char))
        else:
            buffer.append(char)
        index += 1

    flush()
    return tuple(tokens)


def _segments(source, /):
    """
    group the top-level tokens of source into comma separated segments.
    """
    segments = [[]]
    for token in _tokenize(source):
        if token.kind is _Kind.COMMA:
            segments.append([])
        else:
            segments[-1].append(token)
    return segments


def _head(tokens, /):
    """
    raw text of the tokens before the first pipe, without hints.
    """
    parts = []
    for token in tokens:
        if token.kind is _Kind.PIPE:
            break
        if token.kind is not _Kind.HINT:
            parts.append(token.raw)
    return "".join(parts)


def _suffix(tokens, /):
    """
    raw text after the first top-level pipe (the type annotation), or Unset.
    """
    for index, token in enumerate(tokens):
        if token.kind is _Kind.PIPE:
            return "".join(token.raw for token in tokens[index + 1:] if token.kind is not _Kind.HINT).strip()
    return Unset


def extract(source, /, symbols=("<", ">")):
    """
    return the text strictly between the first opening symbol and its matching
    closing symbol, or an empty string when absent.

    examples
    - extract("name <file|dir>") -> "file|dir"
    - extract("install [pkg!]", ("[", "]")) -> "pkg!"
    """
    opener, closer = symbols
    if (start := source.find(opener)) < 0:
        return ""
    if (close := _closing(source, start, opener, closer)) < 0:
        return ""
    return source[start + 1:close]


def suffix(source, /):
    """
    return the explicit `|type` annotation of a single definition segment, or Unset.

    pipes inside hints and square groups are content, not separators.
    """
    return _suffix(_tokenize(source))


def sigil(source, /):
    """
    map the leading sigil of a definition segment to its OptionType.

    the hint is removed and whitespace trimmed before looking at the first
    character: '-' number, '!' boolean, '.' array, anything else string.
    """
    match _head(_tokenize(source)).strip()[:1]:
        case "-":
            return OptionType.NUMBER
        case "!":
            return OptionType.BOOLEAN
        case ".":
            return OptionType.ARRAY
        case _:
            return OptionType.STRING


def clean(source, /):
    """
    reduce one definition segment to its bare name.

    steps (order matters: the hint may contain '|')
    - drop the <hint>.
    - drop the |type suffix and everything after it (pipes in [...] are kept).
    - drop one leading sigil: '!', '-', or a run of '.' (e.g. '...').
    - trim whitespace.

    the required marker ('!' at the end) is kept; the compiler owns its meaning.
    """
    name = _head(_tokenize(source)).strip()
    if name.startswith("."):
        name = name.lstrip(".")
    elif name[:1] in ("!", "-"):
        name = name[1:]
    return name.strip()


def split(source, /):
    """
    split a definition on the commas that are outside <...> and [...].

    every piece is trimmed; empty pieces are kept so callers can decide on them.
    """
    return ["".join(token.raw for token in segment).strip() for segment in _segments(source)]


def parse_command(definition, /):
    """
    dissect a command definition into (name, aliases, hint, group).

    - the first square group (the positional list) is removed before the alias
      split and returned as its content, or Unset when there is none.
    - the last segment is the command name (hint removed), the rest are aliases.
    - names are trimmed; empty aliases are dropped.

    example
    - "i,in, install [pkg!, ...files] <lodash>"
      -> ("install", ("i", "in"), "lodash", "pkg!, ...files")
    """
    group = Unset
    kept = []
    for token in _tokenize(definition):
        if token.kind is _Kind.GROUP and group is Unset:
            group = token.text
            continue
        kept.append(token.raw)

    *aliases, canonical = split("".join(kept))
    return (
        _head(_tokenize(canonical)).strip(),
        tuple(alias for alias in map(lambda x: _head(_tokenize(x)).strip(), aliases) if alias),
        extract(canonical),
        group,
    )


__all__ = (
    "OptionType",
    "is_flag",
    "is_short_flag",
    "is_long_flag",
    "extract",
    "suffix",
    "sigil",
    "clean",
    "split",
    "parse_command",
)
