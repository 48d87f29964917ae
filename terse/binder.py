"""
Terse argument binder: raw tokens + compiled schema → bound values.

Scope
- bind(schema, tokens, params=()) walks the tokens once, left to right, and returns a
  Bound(flags, params, missing) named tuple.
- Nothing here raises on user input: unknown flags, missing values and unparseable
  numbers all degrade into best-effort bound data. Required names that are still absent
  are reported through Bound.missing, the command layer decides how loud to be.

Token classes
- "--"                   passthrough; every later token goes verbatim to flags["--"].
- "--name[=value]"       long flag, resolved through the alias map.
- "-x", "-abc", "-ofile" short flag or bundle (see _short).
- "-", "-5", "-.5e3"     positional values (a lone dash and negative numbers).
- anything else          positional candidate.

Result shape
- flags: canonical name → coerced value, plus "_" (leftover positionals) and
  "--" (tokens after the separator).
- params: positional parameter name → coerced value.
- missing: required flag names, then required parameter names, still unbound after
  defaults were applied.
"""
import math
import re
from collections import deque
from typing import NamedTuple

from .grammar import OptionType, is_flag, is_long_flag
from .utils import Unset

_NUMBER = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


class Bound(NamedTuple):
    """
    result of one binding pass.
    """
    flags: dict
    params: dict
    missing: tuple


def _number(value, /):
    """
    int, else float, else the raw text (never raises).
    """
    try:
        return int(value)
    except ValueError:
        pass
    try:
        number = float(value)
    except ValueError:
        return value
    return number if math.isfinite(number) else value


def _coerce(type, value, /):
    match type:
        case OptionType.NUMBER:
            return _number(value)
        case OptionType.BOOLEAN:
            return value.lower() != "false"
        case OptionType.ARRAY:
            return [value]
    return value


def _is_value(token, type, /):
    """
    check if a token can be taken as the value of a flag of the given type.
    """
    if token == "--":
        return False
    if token == "-" or not is_flag(token):
        return True
    return type is OptionType.NUMBER and bool(_NUMBER.fullmatch(token))


def _assign(schema, name, inline, tokens, flags, /):
    """
    bind one canonical (or unknown literal) name.

    - inline: text after '=', or Unset when the token carried none.
    - tokens: the remaining token deque; values are consumed from its left end.
    """
    match type := schema.typeof(name):
        case OptionType.BOOLEAN:
            if inline is not Unset:
                flags[name] = inline.lower() != "false"
            elif tokens and tokens[0].lower() in ("true", "false"):
                flags[name] = tokens.popleft().lower() == "true"
            else:
                flags[name] = True

        case OptionType.ARRAY:
            # one value per occurrence; repeated occurrences accumulate
            if inline is Unset:
                if not tokens or not _is_value(tokens[0], type):
                    return
                inline = tokens.popleft()
            flags.setdefault(name, []).append(inline)

        case OptionType.STRING | OptionType.NUMBER:
            if inline is Unset:
                if not tokens or not _is_value(tokens[0], type):
                    return  # no value: the default applies later
                inline = tokens.popleft()
            flags[name] = _coerce(type, inline)

        case _:
            # unknown flags never consume the next token
            flags[name] = True if inline is Unset else inline


def _short(schema, body, tokens, flags, /):
    """
    bind a short flag body (the token without its leading '-').

    - the whole body names a declared flag or alias: bound like the long form.
    - otherwise every character is a flag of its own (-abc ≡ -a -b -c); a declared
      non-boolean character with characters after it takes them as its value
      (-ofile ≡ -o file), the last character may take '=value' or the next token.
    """
    name, separator, value = body.partition("=")
    inline = value if separator else Unset

    if name in schema:
        return _assign(schema, schema.resolve(name), inline, tokens, flags)

    for index, char in enumerate(name):
        canonical = schema.resolve(char)
        if index == len(name) - 1:
            return _assign(schema, canonical, inline, tokens, flags)
        type = schema.typeof(canonical)
        if type is not Unset and type is not OptionType.BOOLEAN:
            return _assign(schema, canonical, body[index + 1:], tokens, flags)
        _assign(schema, canonical, Unset, deque(), flags)


def bind(schema, tokens, params=(), /):
    """
    bind raw tokens against a compiled schema and positional parameter list.

    parameters
    - schema: Schema of the owning command.
    - tokens: iterable of raw strings (already split, no shell quoting here). the
      iterable is copied, never mutated.
    - params: tuple of positional Options (at most one variadic, last).

    returns
    - Bound(flags, params, missing). binding the same tokens against the same schema
      twice yields equal results (defaults are copied, never shared).
    """
    tokens = deque(tokens)
    flags = {"_": [], "--": []}
    candidates = deque()

    while tokens:
        token = tokens.popleft()

        if token == "--":
            flags["--"].extend(tokens)
            tokens.clear()
            break

        body = token[2:] if is_long_flag(token) else token[1:]
        if (
            not is_flag(token) or
            not body.partition("=")[0] or
            (_NUMBER.fullmatch(token) and body not in schema)
        ):
            candidates.append(token)
        elif is_long_flag(token):
            name, separator, value = body.partition("=")
            _assign(schema, schema.resolve(name), value if separator else Unset, tokens, flags)
        else:
            _short(schema, body, tokens, flags)

    bound = {}
    for param in params:
        if not candidates:
            break
        if param.variadic:
            # the variadic parameter is last and absorbs every remaining candidate
            bound[param.name] = list(candidates)
            candidates.clear()
        else:
            bound[param.name] = _coerce(param.type, candidates.popleft())
    flags["_"].extend(candidates)

    for name, value in schema.defaults_copy().items():
        flags.setdefault(name, value)
    for param in params:
        if param.name not in bound and param.default is not Unset:
            bound[param.name] = param.default

    missing = (
        *(name for name in schema.required if name not in flags),
        *(param.name for param in params if param.required and param.name not in bound),
    )
    return Bound(flags, bound, missing)


__all__ = (
    "Bound",
    "bind",
)
