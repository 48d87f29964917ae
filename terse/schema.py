r"""
Terse option schema: descriptors and the compact-syntax compiler.

Overview
- Option: one logical flag or positional parameter (canonical name, aliases, type,
  required marker, default, description, hint, raw label).
- Schema: the compiled flag schema of one command. A fixed record with one explicit
  sequence per type (string_names, boolean_names, number_names, array_names), plus
  alias → canonical, description, hint and default mappings and the required list.
- compile_entry(entry): one [flags, descr(, default)] entry → Option.
- compile_schema(entries): a sequence of entries → Schema.
- compile_params(source): "[pkg!, ...files]" (or entries) → tuple of positional Options.

Definition grammar
    alias1,alias2,...,canonical[<hint>][|type]
- leading sigils on the canonical name encode the type: '!' boolean, '-' number,
  '...' array, nothing string. An explicit |string|boolean|number|array wins.
- a trailing '!' on the bare name marks it required.
- colour codes are stripped before parsing; the raw text is kept as the label.

Errors
- every problem is a DefinitionError subclass raised right here, at compile time:
  • MalformedDefinitionError: entry shape, non-string flags, aliases on positionals.
  • MissingNameError: no canonical name left after cleaning.
  • UnknownTypeError: a |type suffix outside the four supported types.
  • MisplacedVariadicError: a variadic positional that is not the last one.
  • DuplicatedNameError: a name or alias already taken in the schema/list.

Quick example:
    >>> schema = compile_schema([
    ...     ["r, !recursive", "copy directories recursively", False],
    ...     ["d, depth <levels>|number", "maximum depth"],
    ... ])
    >>> schema.resolve("r"), schema.typeof("depth")
    ('recursive', <OptionType.NUMBER: 'number'>)
"""
import copy
import functools
import operator
import re
from collections.abc import Sequence

from .faults import *
from .grammar import OptionType, clean, extract, sigil, split, suffix
from .utils import *


class SchemaType(type):
    """
    Metaclass giving schema records a stable, introspectable shape.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Option(metaclass=SchemaType):
    """
    Descriptor of one flag or positional parameter.

    Properties
    - name: canonical name (what the binder binds values under).
    - aliases: alternate names, in declaration order, canonical excluded.
    - type: OptionType (string by default).
    - required: True when the definition ended with '!'.
    - default: Unset when no default was declared.
    - descr / hint: help text; label: raw definition with colours preserved.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "type",
        "required",
        "descr",
        "hint",
        "label",
    )
    __displayable__ = (
        "name",
        "aliases",
        "type",
        "required",
        "default",
    )

    def __new__(
            cls,
            name,
            /,
            type=OptionType.STRING,
            aliases=(),
            required=False,
            default=Unset,
            descr="",
            hint="",
            label=Unset,
    ):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} name must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} name cannot be empty")
        if not isinstance(descr, str):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")

        self = super().__new__(cls)
        self._name = name
        self._type = OptionType(type)
        self._aliases = tuple(aliases)
        self._required = bool(required)
        self._default = default
        self._descr = descr
        self._hint = hint
        self._label = coalesce(label, name)
        return self

    @property
    def default(self):
        """
        a fresh copy of the declared default (Unset when none was declared).
        """
        if self._default is Unset:
            return Unset
        return copy.deepcopy(self._default)

    @property
    def names(self):
        """
        canonical name followed by every alias.
        """
        return (self._name, *self._aliases)

    @property
    def variadic(self):
        """
        True for array-typed descriptors (they absorb many tokens).
        """
        return self._type is OptionType.ARRAY


class Schema(metaclass=SchemaType):
    """
    Compiled flag schema of one command.

    Invariants
    - each canonical name lives in exactly one of the four type buckets.
    - each alias maps to exactly one canonical name.
    - canonical names and aliases never collide (DuplicatedNameError otherwise).

    The public properties are copies; the binder goes through resolve()/typeof().
    """

    __introspectable__ = (
        "string_names",
        "boolean_names",
        "number_names",
        "array_names",
        "aliases",
        "descrs",
        "hints",
        "defaults",
        "required",
        "options",
    )
    __displayable__ = (
        "string_names",
        "boolean_names",
        "number_names",
        "array_names",
        "aliases",
        "defaults",
        "required",
    )

    def __new__(cls, entries=(), /):
        self = super().__new__(cls)
        self._string_names = []
        self._boolean_names = []
        self._number_names = []
        self._array_names = []
        self._aliases = {}
        self._descrs = {}
        self._hints = {}
        self._defaults = {}
        self._required = []
        self._options = {}
        self.extend(entries)
        return self

    def _bucket(self, type, /):
        match type:
            case OptionType.STRING:
                return self._string_names
            case OptionType.BOOLEAN:
                return self._boolean_names
            case OptionType.NUMBER:
                return self._number_names
            case OptionType.ARRAY:
                return self._array_names
        raise TypeError(f"{type!r} is not an option type")

    def register(self, option, /):
        """
        add a compiled Option to the schema, enforcing name uniqueness.
        """
        if not isinstance(option, Option):
            raise TypeError(f"{type(self).__typename__} can only register options")

        for name in option.names:
            if name in self._options or name in self._aliases:
                raise DuplicatedNameError(
                    "flag name %r in %r is already in use" % (name, option.label),
                    title="duplicated name",
                    code=FaultCode.DUPLICATED_NAME,
                    hint="rename the flag or drop the repeated alias",
                    definition=option.label,
                    docs=getdoc(FaultCode.DUPLICATED_NAME),
                )

        self._bucket(option.type).append(option.name)
        self._aliases.update(dict.fromkeys(option.aliases, option.name))
        self._descrs[option.name] = option.descr
        self._hints[option.name] = option.hint
        if option.default is not Unset:
            self._defaults[option.name] = option.default
        if option.required:
            self._required.append(option.name)
        self._options[option.name] = option
        return option

    def extend(self, entries, /):
        """
        compile and register every entry; returns the schema for chaining.
        """
        if isinstance(entries, str) or not isinstance(entries, Sequence):
            raise MalformedDefinitionError(
                "flag entries must be a sequence of [flags, descr(, default)] entries",
                title="malformed definition",
                code=FaultCode.MALFORMED_DEFINITION,
                hint="wrap each flag definition in its own list, e.g. [['r, !recursive', 'recurse']]",
                definition=entries,
                docs=getdoc(FaultCode.MALFORMED_DEFINITION),
            )
        for entry in entries:
            self.register(compile_entry(entry))
        return self

    def resolve(self, name, /):
        """
        canonical name for `name` (an alias or a canonical name); unknown names map to themselves.
        """
        return self._aliases.get(name, name)

    def typeof(self, name, /):
        """
        OptionType of a canonical name, or Unset when the name is not declared.
        """
        try:
            return self._options[name].type
        except KeyError:
            return Unset

    def defaults_copy(self):
        """
        fresh copies of the declared defaults (lists are never shared with results).
        """
        return copy.deepcopy(self._defaults)

    def __contains__(self, name, /):
        return name in self._options or name in self._aliases

    def __iter__(self):
        return iter(tuple(self._options.values()))

    def __len__(self):
        return len(self._options)


def _unpack(entry, /):
    """
    normalize an entry into (flags, descr, default), validating its shape.
    """
    if isinstance(entry, str):
        entry = (entry,)
    if not isinstance(entry, Sequence) or not 1 <= len(entry) <= 3:
        raise MalformedDefinitionError(
            "definition entry %r must be [flags], [flags, descr] or [flags, descr, default]" % (entry,),
            title="malformed definition",
            code=FaultCode.MALFORMED_DEFINITION,
            hint="use a list such as ['v, !verbose', 'print more details', False]",
            definition=entry,
            docs=getdoc(FaultCode.MALFORMED_DEFINITION),
        )
    flags = entry[0]
    descr = entry[1] if len(entry) > 1 else ""
    default = entry[2] if len(entry) > 2 else Unset

    if not isinstance(flags, str):
        raise MalformedDefinitionError(
            "definition %r is not a string" % (flags,),
            title="malformed definition",
            code=FaultCode.MALFORMED_DEFINITION,
            hint="write the flags as a compact string, e.g. 'o, output <file>'",
            definition=flags,
            docs=getdoc(FaultCode.MALFORMED_DEFINITION),
        )
    if descr is None:
        descr = ""
    elif not isinstance(descr, str):
        raise MalformedDefinitionError(
            "description of %r must be a string" % flags,
            title="malformed definition",
            code=FaultCode.MALFORMED_DEFINITION,
            hint="pass the description as the second item of the entry",
            definition=flags,
            docs=getdoc(FaultCode.MALFORMED_DEFINITION),
        )
    return flags, descr, default


def _dissect(segment, definition, /):
    """
    compile one canonical segment into (name, type, required, hint).
    """
    type = sigil(segment)
    if (annotation := suffix(segment)) is not Unset:
        try:
            type = OptionType(annotation.lower())
        except ValueError:
            raise UnknownTypeError(
                "unknown type %r in %r" % (annotation, definition),
                title="unknown type",
                code=FaultCode.UNKNOWN_TYPE,
                hint="use one of %s" % ", ".join(map(repr, map(str, OptionType))),
                definition=definition,
                docs=getdoc(FaultCode.UNKNOWN_TYPE),
            ) from None

    name = clean(segment)
    if required := name.endswith("!"):
        name = name[:-1].strip()
    if not name:
        raise MissingNameError(
            "definition %r has no name" % definition,
            title="missing name",
            code=FaultCode.MISSING_NAME,
            hint="put the canonical name last, e.g. 'v, !verbose'",
            definition=definition,
            docs=getdoc(FaultCode.MISSING_NAME),
        )
    return name, type, required, extract(segment)


def compile_entry(entry, /):
    """
    compile one [flags, descr(, default)] entry into an Option.

    the last comma separated segment (commas inside <...> do not count) is the
    canonical definition; every earlier segment is an alias.
    """
    flags, descr, default = _unpack(entry)

    *aliases, canonical = split(unstyle(flags))
    name, type, required, hint = _dissect(canonical, flags)

    names = []
    for alias in map(clean, aliases):
        if alias and alias != name and alias not in names:
            names.append(alias)

    return Option(
        name,
        type=type,
        aliases=names,
        required=required,
        default=default,
        descr=descr,
        hint=hint,
        label=flags,
    )


def compile_schema(entries=(), /):
    """
    compile a sequence of flag entries into a new Schema.
    """
    return Schema(entries)


def compile_params(source, /):
    """
    compile a positional ("default command") parameter list.

    source
    - str: "[pkg!, ...files]" (outer brackets optional), comma separated entries.
    - Sequence of entries: [definition, descr(, default)] per parameter.

    rules
    - a bracketed string is one closed group with nothing after it.
    - no aliases: a top-level comma inside an entry is a malformed definition.
    - at most one variadic (array) parameter, and it must be the last one.
    - names are unique within the list.
    """
    if isinstance(source, str):
        plain = unstyle(source).strip()
        if plain.startswith("["):
            content = extract(plain, ("[", "]"))
            # a single closed group, nothing after it
            if not plain.startswith("[%s]" % content) or plain[len(content) + 2:].strip():
                raise MalformedDefinitionError(
                    "positional list %r must be a single closed [...] group" % (source,),
                    title="malformed definition",
                    code=FaultCode.MALFORMED_DEFINITION,
                    hint="close the list with a single ']' at the end",
                    definition=source,
                    docs=getdoc(FaultCode.MALFORMED_DEFINITION),
                )
            plain = content
        entries = [(piece,) for piece in split(plain)] if plain.strip() else []
    elif isinstance(source, Sequence):
        entries = list(source)
    else:
        raise MalformedDefinitionError(
            "positional list %r must be a string or a sequence of entries" % (source,),
            title="malformed definition",
            code=FaultCode.MALFORMED_DEFINITION,
            hint="write it as '[pkg!, ...files]'",
            definition=source,
            docs=getdoc(FaultCode.MALFORMED_DEFINITION),
        )

    params = []
    for entry in entries:
        definition, descr, default = _unpack(entry)
        plain = unstyle(definition).strip()
        if len(split(plain)) > 1:
            raise MalformedDefinitionError(
                "positional parameter %r cannot have aliases" % definition,
                title="malformed definition",
                code=FaultCode.MALFORMED_DEFINITION,
                hint="declare one parameter per entry, without commas",
                definition=definition,
                docs=getdoc(FaultCode.MALFORMED_DEFINITION),
            )
        name, type, required, hint = _dissect(plain, definition)
        if any(param.name == name for param in params):
            raise DuplicatedNameError(
                "positional parameter %r is declared twice" % name,
                title="duplicated name",
                code=FaultCode.DUPLICATED_NAME,
                hint="give every positional parameter its own name",
                definition=definition,
                docs=getdoc(FaultCode.DUPLICATED_NAME),
            )
        params.append(Option(
            name,
            type=type,
            required=required,
            default=default,
            descr=descr,
            hint=hint,
            label=definition,
        ))

    for index, param in enumerate(params[:-1]):
        if param.variadic:
            raise MisplacedVariadicError(
                "variadic positional parameter %r must be the last one" % param.name,
                title="misplaced variadic",
                code=FaultCode.MISPLACED_VARIADIC,
                hint="move %r to the end of the list and keep a single variadic parameter" % param.label,
                definition=param.label,
                docs=getdoc(FaultCode.MISPLACED_VARIADIC),
            )

    return tuple(params)


__all__ = (
    "Option",
    "Schema",
    "compile_entry",
    "compile_schema",
    "compile_params",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del SchemaType
