"""
Terse command layer: declare command trees, resolve invocations, dispatch actions.

What this module provides
- Command: one node of the command tree. A node owns a compiled flag schema, an
  optional positional parameter list (the "default command" parameters), an action and
  its children. The parent link is weak (navigation only); children are owned top-down.
- resolve(command, tokens): pure recursive resolver returning the matched path or None.
- command(...): factory; invoke(obj, prompt): convenience runner.

Quick start
    from terse import Command, invoke

    cli = Command("pm", [["v, !verbose", "print more details"]], version="1.0.0")

    @cli.command("i,in, install [pkg!, ...files] <package>", [
        ["D, !save-dev", "save as a development dependency"],
    ]).handle
    def install(flags, params):
        print(flags, params)

    if __name__ == "__main__":
        invoke(cli, "in axios a.ts -D")  # flags={'save-dev': True, ...}, params={'pkg': 'axios', 'files': ['a.ts']}

Dispatch (run)
- normalize the prompt (sys.argv[1:], a shell string, or an iterable of strings).
- route: resolve leading command names; a miss falls back to the current node.
- -h/--help renders the target's help and --version the root version, unless the
  target declares those flags itself.
- bind the remaining tokens against the target schema and positional list.
- missing required names surface as a MissingRequiredWarning; the action still runs.
- the action is called as action(flags, params) and its result returned unchanged
  (a coroutine from an async action is handed back for the caller to await).

Faults
- definition errors raised by the schema compiler are re-triggered through
  Command.trigger(...), which merges the runtime flags (shell/fancy/colorful): outside
  shell mode they propagate as exceptions, in shell mode they are rendered and the
  program stops before any token is parsed.
"""
import copy
import functools
import operator
import re
import shlex
import sys
import weakref
from collections.abc import Iterable, Sequence

from .binder import bind
from .faults import *
from .grammar import parse_command
from .render import Renderer
from .schema import compile_entry, compile_params, compile_schema
from .utils import *


class CommandType(type):
    """
    Metaclass for introspectable Command classes.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      for consistent, human-friendly labels in messages.
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
            """
            Return a concise, stable representation with key metadata.

            Example
            - command(name='install', aliases=('i', 'in'), ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _tokens(prompt, /):
    """
    normalize a prompt into a list of tokens.

    - Unset: sys.argv[1:].
    - str: shell-like string, split with shlex.split.
    - Iterable[str]: items kept verbatim (already split, never trimmed).
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = []
        for item in prompt:
            if not isinstance(item, str):
                raise TypeError("prompt must be a string or an iterable of strings")
            tokens.append(item)
        return tokens
    raise TypeError("prompt must be a string or an iterable of strings")


def resolve(command, tokens, /):
    """
    Resolve the leading tokens of an invocation against a command tree.

    Behavior
    - the first token (colour codes stripped) is compared with each child's name and
      aliases, in declaration order; the first match wins (case-sensitive).
    - on a match, resolution recurses into that child with the remaining tokens and
      the matched path is the child followed by whatever the recursion matched.

    Returns
    - tuple[Command, ...]: the matched nodes, outermost first.
    - None: no tokens, or the first token names no child (the caller then treats
      `command` itself as the target: the "default command" fallback).
    """
    tokens = tuple(tokens)
    if not tokens:
        return None
    token = unstyle(tokens[0])
    for child in command.children:
        if token in child.names:
            return (child, *(resolve(child, tokens[1:]) or ()))
    return None


class Command(metaclass=CommandType):
    """
    One node of a terse command tree.

    Responsibilities
    - Declaration: compiles its compact definition (name, aliases, hint and bracketed
      positional list), its flag entries and later options()/default() calls.
    - Composition: command(...) declares children; parent is a weak back-reference.
    - Dispatch: run(...) routes, binds and calls the resolved node's action.

    Runtime flags
    - shell, fancy, colorful: inherit from the parent when Unset (default False).
    - renderer: help/version collaborator, inherited from the parent when Unset.

    Notes
    - the tree is mutated while declaring and read-only by contract once run() starts.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "hint",
        "descr",
        "label",
        "version",
        "children",
        "schema",
        "params",
        "action",
        "renderer",
        "shell",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "name",
        "aliases",
        "hint",
        "descr",
        "version",
        "params",
        "shell",
        "fancy",
        "colorful",
    )

    @property
    def parent(self):
        """
        Return the parent command, or Unset for a root (or a collected parent).
        """
        if self._parent is Unset:
            return Unset
        return self._parent() or Unset

    @property
    def names(self):
        """
        Return the command name followed by its aliases (the resolver's match keys).
        """
        return (self._name, *self._aliases)

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.

        Walks up via .parent until there is no parent and returns that node.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.

        The first element is the root command, the last is the current node.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    def __new__(
            cls,
            definition,
            /,
            flags=(),
            action=Unset,
            parent=Unset,
            descr=Unset,
            version=Unset,
            *,
            renderer=Unset,
            shell=Unset,
            fancy=Unset,
            colorful=Unset,
    ):
        """
        Declare a command.

        Parameters
        - definition: str | [str, str]
          "alias1,alias2, name [positional list] <hint>", optionally paired with a
          description. the bracket group compiles to the positional list.
        - flags: sequence of [flags, descr(, default)] entries.
        - action: Callable[[dict, dict], Any] | Unset
          called as action(flags, params) when this node owns an invocation.
        - parent: Command | Unset
          when given, the new command is appended to parent.children.
        - descr, version: str | Unset
        - renderer, shell, fancy, colorful: runtime configuration (inherited when Unset).

        Raises
        - TypeError on a wrong parent/action/renderer type.
        - DefinitionError subclasses (through trigger) on malformed definitions.
        """
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")
        if action is not Unset and not callable(action):
            raise TypeError(f"{cls.__typename__} 'action' must be callable")
        if not isinstance(renderer, Renderer | Unset):
            raise TypeError(f"{cls.__typename__} 'renderer' must be a renderer")
        if not isinstance(version, str | Unset):
            raise TypeError(f"{cls.__typename__} 'version' must be a string")

        self = super().__new__(cls)
        self._parent = weakref.ref(parent) if parent else Unset
        self._children = []
        self._fallback = Unset
        self._action = action
        self._version = version
        self._renderer = coalesce(renderer, getattr(parent, "renderer", Unset))
        self._shell = bool(coalesce(shell, getattr(parent, "shell", False)))
        self._fancy = bool(coalesce(fancy, getattr(parent, "fancy", False)))
        self._colorful = bool(coalesce(colorful, getattr(parent, "colorful", False)))

        try:
            self._declare(definition, descr)
            self._schema = compile_schema(flags)
        except DefinitionError as error:
            self.trigger(error)

        if parent:
            parent._children.append(self)
        return self

    def _declare(self, definition, descr, /):
        """
        Compile the command definition into name, aliases, hint and positional list.
        """
        if isinstance(definition, Sequence) and not isinstance(definition, str):
            if len(definition) != 2:
                raise MalformedDefinitionError(
                    "command definition %r must be a string or a [definition, descr] pair" % (definition,),
                    title="malformed definition",
                    code=FaultCode.MALFORMED_DEFINITION,
                    hint="write it as 'i,in, install [pkg!]' or ['i,in, install [pkg!]', 'install a package']",
                    definition=definition,
                    docs=getdoc(FaultCode.MALFORMED_DEFINITION),
                )
            definition, paired = definition
            descr = coalesce(descr, paired)

        if not isinstance(definition, str):
            raise MalformedDefinitionError(
                "command definition %r is not a string" % (definition,),
                title="malformed definition",
                code=FaultCode.MALFORMED_DEFINITION,
                hint="write it as a compact string, e.g. 'i,in, install [pkg!]'",
                definition=definition,
                docs=getdoc(FaultCode.MALFORMED_DEFINITION),
            )
        if not isinstance(descr := coalesce(descr, ""), str):
            raise MalformedDefinitionError(
                "description of command %r must be a string" % definition,
                title="malformed definition",
                code=FaultCode.MALFORMED_DEFINITION,
                hint="pass the description as a string",
                definition=definition,
                docs=getdoc(FaultCode.MALFORMED_DEFINITION),
            )

        name, aliases, hint, group = parse_command(unstyle(definition))
        if not name:
            raise MissingNameError(
                "command definition %r has no name" % definition,
                title="missing name",
                code=FaultCode.MISSING_NAME,
                hint="put the command name last, e.g. 'i,in, install'",
                definition=definition,
                docs=getdoc(FaultCode.MISSING_NAME),
            )

        self._name = name
        self._aliases = tuple(alias for alias in dict.fromkeys(aliases) if alias != name)
        self._hint = hint
        self._descr = descr
        self._label = definition
        self._params = compile_params(group) if group is not Unset else ()

    def command(self, definition, /, flags=(), action=Unset, *args, **kwargs):
        """
        Declare a child command under this command.

        Thin wrapper around Command(...) that injects the current command as parent.
        Returns the new child (chain .handle(...) or .options(...) on it).
        """
        return Command(definition, flags, action, self, *args, **kwargs)

    def options(self, *entries):
        """
        Compile more flag entries into this command's schema; returns self.
        """
        try:
            for entry in entries:
                self._schema.register(compile_entry(entry))
        except DefinitionError as error:
            self.trigger(error)
        return self

    def default(self, *entries):
        """
        Set the positional ("default command") parameter list; returns self.

        Forms
        - default("[pkg!, ...files]")
        - default(["pkg!", "package to install"], ["...files", "extra files"])
        """
        source = entries[0] if len(entries) == 1 and isinstance(entries[0], str) else entries
        try:
            self._params = compile_params(source)
        except DefinitionError as error:
            self.trigger(error)
        return self

    def handle(self, callback, /):
        """
        Set the action of this command.

        Returns the same callable, enabling decorator-style usage: @cmd.handle
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} action must be callable")
        self._action = callback
        return callback

    def fallback(self, fallback, /):
        """
        Register a one-time fallback handler for faults.

        Contract
        - fallback: callable invoked with a single fault instead of the default trigger.
        - Can be set only once per command (cannot be overridden).

        Returns
        - The same callable, enabling decorator-style usage: @cmd.fallback
        """
        if not callable(fallback):
            raise TypeError(f"{type(self).__typename__} fallback must be callable")
        if self._fallback is not Unset:
            raise TypeError(f"{type(self).__typename__} fallback cannot be overridden")
        self._fallback = fallback
        return fallback

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this command's runtime options merged in.
        """
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)
        if self._fallback:
            self._fallback(fault)
        else:
            trigger(fault)

    def parse(self, prompt, /):
        """
        Bind a prompt against this node only (no routing, no dispatch).

        Returns
        - Bound(flags, params, missing).
        """
        return bind(self._schema, _tokens(prompt), self._params)

    def route(self, tokens, /):
        """
        Find the node owning an invocation.

        Returns
        - (target, remaining): the deepest matched child and the tokens after the
          matched command names, or (self, tokens) when no child matches.
        """
        tokens = list(tokens)
        if (path := resolve(self, tokens)) is None:
            return self, tokens
        return path[-1], tokens[len(path):]

    def run(self, prompt=Unset, /):
        """
        Execute an invocation: route, handle help/version, bind, dispatch.

        Returns
        - the action's return value unchanged, or None when help/version was rendered.
        """
        target, tokens = self.route(_tokens(prompt))
        switches = tokens[:tokens.index("--")] if "--" in tokens else tokens
        renderer = self.renderer or Renderer(colorful=target.colorful, fancy=target.fancy)

        if ("--help" in switches and "help" not in target.schema) or ("-h" in switches and "h" not in target.schema):
            return renderer.help(target)
        if "--version" in switches and "version" not in target.schema and target.root.version:
            return renderer.version(target.root)
        if target.action is Unset:
            return renderer.help(target)

        flags, params, missing = target.parse(tokens)
        if missing:
            route = " ".join(step.name for step in target.path)
            target.trigger(MissingRequiredWarning(
                "missing required %s %s" % ("inputs" if len(missing) > 1 else "input", ", ".join(map(repr, missing))),
                title="missing required input",
                code=FaultCode.MISSING_REQUIRED,
                names=missing,
                hint="pass a value for each of them (run '%s --help' to see all inputs)" % route,
                docs=getdoc(FaultCode.MISSING_REQUIRED),
            ))
        return target.action(flags, params)

    def __invoke__(self, prompt=Unset):
        return self.run(prompt)


def command(definition, /, *args, **kwargs):
    """
    Create a Command.

    Parameters
    - definition: str | [str, str], see Command.
    - *args, **kwargs: forwarded to Command.__new__ (flags, action, parent, descr,
      version, renderer and runtime flags).

    Returns
    - Command
    """
    return Command(definition, *args, **kwargs)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands.

    Parameters
    - object: an instance providing __invoke__(prompt).
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).

    Returns
    - whatever __invoke__ returns (for commands: the action's result).
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Command",
    "command",
    "invoke",
    "resolve",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
