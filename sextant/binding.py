"""
Sextant typed binding and introspection.

- fieldname(name): canonical binding name → attribute name.
    --foo-bar → FlagFooBar, <foo> → ArgFoo, add-file → AddFile, -v → V
- @fields(*names): register the explicit table of attributes a target type accepts.
- bind(bindings, target): build a target instance from a bindings dict.
- nodes(doc): the distinct leaves of a document, as Node(name, kind, value).
- generate(doc, name): Python source for a @fields class matching a document.

Targets are never inspected: only the names registered through @fields can be set,
and a binding without a registered field is a BindingError.

Quick example:
    >>> @fields("ArgFile", "FlagVerbose")
    ... class Arguments:
    ...     ArgFile = None
    ...     FlagVerbose = False
    >>> bind({"<file>": "a.txt", "--verbose": True}, Arguments).ArgFile
    'a.txt'
"""
from typing import NamedTuple

from .faults import *
from .grammar import *
from .patterns import Argument, Command, Option
from .utils import *


class Node(NamedTuple):
    name: str
    kind: str
    value: object


def fieldname(name, /):
    if not isinstance(name, str) or not name:
        raise TypeError("fieldname() argument must be a non-empty string")
    if name.startswith("--"):
        return "Flag" + pascalize(name[2:])
    if name.startswith("<") and name.endswith(">"):
        return "Arg" + pascalize(name[1:-1])
    return pascalize(name)


def fields(*names):
    """
    class decorator registering the attributes a binding target accepts.

    the table is stored as a frozenset in the class' __fields__; names must be
    valid identifiers and may not repeat.
    """
    for name in names:
        if not isinstance(name, str) or not name.isidentifier():
            raise TypeError("@fields() arguments must be identifiers, got %r" % (name,))
    if len(set(names)) != len(names):
        raise ValueError("@fields() arguments must be unique")

    @rename("fields")
    def wrapper(cls, /):
        if not isinstance(cls, type):
            raise TypeError("@fields() must be applied to a class")
        cls.__fields__ = frozenset(names)
        return cls

    return wrapper


def bind(bindings, target, /):
    """
    instantiate target() and set one registered attribute per binding.

    raises
    - TypeError: the target was not decorated with @fields.
    - BindingError: a binding has no registered attribute.
    """
    table = getattr(target, "__fields__", Unset)
    if table is Unset:
        raise TypeError("bind() target must be decorated with @fields(...)")
    instance = target()
    for name, value in bindings.items():
        if (field := fieldname(name)) not in table:
            raise BindingError(
                "no field %r for %r on %s" % (field, name, target.__name__),
                title="unknown field",
                code=FaultCode.UNKNOWN_FIELD,
                hint="register it with @fields(%r, ...)" % field,
                field=field,
                docs=getdoc(FaultCode.UNKNOWN_FIELD)
            )
        setattr(instance, field, value)
    return instance


def nodes(doc, /):
    """
    the distinct leaves of a document after fixing, in document order.

    kind is "argument", "command" or "option"; value is the leaf's default
    ([] or 0 for repeated leaves). raises LanguageError for a broken document.
    """
    pattern = resolve_shortcuts(parse_pattern(formal_usage(usage_section(doc)), parse_defaults(doc)), doc).fix()
    distinct = {}
    for leaf in pattern.flat():
        match leaf:
            case Argument():
                kind = "argument"
            case Command():
                kind = "command"
            case Option():
                kind = "option"
        distinct.setdefault(leaf.name, Node(leaf.name, kind, leaf.value))
    return tuple(distinct.values())


def generate(doc, /, name="Arguments"):
    """
    emit the source of a binding target for a document.

        @fields('Add', 'ArgFile')
        class Arguments:
            Add = False
            ArgFile = None
    """
    if not isinstance(name, str) or not name.isidentifier():
        raise TypeError("generate() name must be an identifier")
    leaves = nodes(doc)
    lines = [
        "@fields(%s)" % ", ".join(repr(fieldname(node.name)) for node in leaves),
        "class %s:" % name,
    ]
    lines += ["    %s = %r" % (fieldname(node.name), node.value) for node in leaves] or ["    pass"]
    return "\n".join(lines) + "\n"


__all__ = (
    "Node",
    "fieldname",
    "fields",
    "bind",
    "nodes",
    "generate",
)
