"""
Sextant utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the grammar, the matcher and the boundary layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None
    (None is a legitimate bound value: an option that takes an argument but got none).

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated callables.

- partition(text, separator)
  • str.partition with a regular-expression separator.

- pascalize(text)
  • kebab/snake words to PascalCase ("max-degree" → "MaxDegree").

Quick examples
    >>> partition("-o FILE  output file", r"\\s{2,}|\\t")
    ('-o FILE', '  ', 'output file')
    >>> pascalize("max-degree-of-parallelism")
    'MaxDegreeOfParallelism'
"""
import builtins
import functools
import re
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> (decorator)
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def partition(text, separator, /):
    """
    split text around the first match of a regular-expression separator.

    behaves like str.partition:
    - returns (head, separator, tail) when the separator is found.
    - returns (text, "", "") otherwise.
    """
    if not isinstance(text, str):
        raise TypeError("partition() first argument must be a string")
    if (match := re.search(separator, text)) is None:
        return text, "", ""
    return text[:match.start()], match.group(), text[match.end():]


@functools.cache
def pascalize(text, /):
    """
    turn a kebab-case (or snake_case) word into PascalCase.

    every '-' or '_' starts a new word and is dropped; the first letter of
    each word is upper-cased while the rest is kept as written.

    examples
    - pascalize("verbose")           -> "Verbose"
    - pascalize("max-degree")        -> "MaxDegree"
    - pascalize("dry_run")           -> "DryRun"
    """
    if not isinstance(text, str):
        raise TypeError("pascalize() argument must be a string")
    return "".join(word[:1].upper() + word[1:] for word in re.split(r"[-_]+", text) if word)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: equality and identity checks must not treat it as None.
- Typical check: `if value is Unset:` (never a truthiness test).
"""


__all__ = (
    # Functions
    "rename",
    "partition",
    "pascalize",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
