"""
Sextant faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue sextant reports.
  Codes are grouped by domain (usage document, tokens, matching, binding).
- SextantException: base type that carries message + options and knows how to render
  itself in a friendly, lowercased and actionable way.
- Two error kinds, distinguished by phase:
  • LanguageError: the usage document itself is malformed (a bug of the program author).
  • InputError: the argument vector does not conform to the usage document (a user mistake);
    its `usage` option carries the usage section so it can be shown back.
- BindingError: a typed binding target lacks a registered field.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- The parser raises faults; the boundary layer (sextant.commands) catches them and
  hands them back as values, or calls trigger(fault, **ctx) on behalf of docopt().
- In non-shell mode, exceptions are raised; in shell mode, they are rendered via rich.
"""
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - usage document (2110x/2111x)
      • USAGE_NOT_FOUND, DUPLICATED_USAGE, UNMATCHED_DELIMITER, UNEXPECTED_ENDING
    - tokens, in both the usage document and the argument vector (2112x)
      • AMBIGUOUS_SWITCH, NOT_UNIQUE_PREFIX, UNKNOWN_SWITCH, FLAG_ASSIGNMENT,
        OPTION_VALUE_REQUIRED
    - matching (2113x)
      • UNMATCHED_INPUT
    - typed binding (2114x)
      • UNKNOWN_FIELD

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- usage document errors ---
    USAGE_NOT_FOUND             = 21101
    DUPLICATED_USAGE            = 21102
    UNMATCHED_DELIMITER         = 21111
    UNEXPECTED_ENDING           = 21112

    # --- switch errors ---
    AMBIGUOUS_SWITCH            = 21121
    NOT_UNIQUE_PREFIX           = 21122
    UNKNOWN_SWITCH              = 21123
    FLAG_ASSIGNMENT             = 21124
    OPTION_VALUE_REQUIRED       = 21125

    # --- matching errors ---
    UNMATCHED_INPUT             = 21131

    # --- binding errors ---
    UNKNOWN_FIELD               = 21141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class SextantException(Exception):
    """
    base of every sextant fault.

    carries
    - message: one-sentence, lowercased description.
    - options: read-only mapping with rendering context (title, code, hint, usage,
      shell, fancy, colorful, prog) and any fault-specific detail (e.g. candidates).
    """
    __palette__ = {
        # header parts
        "prog-name": "bold #E6E6F0",  # near-white program name
        "code": "bold #00E5FF",  # neon cyan fault code
        "error-title": "bold #FF4DA6",  # friendly pinky title

        # body
        "error-message": "#C8C8D0",  # soft light gray message
        "hint-arrow": "#9CE19C dim",  # gentle green arrow
        "hint": "italic #9CE19C",  # gentle green hint text
        "usage": "bold #36C5F0",  # sky-blue usage echo
        "docs": "underline #00E5FF dim",  # host documentation, when provided
    }

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def usage(self):
        return self.options.get("usage")

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, type(self).__palette__ | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(
            getattr(main, "__prog__", self.options.get("prog") or os.path.basename(sys.argv[0])),
            styler("prog-name")
        )
        code = self.options.get("code")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if code is not None else type(self).__name__, styler("code")),
            " | ",
            text(self.options.get("title", "error").title(), styler("error-title")),
            " ]"
        )
        renders = [text(self.message, styler("error-message"))]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))
        if usage := self.options.get("usage"):
            renders.append(text(usage, styler("usage")))
        if docs := self.options.get("docs"):
            renders.append(text(docs, styler("docs")))

        if fancy:
            try:
                width = int((console.width - 4) * self.options["ratio"])
            except KeyError:
                width = None
            return Panel(Group(*renders), title=header, title_align="left", width=width)

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class LanguageError(SextantException):
    """the usage document is malformed."""


class UsageNotFoundError(LanguageError): ...
class DuplicatedUsageError(LanguageError): ...


class InputError(SextantException):
    """the argument vector does not conform to the usage document."""


class UnmatchedInputError(InputError): ...


class BindingError(SextantException):
    """a typed binding target cannot receive a bound value."""


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see SextantException).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised.

    typical options
    - shell, fancy, colorful, prog, title, code, hint, usage.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "SextantException",
    "LanguageError",
    "UsageNotFoundError",
    "DuplicatedUsageError",
    "InputError",
    "UnmatchedInputError",
    "BindingError",
    "FaultCode",
    "trigger",
    "getdoc",
)
