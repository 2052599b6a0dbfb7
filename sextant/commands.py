"""
Sextant application boundary: run a usage document against an argument vector.

What this module provides
- parse(doc, argv, ...): the whole pipeline, returning one outcome by value:
  • Matched(bindings): the argument vector fits the document.
  • Help(text): help interception is on and -h/--help was given.
  • Version(text): a version was supplied and --version was given.
  • Failed(fault): a LanguageError (the document is broken) or an InputError (the
    argument vector does not fit; fault.usage holds the usage block to show back).
- docopt(doc, argv, ...): convenience runner that returns the bindings, prints
  help/version and exits, and surfaces faults through sextant.faults.trigger.

Bindings
- a dict from canonical names ("<file>", "--verbose"/"-v", "add") to values:
  None for unset arguments/valued options, False for unset flags and commands,
  True for given ones, the string for a given value, a list for repeated values
  and an int for repeated flags/commands. Options never given keep their defaults.

Quick start
    from sextant import docopt

    __doc__ = '''
    Usage:
      ship new <name>...
      ship <name> move <x> <y> [--speed=<kn>]

    Options:
      -h --help     Show this screen.
      --speed=<kn>  Speed in knots [default: 10].
    '''

    if __name__ == "__main__":
        arguments = docopt(__doc__, version="ship 2.0")
"""
import shlex
import sys
from collections import defaultdict
from collections.abc import Iterable
from typing import NamedTuple

from rich.console import Console
from rich.text import Text

from .faults import *
from .grammar import *
from .patterns import Argument, Option
from .tokens import Tokens
from .utils import *


class Matched(NamedTuple):
    bindings: dict


class Help(NamedTuple):
    text: str


class Version(NamedTuple):
    text: str


class Failed(NamedTuple):
    fault: SextantException


def _tokenize(argv):
    """
    normalize an argument vector into a list of strings.

    - Unset: sys.argv[1:].
    - str: shell-like string, split with shlex.split.
    - Iterable[str]: used item by item (each must be a string).
    """
    if argv is Unset:
        return sys.argv[1:]
    if isinstance(argv, str):
        return shlex.split(argv)
    if isinstance(argv, Iterable):
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argv must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() argv must be a string or an iterable of strings")


def _describe(leaf):
    match leaf:
        case Option():
            return leaf.name if leaf.value is True else "%s=%s" % (leaf.name, leaf.value)
        case Argument():
            return repr(leaf.value)
    return repr(leaf)


def parse(doc, argv=Unset, /, *, help=True, version=Unset, options_first=False):
    """
    run the document against the argument vector and report the outcome by value.

    phases
    - the usage block is located and normalized; the options sections are read into
      a fresh registry (nothing is shared between calls).
    - the usage is parsed into a tree; "options" shortcuts are filled.
    - the argument vector is parsed against the same registry.
    - help (-h/--help) and version (--version) interception, when enabled.
    - the tree is fixed and matched; leftovers are a failure.

    never raises a sextant fault: faults are returned as Failed(fault).
    """
    if not isinstance(doc, str):
        raise TypeError("parse() first argument must be a string")
    tokens = _tokenize(argv)

    try:
        section = usage_section(doc)
        registry = parse_defaults(doc)
        pattern = resolve_shortcuts(parse_pattern(formal_usage(section), registry), doc)
    except LanguageError as fault:
        return Failed(fault)

    prog, = section.partition(":")[2].split()[:1] or ("",)
    try:
        arguments = parse_argv(Tokens(tokens), registry, options_first)
    except InputError as fault:
        return Failed(fault.__replace__(usage=section, prog=prog))

    if help and any(isinstance(leaf, Option) and leaf.name in ("-h", "--help") and leaf.value for leaf in arguments):
        return Help(doc.strip("\n"))
    if version is not Unset and any(isinstance(leaf, Option) and leaf.name == "--version" and leaf.value for leaf in arguments):
        return Version(str(version))

    matched, left, collected = pattern.fix().match(arguments)
    if matched and not left:
        return Matched({leaf.name: leaf.value for leaf in pattern.flat() + collected})

    # a failed match hands back every token, so only leftovers of a match are blamed
    if matched:
        message = "unexpected %s" % ", ".join(map(_describe, left))
    else:
        message = "the arguments do not match any usage pattern"
    return Failed(UnmatchedInputError(
        message,
        title="invalid arguments",
        code=FaultCode.UNMATCHED_INPUT,
        hint="check the usage below",
        usage=section,
        prog=prog,
        left=tuple(left),
        docs=getdoc(FaultCode.UNMATCHED_INPUT)
    ))


def _render(text, *, colorful=True):
    """
    build a rich Text for a help or version screen.

    palette keys
    - usage-label: the "usage:" and "options:" markers.
    - option-name: dash-prefixed names.
    - metavar: <placeholders> and [default: ...] annotations.

    define a mapping named __styles__ in __main__ to override any palette entry.
    """
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",  # cyan section markers
        "option-name": "bold #22C55E",  # green switches
        "metavar": "bold #FFD600",  # amber placeholders
    } | getattr(__import__("__main__"), "__styles__", {}))
    render = Text(text)
    if not colorful:
        return render
    render.highlight_regex(r"(?i)\b(usage|options):", styles["usage-label"])
    render.highlight_regex(r"(?<![\w-])--?[^\W\d_][\w-]*", styles["option-name"])
    render.highlight_regex(r"<[^>\s]*>|\[default: [^\]]*\]", styles["metavar"])
    return render


def docopt(doc, argv=Unset, /, *, help=True, version=Unset, options_first=False, shell=True, fancy=False, colorful=True):
    """
    parse, then act on the outcome like a command-line program would.

    - Matched: the bindings are returned.
    - Help / Version: the text is printed on stdout and the process exits with 0.
    - Failed(LanguageError): raised; a broken document is a bug of the program.
    - Failed(InputError): handed to trigger(); in shell mode it is printed on stderr
      and the process exits with 1, otherwise it is raised.
    """
    match parse(doc, argv, help=help, version=version, options_first=options_first):
        case Matched(bindings):
            return bindings
        case Help(text) | Version(text):
            Console(highlight=False).print(_render(text, colorful=colorful))
            sys.exit(0)
        case Failed(LanguageError() as fault):
            raise fault
        case Failed(fault):
            trigger(fault, shell=shell, fancy=fancy, colorful=colorful)


__all__ = (
    "Matched",
    "Help",
    "Version",
    "Failed",
    "parse",
    "docopt",
)
