r"""
Sextant grammar: from a usage document to a pattern tree, and from argv to leaves.

Pipeline
- parse_section("usage:", doc) / usage_section(doc): locate the usage block.
- formal_usage(section): normalize it into one alternation, "( ... ) | ( ... )".
- parse_defaults(doc): read the options sections into a Registry of Option entries.
- parse_pattern(formal, registry): recursive descent into a Required root.
- resolve_shortcuts(pattern, doc): fill each "options" shortcut.
- parse_argv(tokens, registry, options_first=False): flat leaves for the matcher.

Usage grammar
    expr  ::= seq ( '|' seq )* ;
    seq   ::= ( atom )* [ atom '...' ] ;
    atom  ::= '(' expr ')' | '[' expr ']' | 'options'
            | long | shorts | argument | command ;
    long  ::= '--' chars [ ( ' ' | '=' ) chars ] ;
    shorts::= '-' ( chars )* [ [ ' ' ] chars ] ;

Argument vector grammar
    argv  ::= [ long | shorts | argument ]* [ '--' [ argument ]* ] ;
    with options_first:
    argv  ::= [ long | shorts ]* [ argument ]* [ '--' [ argument ]* ] ;

The option parsers (parse_long, parse_shorts) serve both phases; the token stream tells
them which one is running (tokens.error is LanguageError for the usage document and
InputError for argv):
- usage document: unknown options are registered on first sighting; exact names only.
- argv: unknown options are faults; a long name may be abbreviated to a unique prefix;
  every option gets its bound value (or True when it takes no argument).
"""
import re

from .faults import *
from .patterns import *
from .tokens import Tokens


def parse_section(name, source, /):
    """
    return every block that starts on a line containing `name` (case-insensitive).

    a block is that line plus the indented lines that follow it; blocks are
    stripped of surrounding whitespace.
    """
    pattern = re.compile(
        r"^([^\n]*" + re.escape(name) + r"[^\n]*\n?(?:[ \t].*?(?:\n|$))*)",
        re.IGNORECASE | re.MULTILINE
    )
    return [section.strip() for section in pattern.findall(source)]


def usage_section(doc, /):
    """the single usage block of a document; LanguageError when missing or repeated."""
    match parse_section("usage:", doc):
        case []:
            raise UsageNotFoundError(
                '"usage:" (case-insensitive) not found',
                title="usage not found",
                code=FaultCode.USAGE_NOT_FOUND,
                hint='start the usage block with a line like "Usage: prog <argument>"',
                docs=getdoc(FaultCode.USAGE_NOT_FOUND)
            )
        case [section]:
            return section
        case sections:
            raise DuplicatedUsageError(
                'more than one "usage:" (case-insensitive), found %d' % len(sections),
                title="duplicated usage",
                code=FaultCode.DUPLICATED_USAGE,
                hint='keep a single "usage:" block; reword any other line containing it',
                docs=getdoc(FaultCode.DUPLICATED_USAGE)
            )


def formal_usage(section, /):
    """
    turn a usage block into a single alternation over its lines.

    the first word after "usage:" is the program name; every later occurrence of it
    starts a new alternative:

        "Usage: prog add <x>\n       prog rm <x>"  ->  "( add <x> ) | ( rm <x> )"
    """
    _, _, section = section.partition(":")
    words = section.split()
    if not words:
        return "(  )"
    program, *words = words
    return "( " + " ".join(") | (" if word == program else word for word in words) + " )"


def parse_defaults(doc, /):
    """
    read every options section into a Registry (declaration order, duplicates kept).

    an entry starts on a line whose first non-blank text is a dash token; the lines
    that follow it until the next entry belong to its description.
    """
    registry = Registry()
    for section in parse_section("options:", doc):
        _, _, section = section.partition(":")
        split = re.split(r"\n[ \t]*(-\S+?)", "\n" + section)[1:]
        for entry in (head + tail for head, tail in zip(split[::2], split[1::2])):
            if entry.startswith("-"):
                registry.register(Option.parse(entry))
    return registry


def parse_pattern(source, registry, /):
    """parse a formal usage string into a Required root; leftovers are a LanguageError."""
    tokens = Tokens.from_pattern(source)
    result = parse_expr(tokens, registry)
    if tokens:
        raise tokens.fault(
            "unexpected ending: %r" % " ".join(tokens),
            title="unexpected ending",
            code=FaultCode.UNEXPECTED_ENDING,
            hint="check for a closing ')' or ']' without its opening pair"
        )
    return Required(*result)


def parse_expr(tokens, registry):
    # expr ::= seq ( '|' seq )* ;
    seq = parse_seq(tokens, registry)
    if tokens.current() != "|":
        return seq
    result = [Required(*seq)] if len(seq) > 1 else seq
    while tokens.current() == "|":
        tokens.move()
        seq = parse_seq(tokens, registry)
        result += [Required(*seq)] if len(seq) > 1 else seq
    result = list(dict.fromkeys(result))
    return [Either(*result)] if len(result) > 1 else result


def parse_seq(tokens, registry):
    # seq ::= ( atom [ '...' ] )* ;
    result = []
    while tokens.current() not in (None, "]", ")", "|"):
        atom = parse_atom(tokens, registry)
        if tokens.current() == "...":
            # a repetition ends the sequence
            tokens.move()
            return result + [OneOrMore(*atom)]
        result += atom
    return result


def parse_atom(tokens, registry):
    # atom ::= '(' expr ')' | '[' expr ']' | 'options' | long | shorts | argument | command ;
    token = tokens.current()
    match token:
        case "(" | "[":
            tokens.move()
            closing, branch = {"(": (")", Required), "[": ("]", Optional)}[token]
            result = branch(*parse_expr(tokens, registry))
            if tokens.move() != closing:
                raise tokens.fault(
                    "unmatched %r" % token,
                    title="unmatched delimiter",
                    code=FaultCode.UNMATCHED_DELIMITER,
                    hint="close it with %r (a '...' ends its sequence)" % closing
                )
            return [result]
        case "options":
            tokens.move()
            return [OptionsShortcut()]
        case _ if token.startswith("--") and token != "--":
            return parse_long(tokens, registry)
        case _ if token.startswith("-") and token not in ("-", "--"):
            return parse_shorts(tokens, registry)
        case _ if token.startswith("<") and token.endswith(">") or token.isupper():
            return [Argument(tokens.move())]
        case _:
            return [Command(tokens.move())]


def parse_long(tokens, registry):
    """
    parse one long option token: "--name", "--name=value" or "--name value".

    resolution
    - an exact long name wins; in argv, a unique prefix is accepted too.
    - several candidates: NOT_UNIQUE_PREFIX (also raised for a name defined twice).
    - no candidate: registered (usage document, argument iff '=' was used) or
      UNKNOWN_SWITCH (argv).
    - a value given to an option without argument: FLAG_ASSIGNMENT.
    - an option with argument and nothing to take: OPTION_VALUE_REQUIRED.
    """
    name, eq, value = tokens.move().partition("=")
    value = value if eq else None
    similar = registry.long(name)
    if tokens.error is InputError and not similar:
        similar = registry.prefix(name)

    if len(similar) > 1:
        raise tokens.fault(
            "%s is not a unique prefix: %s?" % (name, ", ".join(option.long for option in similar)),
            title="ambiguous option",
            code=FaultCode.NOT_UNIQUE_PREFIX,
            hint="spell out more of the name",
            candidates=tuple(option.long for option in similar)
        )
    if not similar:
        if tokens.error is InputError:
            raise tokens.fault(
                "unknown option %s" % name,
                title="unknown option",
                code=FaultCode.UNKNOWN_SWITCH,
                hint="check the options listed in the usage",
                input=name
            )
        registry.register(Option(None, name, 1 if eq else 0))
        return [Option(None, name, 1 if eq else 0)]

    entry, = similar
    option = Option(entry.short, entry.long, entry.argcount, entry.value)
    if option.argcount == 0:
        if value is not None:
            raise tokens.fault(
                "%s must not have an argument" % option.long,
                title="option takes no value",
                code=FaultCode.FLAG_ASSIGNMENT,
                hint="remove everything from '=' (for example: %s)" % option.long
            )
    elif value is None:
        if tokens.current() in (None, "--"):
            raise tokens.fault(
                "%s requires argument" % option.long,
                title="missing option value",
                code=FaultCode.OPTION_VALUE_REQUIRED,
                hint="pass a value (for example: %s=<value>)" % option.long
            )
        value = tokens.move()
    if tokens.error is InputError:
        option.value = value if value is not None else True
    return [option]


def parse_shorts(tokens, registry):
    """
    parse one cluster of short options: "-v", "-vqx", "-ofile" or "-o file".

    every character is an option of its own; an option taking an argument consumes
    the rest of the cluster, or the next token when the cluster ends with it.
    """
    token = tokens.move()
    left = token.lstrip("-")
    parsed = []
    while left:
        name, left = "-" + left[0], left[1:]
        similar = registry.short(name)
        if len(similar) > 1:
            raise tokens.fault(
                "%s is specified ambiguously %d times" % (name, len(similar)),
                title="ambiguous option",
                code=FaultCode.AMBIGUOUS_SWITCH,
                hint="define %s only once in the options sections" % name
            )
        if not similar:
            if tokens.error is InputError:
                raise tokens.fault(
                    "unknown option %s" % name,
                    title="unknown option",
                    code=FaultCode.UNKNOWN_SWITCH,
                    hint="check the options listed in the usage",
                    input=name
                )
            registry.register(Option(name, None, 0))
            parsed.append(Option(name, None, 0))
            continue

        entry, = similar
        option = Option(name, entry.long, entry.argcount, entry.value)
        value = None
        if option.argcount:
            if left:
                value, left = left, ""
            elif tokens.current() in (None, "--"):
                raise tokens.fault(
                    "%s requires argument" % name,
                    title="missing option value",
                    code=FaultCode.OPTION_VALUE_REQUIRED,
                    hint="pass a value (for example: %s <value>)" % name
                )
            else:
                value = tokens.move()
        if tokens.error is InputError:
            option.value = value if value is not None else True
        parsed.append(option)
    return parsed


def parse_argv(tokens, registry, options_first=False):
    """
    split an argument vector into Option leaves and nameless Argument leaves.

    "--" and everything after it become Arguments as-is; with options_first the
    first positional token does the same.
    """
    parsed = []
    while (token := tokens.current()) is not None:
        if token == "--":
            return parsed + [Argument(None, value) for value in tokens]
        if token.startswith("--"):
            parsed += parse_long(tokens, registry)
        elif token.startswith("-") and token != "-":
            parsed += parse_shorts(tokens, registry)
        elif options_first:
            return parsed + [Argument(None, value) for value in tokens]
        else:
            parsed.append(Argument(None, tokens.move()))
    return parsed


def resolve_shortcuts(pattern, doc, /):
    """
    fill every "options" shortcut of a pattern.

    each shortcut receives the options of the document's options sections that
    the usage lines do not reference explicitly, in declaration order.
    """
    explicit = set(pattern.flat(Option))
    for shortcut in pattern.flat(OptionsShortcut):
        shortcut.children = [option for option in parse_defaults(doc).distinct() if option not in explicit]
    return pattern


__all__ = (
    "parse_section",
    "usage_section",
    "formal_usage",
    "parse_defaults",
    "parse_pattern",
    "parse_expr",
    "parse_seq",
    "parse_atom",
    "parse_long",
    "parse_shorts",
    "parse_argv",
    "resolve_shortcuts",
)
