r"""
Sextant pattern tree: leaves, branches, the fixer and the matcher.

Overview
- Leaves (the atomic matchable units)
  • Argument: a positional placeholder, e.g. <file> or FILE.
  • Command: a literal positional word, e.g. add.
  • Option: a named switch, identified by (short, long), e.g. -v/--verbose.

- Branches
  • Required: every child, in order.
  • Optional: every child that matches; never fails.
  • OptionsShortcut: an Optional standing for the "options" keyword of a usage line.
  • Either: the alternative leaving the fewest unconsumed tokens.
  • OneOrMore: its single child, repeatedly; reports success even after zero rounds.

- Registry
  • The ordered collection of Option entries known to one parse (from the options
    sections and from first sightings in the usage lines).

Matching
- match(left, collected=None) -> (matched, left, collected)
  • left: flat list of leaves produced by sextant.grammar.parse_argv (bound Options and
    nameless Arguments holding the raw token).
  • collected: leaves bound so far; every successful leaf match appends a fresh leaf
    carrying the merged value, so failed alternatives never leak into other branches.

Bound values
- None (absent), bool (flag), str (text), list[str] (items) and int (count).
  Accumulation is decided by the kind of the leaf's own value (see LeafPattern.match):
  counts increment, lists extend, anything else binds once.

Equality
- Leaves compare by (type, name) only, whatever value they hold; Options compare by
  (short, long). Branches compare by (type, children). This lets the fixer share one
  instance per name and the matcher find the collected leaf for a fresh binding.

Quick example:
    >>> pattern = Required(Command("go"), OneOrMore(Argument("<direction>"))).fix()
    >>> pattern.match([Argument(None, "go"), Argument(None, "left"), Argument(None, "right")])
    (True, [], [Command('go', True), Argument('<direction>', ['left', 'right'])])
"""
import copy
import re

from .utils import *


class Pattern:
    """
    common protocol of every node of the tree.

    - flat(*types): leaves (or nodes of the given types) in document order.
    - match(left, collected=None): see the module documentation.
    - fix(): share leaf identities, then turn repeated leaves into accumulators.
    """

    def fix(self):
        self.fix_identities()
        self.fix_repeating_arguments()
        return self

    def fix_identities(self, uniq=None):
        return self

    def fix_repeating_arguments(self):
        """
        make every leaf that can occur more than once in one match accumulate.

        the tree is expanded into its alternatives (see _expand); within one
        alternative, a leaf seen twice or more is repeated:
        - Argument and Option with an argument collect a list (a string default
          is split on whitespace, a missing one becomes []).
        - Command and Option without an argument count occurrences from 0.
        """
        for case in (list(child.children) for child in _expand(self).children):
            for leaf in [leaf for leaf in case if case.count(leaf) > 1]:
                match leaf:
                    case Argument() | Option(argcount=1):
                        match leaf.value:
                            case None:
                                leaf.value = []
                            case str():
                                leaf.value = leaf.value.split()
                    case Command() | Option(argcount=0):
                        leaf.value = 0
        return self

    def __rich_repr__(self):
        yield from ()

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join(map(repr, self.__rich_repr__())))


class LeafPattern(Pattern):
    """a named, value-carrying node."""

    def __init__(self, name, value=None):
        self.name = name
        self.value = value

    def flat(self, *types):
        return [self] if not types or type(self) in types else []

    def single_match(self, left):
        """return (index, fresh leaf) for the first compatible element, or (None, None)."""
        raise NotImplementedError

    def bound(self, value):
        """a copy of this leaf holding value."""
        leaf = copy.copy(self)
        leaf.value = value
        return leaf

    def match(self, left, collected=None):
        collected = [] if collected is None else collected
        index, found = self.single_match(left)
        if found is None:
            return False, left, collected
        left = left[:index] + left[index + 1:]

        # bool is checked first: it is also an int
        match self.value:
            case bool():
                return True, left, collected + [found]
            case int():
                increment = 1
            case list():
                increment = [found.value] if isinstance(found.value, str) else list(found.value)
            case _:
                return True, left, collected + [found]

        same = next((leaf for leaf in collected if leaf.name == self.name), None)
        if same is None:
            return True, left, collected + [found.bound(increment)]
        return True, left, [
            leaf.bound(leaf.value + increment) if leaf is same else leaf for leaf in collected
        ]

    def __eq__(self, other):
        if not isinstance(other, Pattern):
            return NotImplemented
        return type(self) is type(other) and self.name == other.name

    def __hash__(self):
        return hash((type(self), self.name))

    def __rich_repr__(self):
        yield self.name
        yield self.value


class BranchPattern(Pattern):
    """a node composing child patterns."""

    def __init__(self, *children):
        self.children = list(children)

    def flat(self, *types):
        if type(self) in types:
            return [self]
        return [leaf for child in self.children for leaf in child.flat(*types)]

    def fix_identities(self, uniq=None):
        """replace every leaf by the first equal leaf of the tree, so equal leaves share one instance."""
        uniq = list(dict.fromkeys(self.flat())) if uniq is None else uniq
        for index, child in enumerate(self.children):
            if isinstance(child, BranchPattern):
                child.fix_identities(uniq)
            else:
                self.children[index] = uniq[uniq.index(child)]
        return self

    def __eq__(self, other):
        if not isinstance(other, Pattern):
            return NotImplemented
        return type(self) is type(other) and self.children == other.children

    def __hash__(self):
        return hash((type(self), tuple(self.children)))

    def __rich_repr__(self):
        yield from self.children


class Argument(LeafPattern):
    """
    positional placeholder (<name> or NAME).

    in an argument vector, nameless Arguments carry each bare token until the
    matcher assigns them a name by position.
    """

    def single_match(self, left):
        for index, pattern in enumerate(left):
            if type(pattern) is Argument:
                return index, Argument(self.name, pattern.value)
        return None, None


class Command(LeafPattern):
    """literal word; matches only when it is the next positional token."""

    def __init__(self, name, value=False):
        super().__init__(name, value)

    def single_match(self, left):
        for index, pattern in enumerate(left):
            if type(pattern) is Argument:
                if pattern.value == self.name:
                    return index, Command(self.name, True)
                break
        return None, None


class Option(LeafPattern):
    """
    named switch, the registry entry of sextant.

    attributes
    - short: "-x" or None.
    - long: "--name" or None.
    - argcount: 1 when the option consumes a value, 0 otherwise.
    - value: False for an unset flag, None for an unset valued option, or the default.

    identity
    - (short, long); argcount and value never take part in equality.
    """

    def __init__(self, short=None, long=None, argcount=0, value=False):
        if argcount not in (0, 1):
            raise ValueError("Option() argcount must be 0 or 1")
        if short is None and long is None:
            raise TypeError("Option() requires a short or a long name")
        self.short, self.long, self.argcount = short, long, argcount
        self.value = None if value is False and argcount else value

    @property
    def name(self):
        return self.long or self.short

    @classmethod
    def parse(cls, description, /):
        """
        build an Option from one entry of an options section.

        the names are the text before the first run of two spaces (or a tab);
        ',' and '=' separate names and placeholders; any word that does not start
        with '-' is a placeholder and gives the option an argument. a
        "[default: X]" annotation (case-insensitive) sets X as the value and
        implies an argument.

        examples
        - "-h --help  show help."             -> Option('-h', '--help', 0, False)
        - "-o FILE  output file."              -> Option('-o', None, 1, None)
        - "--speed=<kn>  knots [default: 10]." -> Option(None, '--speed', 1, '10')
        """
        short, long, argcount, value = None, None, 0, False
        names, _, description = partition(description.strip(), r" {2,}|\t")
        for name in names.replace(",", " ").replace("=", " ").split():
            if name.startswith("--"):
                long = name
            elif name.startswith("-"):
                short = name
            else:
                argcount = 1
        if match := re.search(r"\[default: (.*?)\]", description, flags=re.IGNORECASE):
            argcount, value = 1, match[1]
        return cls(short, long, argcount, value)

    def single_match(self, left):
        for index, pattern in enumerate(left):
            if self == pattern:
                return index, pattern.bound(pattern.value)
        return None, None

    def __eq__(self, other):
        if not isinstance(other, Pattern):
            return NotImplemented
        return type(other) is Option and (self.short, self.long) == (other.short, other.long)

    def __hash__(self):
        return hash((Option, self.short, self.long))

    def __rich_repr__(self):
        yield self.short
        yield self.long
        yield self.argcount
        yield self.value


class Required(BranchPattern):
    def match(self, left, collected=None):
        collected = [] if collected is None else collected
        remaining, bound = left, collected
        for pattern in self.children:
            matched, remaining, bound = pattern.match(remaining, bound)
            if not matched:
                return False, left, collected
        return True, remaining, bound


class Optional(BranchPattern):
    def match(self, left, collected=None):
        collected = [] if collected is None else collected
        for pattern in self.children:
            _, left, collected = pattern.match(left, collected)
        return True, left, collected


class OptionsShortcut(Optional):
    """
    marker for the "options" keyword of a usage line.

    parsed empty; sextant.grammar.resolve_shortcuts() fills it with every option of
    the options sections that the usage lines do not mention explicitly.
    """


class OneOrMore(BranchPattern):
    def match(self, left, collected=None):
        if len(self.children) != 1:
            raise ValueError("OneOrMore() must wrap exactly one pattern")
        collected = [] if collected is None else collected
        remaining, bound = left, collected
        while True:
            matched, current, bound = self.children[0].match(remaining, bound)
            if not matched:
                break
            # a round that consumes nothing would repeat forever
            remaining, consumed = current, len(remaining) - len(current)
            if not consumed:
                break
        return True, remaining, bound


class Either(BranchPattern):
    def match(self, left, collected=None):
        collected = [] if collected is None else collected
        outcomes = [
            outcome for outcome in (pattern.match(left, collected) for pattern in self.children)
            if outcome[0]
        ]
        if outcomes:
            # min() keeps the earliest alternative on ties
            return min(outcomes, key=lambda outcome: len(outcome[1]))
        return False, left, collected


class Registry:
    """
    ordered collection of the Option entries known to one parse.

    entries come from the options sections (sextant.grammar.parse_defaults) and
    from first sightings in the usage lines; duplicates are kept so ambiguous
    definitions can be reported by the parser.
    """
    __slots__ = ("_options",)

    def __init__(self, options=(), /):
        self._options = list(options)

    def register(self, option, /):
        if not isinstance(option, Option):
            raise TypeError("register() argument must be an Option")
        self._options.append(option)
        return option

    def short(self, name, /):
        return [option for option in self._options if option.short == name]

    def long(self, name, /):
        return [option for option in self._options if option.long == name]

    def prefix(self, name, /):
        return [option for option in self._options if option.long and option.long.startswith(name)]

    def distinct(self):
        return list(dict.fromkeys(self._options))

    def __iter__(self):
        return iter(self._options)

    def __len__(self):
        return len(self._options)

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self._options)


def _expand(pattern):
    """
    expand a tree into its alternatives: Either(Required(*leaves), ...).

    every Either multiplies the cases; OneOrMore contributes its child twice so a
    repeatable leaf is counted as repeated; the other branches are flattened.
    """
    result = []
    groups = [[pattern]]
    while groups:
        children = groups.pop(0)
        index = next((index for index, child in enumerate(children) if isinstance(child, BranchPattern)), None)
        if index is None:
            result.append(children)
            continue
        branch = children.pop(index)
        match branch:
            case Either():
                groups.extend([child] + children for child in branch.children)
            case OneOrMore():
                groups.append(branch.children * 2 + children)
            case _:
                groups.append(branch.children + children)
    return Either(*(Required(*case) for case in result))


__all__ = (
    "Pattern",
    "LeafPattern",
    "BranchPattern",
    "Argument",
    "Command",
    "Option",
    "Required",
    "Optional",
    "OptionsShortcut",
    "OneOrMore",
    "Either",
    "Registry",
)
