"""
Sextant token streams.

A Tokens object is a consumable cursor over strings, shared by the two parsing phases:
- the usage document, split by Tokens.from_pattern() (errors are LanguageError);
- the argument vector, wrapped by Tokens(argv) (errors are InputError).

The phase is a tag carried by the cursor (tokens.error), not a subtype, so the option
parsers in sextant.grammar serve both phases and ask the cursor which fault to raise.
"""
import re
from collections import deque

from .faults import InputError, LanguageError, getdoc


class Tokens:
    """
    positional cursor over a token sequence.

    operations
    - current(): the element under the cursor, or None when exhausted.
    - move(): consume and return the current element (None when exhausted; the cursor
      never goes past the end).
    - iteration drains every remaining element in order.
    - fault(message, code=..., **options): build an error of the cursor's kind.
    """
    __slots__ = ("_queue", "error")

    def __init__(self, source=(), /, *, error=InputError):
        if isinstance(source, str):
            source = source.split()
        if error not in (InputError, LanguageError):
            raise TypeError("Tokens() error must be InputError or LanguageError")
        self._queue = deque(source)
        self.error = error

    @classmethod
    def from_pattern(cls, source, /):
        """
        split a formal usage string into grammar tokens.

        '[', ']', '(', ')', '|' and '...' always stand alone; a word ending in a
        '<...>' placeholder stays whole even when the placeholder holds spaces.
        """
        source = re.sub(r"([\[\]()|]|\.\.\.)", r" \1 ", source)
        return cls(
            (token for token in re.split(r"\s+|(\S*<.*?>)", source) if token),
            error=LanguageError
        )

    def current(self):
        return self._queue[0] if self._queue else None

    def move(self):
        return self._queue.popleft() if self._queue else None

    def fault(self, message, /, code, **options):
        return self.error(message, code=code, docs=getdoc(code), **options)

    def __iter__(self):
        while self._queue:
            yield self._queue.popleft()

    def __bool__(self):
        return bool(self._queue)

    def __repr__(self):
        return "%s(%r, error=%s)" % (type(self).__name__, list(self._queue), self.error.__name__)


__all__ = (
    "Tokens",
)
