"""Backtracking scanner for line-numbered BASIC.

Forfeited into the public domain with NO WARRANTY. Read LICENSE for details.

Grammar rules throughout the `basic_expressions` and `basic_statements`
modules are plain functions with the signature `rule(scanner, pos)`. A rule
tries to recognise something starting at the absolute text offset `pos` and
returns either a `(value, new_pos)` tuple or `None` if it failed. Nothing is
ever consumed in place: the text and the offsets are immutable, so a failed
alternative has nothing to rewind, and the next alternative simply tries
again from the same `pos`. There is no separate tokenising pass; primitives
in the `Scanner` class read characters directly.

Ordered choice (`Scanner.first_of`) commits to the first alternative that
succeeds. If the caller then fails, the remaining alternatives are not
revisited. This makes rule trial order significant, and most of the
grammar's peculiarities follow from it.

Failures are ordinary `None` values inside the grammar, but the scanner
remembers the farthest offset at which any primitive failed and what it
wanted to see there. At the API boundary that is turned into a single
`BasicParseError`.
"""

import re

import lark

from typing import Callable, Collection, Optional, TypeVar


T = TypeVar('T')
Result = Optional[tuple[T, int]]
Rule = Callable[['Scanner', int], Result[T]]


class BasicParseError(lark.exceptions.ParseError,
                      lark.exceptions.UnexpectedInput):
  """The one failure reported for a text that does not parse.

  Instances sit in lark's exception hierarchy so that callers who already
  handle lark's `UnexpectedInput` can treat them alike, and so that
  `get_context()` can point at the offending place in the source.

  Attributes:
    pos_in_stream: Absolute offset of the failure in the source text.
    line: 1-based line number of the failure.
    column: 1-based column number of the failure.
    expected: Sorted descriptions of what would have been acceptable there.
    description: Human-readable description of the failure.
  """

  def __init__(self, text: str, pos: int,
               expected: Collection[str] = (),
               description: Optional[str] = None):
    self.pos_in_stream = pos
    self.line = text.count('\n', 0, pos) + 1
    self.column = pos - (text.rfind('\n', 0, pos) + 1) + 1
    self.expected = tuple(sorted(set(expected)))
    if description is None:
      description = f'expected {_describe(self.expected)}'
    self.description = description
    super().__init__(
        f'Line {self.line}, column {self.column}: {self.description}')


class FatalParseError(BasicParseError):
  """A parse failure that must not be retried by any other alternative.

  Raised for input that the grammar reaches but deliberately leaves
  undefined, e.g. calls to functions other than the built-in ones.
  """


class Scanner:
  """Read-only view of a text span, plus farthest-failure bookkeeping.

  Attributes:
    text: The complete source text. Offsets are always relative to this.
    start: Offset of the first character in the span to scan.
    end: Offset just past the last character in the span to scan. Nothing at
        or beyond `end` is visible to the primitives.
    farthest: Largest offset at which a primitive has failed so far.
    expected: What the primitives that failed at `farthest` wanted.
  """

  def __init__(self, text: str, start: int = 0, end: Optional[int] = None):
    self.text = text
    self.start = start
    self.end = len(text) if end is None else end
    self.farthest = start
    self.expected: set[str] = set()

  ### Failure bookkeeping ###

  def fail(self, pos: int, expected: str) -> None:
    """Note that `expected` was wanted at `pos`; always returns None."""
    if pos > self.farthest:
      self.farthest = pos
      self.expected = {expected}
    elif pos == self.farthest:
      self.expected.add(expected)
    return None

  def error(self) -> BasicParseError:
    """Build the error describing the farthest failure seen so far."""
    return BasicParseError(self.text, self.farthest, self.expected)

  def fatal(self, pos: int, description: str) -> FatalParseError:
    """Build an error that aborts the whole parse."""
    return FatalParseError(self.text, pos, description=description)

  ### Combinators ###

  def first_of(self, pos: int, *rules: Rule) -> Result:
    """Ordered choice: the result of the first rule to succeed at `pos`."""
    for rule in rules:
      result = rule(self, pos)
      if result is not None: return result
    return None

  def separated(self, pos: int, rule: Rule[T],
                separator: str = ',') -> Result[tuple[T, ...]]:
    """One or more `rule` matches, with `separator` (and spaces) between.

    A separator that isn't followed by another match fails the whole list.
    """
    first = rule(self, pos)
    if first is None: return None
    item, pos = first
    items = [item]
    while True:
      after_separator = self.symbol(self.spaces(pos), separator)
      if after_separator is None: return tuple(items), pos
      following = rule(self, self.spaces(after_separator))
      if following is None: return None
      item, pos = following
      items.append(item)

  ### Primitives ###

  def spaces(self, pos: int) -> int:
    """Skip ASCII spaces (and nothing else: newlines are significant)."""
    while pos < self.end and self.text[pos] == ' ': pos += 1
    return pos

  def symbol(self, pos: int, symbol: str) -> Optional[int]:
    """Match literal text like a keyword or an operator."""
    after = pos + len(symbol)
    if after <= self.end and self.text.startswith(symbol, pos): return after
    return self.fail(pos, repr(symbol))

  def match(self, pos: int, pattern: re.Pattern,
            expected: str) -> Result[str]:
    """Match a compiled regular expression, yielding the matched text."""
    matched = pattern.match(self.text, pos, self.end)
    if matched is None: return self.fail(pos, expected)
    return matched.group(0), matched.end()

  def integer(self, pos: int) -> Result[int]:
    """Match an unsigned decimal integer."""
    matched = self.match(pos, _INTEGER, 'an integer')
    if matched is None: return None
    digits, pos = matched
    return int(digits), pos

  def real(self, pos: int) -> Result[float]:
    """Match an unsigned decimal number with a fractional part."""
    matched = self.match(pos, _REAL, 'a real number')
    if matched is None: return None
    digits, pos = matched
    return float(digits), pos

  def letter(self, pos: int) -> Result[str]:
    """Match a single ASCII letter, the only kind of BASIC identifier."""
    return self.match(pos, _LETTER, 'a variable name')

  def quoted(self, pos: int) -> Result[str]:
    """Match text between double quotes. There are no escapes."""
    matched = self.match(pos, _QUOTED, 'a quoted string')
    if matched is None: return None
    text, pos = matched
    return text[1:-1], pos

  def rest_of_line(self, pos: int) -> int:
    """Consume everything that remains in the span."""
    return self.end

  def end_of_line(self, pos: int) -> Optional[int]:
    """Succeed only at the end of the span."""
    if pos == self.end: return pos
    return self.fail(pos, 'end of line')


def parse_all(rule: Rule[T], text: str,
              start: int = 0, end: Optional[int] = None) -> T:
  """Apply `rule` to an entire text span, allowing trailing spaces.

  Args:
    rule: Grammar rule to apply.
    text: Complete source text.
    start: Offset where the span to parse begins.
    end: Offset just past the end of the span; defaults to the end of `text`.

  Returns:
    Whatever `rule` produced.

  Raises:
    BasicParseError: `rule` did not match the whole span.
  """
  scanner = Scanner(text, start, end)
  result = rule(scanner, start)
  if result is not None:
    value, pos = result
    if scanner.end_of_line(scanner.spaces(pos)) is not None: return value
  raise scanner.error()


_INTEGER = re.compile(r'[0-9]+')
_REAL = re.compile(r'[0-9]+\.[0-9]+')
_LETTER = re.compile(r'[A-Za-z]')
_QUOTED = re.compile(r'"[^"]*"')


def _describe(expected: Collection[str]) -> str:
  """Join descriptions of expected things into a phrase."""
  items = list(expected)
  if not items: return 'something else'
  if len(items) == 1: return items[0]
  return f'one of {", ".join(items[:-1])} or {items[-1]}'
