"""Line-numbered BASIC program parser.

Forfeited into the public domain with NO WARRANTY. Read LICENSE for details.

This parser turns the text of a BASIC program into a `Program`: a table
mapping each line number to that line's statement and to the number of the
line that follows it. Whatever runs the program starts at `entry_line`, goes
to `next_line` after any statement that doesn't jump, and stops when
`next_line` is `END_OF_PROGRAM`.

Parsing happens in two stages. A small Lark grammar first splits the text
into numbered lines, so that malformed line framing (missing line numbers,
blank lines) is reported by Lark. The statement on each line is then parsed
by the backtracking grammar in `basic_statements`. Any failure becomes a
single `BasicParseError` pointing into the original text.

Lines may appear in any order in the source text: they are sorted by line
number. If a line number appears more than once, the last statement with that
number wins; a warning points this out but parsing goes on.

At the bottom of the module is some rudimentary infrastructure for aiding
pretty-printing, which may be useful for debugging the grammar.
"""

import dataclasses
import enum
import functools
import types
import warnings

import lark

import basic_scanner
import basic_statements

from typing import Iterator, Mapping, Sequence


END_OF_PROGRAM = -1  # The `next_line` of the last line in a program.


@dataclasses.dataclass(frozen=True)
class ProgramLine:
  """A statement and the number of the line after it."""
  statement: basic_statements.Statement
  next_line: int


@dataclasses.dataclass(frozen=True)
class Program:
  """A parsed program.

  Attributes:
    lines: Read-only mapping from line numbers to ProgramLines.
    entry_line: The smallest line number, where execution starts.
  """
  lines: Mapping[int, ProgramLine]
  entry_line: int

  def walk(self) -> Iterator[tuple[int, ProgramLine]]:
    """Visit lines in order by following `next_line` from `entry_line`."""
    line_number = self.entry_line
    while line_number != END_OF_PROGRAM:
      program_line = self.lines[line_number]
      yield line_number, program_line
      line_number = program_line.next_line


def parse_program(source_text: str) -> Program:
  """Parse the text of a line-numbered BASIC program.

  Args:
    source_text: Program text. Every line is a line number, spaces or tabs,
        and then a statement. Lines end with LF, CRLF, a lone CR, or the end
        of the text.

  Returns:
    The parsed program.

  Raises:
    BasicParseError: The program text failed to parse. Only the first failure
        is reported.
  """
  try:
    tree = _parser().parse(source_text)
  except lark.exceptions.UnexpectedInput as e:
    raise _from_lark_error(source_text, e) from None

  numbered_statements = [
      (line.number, basic_scanner.parse_all(
          basic_statements.statement, source_text, line.start, line.end))
      for line in _Transformer().transform(tree)]
  return assemble(numbered_statements)


def assemble(
    numbered_statements: Sequence[tuple[int, basic_statements.Statement]],
) -> Program:
  """Thread numbered statements into a Program.

  Args:
    numbered_statements: (line number, statement) pairs in source order.

  Returns:
    A Program whose lines are linked in ascending line number order. For
    duplicated line numbers, the pair that came last in `numbered_statements`
    is the one that survives.

  Raises:
    ValueError: `numbered_statements` is empty.
  """
  if not numbered_statements: raise ValueError(
      'A program needs at least one line')

  # sorted() is stable, so duplicates stay in source order. Linking each
  # duplicate to the next one means the survivor gets the right successor.
  ordered = sorted(numbered_statements, key=lambda pair: pair[0])
  successors = [number for number, _ in ordered[1:]] + [END_OF_PROGRAM]

  lines: dict[int, ProgramLine] = {}
  for (number, statement), next_line in zip(ordered, successors):
    if number in lines: warnings.warn(
        f'Line {number} is defined more than once; keeping the last one')
    lines[number] = ProgramLine(statement, next_line)

  return Program(types.MappingProxyType(lines), ordered[0][0])


### Line framing ###


@dataclasses.dataclass(frozen=True)
class _NumberedLine:
  """A line number and the span of the statement text that follows it."""
  number: int
  start: int
  end: int


class _Transformer(lark.Transformer):
  """Collapses the framing grammar's parse tree into _NumberedLines."""

  start = lambda self, items: items

  def LINE_NUMBER(self, token):
    return int(token)

  @lark.v_args(inline=True)
  def line(self, number, statement_text):
    return _NumberedLine(number, statement_text.start_pos,
                         statement_text.end_pos)


_GRAMMAR = r"""
start: line (_NEWLINE line)* _NEWLINE?

line: LINE_NUMBER _SPACES STATEMENT_TEXT

LINE_NUMBER: /[0-9]+/
STATEMENT_TEXT: /[^ \t\r\n][^\r\n]*/
_SPACES: /[ \t]+/
_NEWLINE: /\r\n?|\n/
"""


# How to describe the framing grammar's terminals in error messages.
_TERMINAL_DESCRIPTIONS = {
    'LINE_NUMBER': 'a line number',
    'STATEMENT_TEXT': 'a statement',
    '_SPACES': 'spaces or tabs',
    '_NEWLINE': 'end of line',
    '$END': 'end of input',
}


@functools.cache
def _parser() -> lark.Lark:
  """Create/retrieve a singleton Lark parser from the line grammar."""
  return lark.Lark(_GRAMMAR, parser='lalr')


def _from_lark_error(
    source_text: str,
    error: lark.exceptions.UnexpectedInput) -> basic_scanner.BasicParseError:
  """Convert a Lark failure into the error this module reports."""
  pos = error.pos_in_stream
  token = getattr(error, 'token', None)
  if pos is None or pos < 0 or getattr(token, 'type', None) == '$END':
    pos = len(source_text)
  terminals = (getattr(error, 'expected', None) or
               getattr(error, 'allowed', None) or ())
  return basic_scanner.BasicParseError(
      source_text, pos,
      [_TERMINAL_DESCRIPTIONS.get(name, name) for name in terminals])


#######################
#### ODDS AND ENDS ####
#######################


@dataclasses.dataclass
class Colour:
  """For coding and debugging: text that prints in colour.

  Uses ANSI escape codes to colour text; your terminal must support them.

  Attributes:
    colour_id: A numerical string that identifies a 3-bit or 4-bit foreground
        or background colour --- refer to the table at
        https://en.wikipedia.org/w/index.php?title=ANSI_escape_code&oldid=1128711850#3-bit_and_4-bit
    item: Text to print in colour.
  """
  colour_id: str
  item: str
  def __repr__(self):
    return f'\033[{self.colour_id}m{self.item}\033[0m'


def asdict_rec(ast):
  """For parser coding and debugging: make a printable program or AST.

  Transforms a Program or abstract syntax tree into nests of Python built-in
  types that pretty-print more compactly than the dataclasses do. Names of AST
  node types print in green; enum members print as their bare names.

  Recommended usage:
     import pprint
     pprint.pprint(asdict_rec(parse_program(my_code)))

  Args:
    ast: A Program, ProgramLine, or abstract syntax tree.

  Returns:
    A pretty-printable data structure as described.
  """
  match ast:
    case Program(lines=lines, entry_line=entry_line):
      return {'entry_line': entry_line,
              'lines': {number: asdict_rec(line)
                        for number, line in lines.items()}}
    case ProgramLine(statement=statement, next_line=next_line):
      return asdict_rec(statement), next_line
    case tuple():
      return tuple(asdict_rec(item) for item in ast)
    case str():
      return ast
    case enum.Enum():
      return ast.name
  if dataclasses.is_dataclass(ast):
    name = Colour('92', type(ast).__name__)
    fields = dataclasses.fields(ast)
    if fields:
      return name, {f.name: asdict_rec(getattr(ast, f.name)) for f in fields}
    else:
      return name
  else:
    return ast
