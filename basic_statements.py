"""Statement grammar for line-numbered BASIC.

Forfeited into the public domain with NO WARRANTY. Read LICENSE for details.

One rule per keyword, tried in a fixed order, plus `:` for chaining several
statements on one line. Jump targets (GOTO, GOSUB, IF ... THEN, ON ... GOTO)
are kept as raw line numbers: whether those lines exist is for whatever runs
the program to find out.

The trial order matters. LET's keyword is optional, so a bare assignment
like `A=1` is tried after PRINT and REM but before every other keyword, and
a keyword statement only reaches its own rule once the LET rule has failed
to find `=` after the keyword's first letter. Rearranging `_STATEMENT_RULES`
changes which programs parse.
"""

import dataclasses

import basic_expressions
import basic_scanner

from typing import Optional, Union


@dataclasses.dataclass(frozen=True)
class Statement(basic_expressions.AstNode):
  """Base class for statements."""

@dataclasses.dataclass(frozen=True)
class StatementLet(Statement):
  """Node for assignments, with or without the LET keyword."""
  target: Union[basic_expressions.ExpressionVariable,
                basic_expressions.ExpressionArray]
  value: basic_expressions.Expression

@dataclasses.dataclass(frozen=True)
class StatementPrint(Statement):
  """Node for PRINT statements."""
  expression: basic_expressions.StringExpression

@dataclasses.dataclass(frozen=True)
class StatementEnd(Statement):
  """Leaf node for END statements."""

@dataclasses.dataclass(frozen=True)
class StatementGoto(Statement):
  """Node for GOTO statements."""
  line: int

@dataclasses.dataclass(frozen=True)
class StatementIf(Statement):
  """Node for IF ... THEN statements. There is no ELSE."""
  condition: basic_expressions.BooleanExpression
  line: int

@dataclasses.dataclass(frozen=True)
class StatementFor(Statement):
  """Node for FOR statements."""
  variable: str
  start: basic_expressions.Expression
  end: basic_expressions.Expression
  step: basic_expressions.Expression

@dataclasses.dataclass(frozen=True)
class StatementNext(Statement):
  """Node for NEXT statements, naming one or more loop variables."""
  variables: tuple[str, ...]

@dataclasses.dataclass(frozen=True)
class StatementInput(Statement):
  """Node for INPUT statements."""
  prompt: str
  variables: tuple[str, ...]

@dataclasses.dataclass(frozen=True)
class StatementGosub(Statement):
  """Node for GOSUB statements."""
  line: int

@dataclasses.dataclass(frozen=True)
class StatementReturn(Statement):
  """Leaf node for RETURN statements."""

@dataclasses.dataclass(frozen=True)
class StatementDim(Statement):
  """Node for DIM statements. Array indices here are the bounds."""
  arrays: tuple[basic_expressions.ExpressionArray, ...]

@dataclasses.dataclass(frozen=True)
class StatementRem(Statement):
  """Leaf node for comments."""

@dataclasses.dataclass(frozen=True)
class StatementOnGoto(Statement):
  """Node for ON ... GOTO; the variable is a 1-based index into `lines`."""
  variable: str
  lines: tuple[int, ...]

@dataclasses.dataclass(frozen=True)
class StatementSequence(Statement):
  """Node for statements chained with `:`, nested to the right."""
  first: Statement
  rest: Statement


def parse_statement(text: str) -> Statement:
  """Parse a complete statement (or `:`-chained statements)."""
  return basic_scanner.parse_all(statement, text)


def statement(
    s: basic_scanner.Scanner, pos: int) -> basic_scanner.Result[Statement]:
  """A statement sequence if there's a `:`, else a single statement.

  The first statement is parsed only once; if what follows it is not `:`
  and more statements, it is the result on its own.
  """
  first = _single_statement(s, pos)
  if first is None: return None
  first_statement, after_first = first
  pos = s.symbol(s.spaces(after_first), ':')
  if pos is None: return first
  rest = statement(s, s.spaces(pos))
  if rest is None: return first
  rest_statement, pos = rest
  return StatementSequence(first_statement, rest_statement), pos


def _single_statement(s, pos):
  return s.first_of(pos, *_STATEMENT_RULES)


### Keyword rules ###


def _keyword(s, pos, keyword) -> Optional[int]:
  """Match a keyword and any spaces after it."""
  pos = s.symbol(pos, keyword)
  return None if pos is None else s.spaces(pos)


def _rem(s, pos):
  pos = s.symbol(pos, 'REM')
  if pos is None: return None
  return StatementRem(), s.rest_of_line(pos)


def _print(s, pos):
  pos = _keyword(s, pos, 'PRINT')
  if pos is None: return None
  printed = basic_expressions.string_expression(s, pos)
  if printed is None:
    return StatementPrint(basic_expressions.StringLiteral('')), pos
  expression, pos = printed
  return StatementPrint(expression), pos


def _let(s, pos):
  # Once the keyword matches, a bare assignment is not tried in its place.
  after_keyword = _keyword(s, pos, 'LET')
  if after_keyword is not None: pos = after_keyword
  target = s.first_of(pos, basic_expressions.array_reference,
                      basic_expressions.variable)
  if target is None: return None
  target_expression, pos = target
  pos = s.symbol(s.spaces(pos), '=')
  if pos is None: return None
  value = basic_expressions.expression(s, s.spaces(pos))
  if value is None: return None
  value_expression, pos = value
  return StatementLet(target_expression, value_expression), pos


def _end(s, pos):
  pos = s.symbol(pos, 'END')
  if pos is None: return None
  return StatementEnd(), pos


def _jump(s, pos, keyword, node_type):
  pos = _keyword(s, pos, keyword)
  if pos is None: return None
  line = s.integer(pos)
  if line is None: return None
  line_number, pos = line
  return node_type(line_number), pos


def _goto(s, pos):
  return _jump(s, pos, 'GOTO', StatementGoto)


def _gosub(s, pos):
  return _jump(s, pos, 'GOSUB', StatementGosub)


def _if(s, pos):
  pos = _keyword(s, pos, 'IF')
  if pos is None: return None
  condition = basic_expressions.boolean_expression(s, pos)
  if condition is None: return None
  condition_expression, pos = condition
  pos = _keyword(s, s.spaces(pos), 'THEN')
  if pos is None: return None
  line = s.integer(pos)
  if line is None: return None
  line_number, pos = line
  return StatementIf(condition_expression, line_number), pos


def _for(s, pos):
  pos = _keyword(s, pos, 'FOR')
  if pos is None: return None
  named = s.letter(pos)
  if named is None: return None
  name, pos = named
  pos = s.symbol(s.spaces(pos), '=')
  if pos is None: return None
  start = basic_expressions.expression(s, s.spaces(pos))
  if start is None: return None
  start_expression, pos = start
  pos = _keyword(s, s.spaces(pos), 'TO')
  if pos is None: return None
  end = basic_expressions.expression(s, pos)
  if end is None: return None
  end_expression, pos = end

  # The STEP clause is optional.
  step_expression = basic_expressions.ExpressionInteger(1)
  after_step = _keyword(s, s.spaces(pos), 'STEP')
  if after_step is not None:
    step = basic_expressions.expression(s, after_step)
    if step is None: return None
    step_expression, pos = step

  return StatementFor(name, start_expression, end_expression,
                      step_expression), pos


def _next(s, pos):
  pos = _keyword(s, pos, 'NEXT')
  if pos is None: return None
  names = s.separated(pos, basic_scanner.Scanner.letter)
  if names is None: return None
  variables, pos = names
  return StatementNext(variables), pos


def _input(s, pos):
  pos = _keyword(s, pos, 'INPUT')
  if pos is None: return None
  operand_pos = pos
  operand = basic_expressions.string_expression(s, pos)
  if operand is None: return None
  operand_expression, pos = operand
  shape = _input_shape(operand_expression)
  if shape is None:
    return s.fail(operand_pos, 'an optional "prompt"; and variable names')
  prompt, variables = shape
  return StatementInput(prompt, variables), pos


def _input_shape(
    operand: basic_expressions.StringExpression
) -> Optional[tuple[str, tuple[str, ...]]]:
  """Make sense of INPUT's operand, which parses as a string expression.

  Only two shapes are acceptable: `"prompt";A,B,...` and `A,B,...`.

  Args:
    operand: The string expression following the INPUT keyword.

  Returns:
    None if `operand` is neither shape, otherwise the prompt (empty if there
    isn't one) and the names of the variables to read.
  """
  match operand:
    case basic_expressions.StringConcat(
        left=basic_expressions.StringLiteral(text=prompt), right=rest):
      variables = _input_variables(rest)
      return None if variables is None else (prompt, variables)
    case _:
      variables = _input_variables(operand)
      return None if variables is None else ('', variables)


def _input_variables(
    operand: basic_expressions.StringExpression
) -> Optional[tuple[str, ...]]:
  """Names of the variables in a `,`-separated list, or None."""
  match operand:
    case basic_expressions.StringNumber(
        expression=basic_expressions.ExpressionVariable(name=name)):
      return (name,)
    case basic_expressions.StringConcatTab(
        left=basic_expressions.StringNumber(
            expression=basic_expressions.ExpressionVariable(name=name)),
        right=rest):
      more = _input_variables(rest)
      return None if more is None else (name,) + more
    case _:
      return None


def _return(s, pos):
  pos = s.symbol(pos, 'RETURN')
  if pos is None: return None
  return StatementReturn(), pos


def _dim(s, pos):
  pos = _keyword(s, pos, 'DIM')
  if pos is None: return None
  declared = s.separated(pos, basic_expressions.array_reference)
  if declared is None: return None
  arrays, pos = declared
  return StatementDim(arrays), pos


def _on_goto(s, pos):
  pos = _keyword(s, pos, 'ON')
  if pos is None: return None
  named = s.letter(pos)
  if named is None: return None
  name, pos = named
  pos = _keyword(s, s.spaces(pos), 'GOTO')
  if pos is None: return None
  targets = s.separated(pos, basic_scanner.Scanner.integer)
  if targets is None: return None
  lines, pos = targets
  return StatementOnGoto(name, lines), pos


_STATEMENT_RULES = (
    _rem,
    _print,
    _let,
    _end,
    _goto,
    _gosub,
    _if,
    _for,
    _next,
    _input,
    _return,
    _dim,
    _on_goto,
)
