"""Expression grammars for line-numbered BASIC.

Forfeited into the public domain with NO WARRANTY. Read LICENSE for details.

Three related grammars live here, each built on the one before:

- Arithmetic expressions: numbers, single-letter variables, four-index array
  references, the built-in functions INT and RND, and the four binary
  operators.
- String expressions: what PRINT (and INPUT) accept. Quoted literals, numbers
  rendered as text, TAB(n), and fragments joined with `;` or `,`.
- Boolean expressions: what IF accepts. Comparisons of two arithmetic
  expressions joined with AND and OR.

The arithmetic grammar has an unusual precedence table. Every operator rule
restricts what may appear on its left so that no rule is left-recursive,
with the side effect that a repeated operator nests to the right and that
the operators bind, tightest first, in the order `*`, `/`, `+`, `-`. So
`1-2-3` is `1-(2-3)` and `8/4*2` is `8/(4*2)`. Programs written for this
dialect rely on that table, so it is reproduced as-is.

Where two alternatives of an ordered choice begin with the same rule at the
same offset, the rules below parse that shared prefix once and then branch
on what follows it. Since a rule's result depends only on the offset, this
gives the same trees (and the same errors) as trying each alternative from
scratch, but each rule now runs a bounded number of times per offset. A
parse therefore takes time roughly linear in the length of its input, no
matter how deeply parentheses nest.

Abstract syntax tree nodes are frozen dataclasses. The first half of this
file defines them; the second half holds the grammar rules, which follow the
calling conventions described in the `basic_scanner` module.
"""

import dataclasses
import enum
import re

import basic_scanner


### Generic AST node, for type checking.

@dataclasses.dataclass(frozen=True)
class AstNode:
  """Base class for all parse tree nodes."""


### Arithmetic expressions

class BinaryOp(enum.Enum):
  """Binary operations for ExpressionBinary."""
  ADD = 1
  SUBTRACT = 2
  MULTIPLY = 3
  DIVIDE = 4


class Function(enum.Enum):
  """Built-in functions for ExpressionFunction. There are no others."""
  INT = 1  # Truncation towards zero.
  RND = 2  # A random draw scaled by the argument.


@dataclasses.dataclass(frozen=True)
class Expression(AstNode):
  """Base class for arithmetic expressions."""

@dataclasses.dataclass(frozen=True)
class ExpressionInteger(Expression):
  """Leaf node for integer literals."""
  number: int

@dataclasses.dataclass(frozen=True)
class ExpressionReal(Expression):
  """Leaf node for floating-point literals."""
  number: float

@dataclasses.dataclass(frozen=True)
class ExpressionVariable(Expression):
  """Leaf node for scalar variable references."""
  name: str

@dataclasses.dataclass(frozen=True)
class ExpressionArray(Expression):
  """Node for array references (and array declarations in DIM).

  Arrays share their one-letter namespace with scalar variables; what tells
  them apart is that an array reference always has exactly four indices.
  """
  name: str
  indices: tuple[Expression, Expression, Expression, Expression]

@dataclasses.dataclass(frozen=True)
class ExpressionBinary(Expression):
  """Node for a binary operation."""
  op: BinaryOp
  expression_left: Expression
  expression_right: Expression

@dataclasses.dataclass(frozen=True)
class ExpressionFunction(Expression):
  """Node for a call to a built-in function."""
  function: Function
  argument: Expression


ARRAY_RANK = 4  # Number of indices in every ExpressionArray.


### String expressions

@dataclasses.dataclass(frozen=True)
class StringExpression(AstNode):
  """Base class for string (PRINT formatting) expressions."""

@dataclasses.dataclass(frozen=True)
class StringLiteral(StringExpression):
  """Leaf node for the text between two quote characters."""
  text: str

@dataclasses.dataclass(frozen=True)
class StringNumber(StringExpression):
  """Node for an arithmetic expression printed as text."""
  expression: Expression

@dataclasses.dataclass(frozen=True)
class StringTab(StringExpression):
  """Leaf node for TAB(n): move the output to column n."""
  column: int

@dataclasses.dataclass(frozen=True)
class StringConcat(StringExpression):
  """Fragments joined by `;`: printed with nothing in between."""
  left: StringExpression
  right: StringExpression

@dataclasses.dataclass(frozen=True)
class StringConcatTab(StringExpression):
  """Fragments joined by `,`: the right one starts at the next tab stop."""
  left: StringExpression
  right: StringExpression

@dataclasses.dataclass(frozen=True)
class StringTrailingSuppressNewline(StringExpression):
  """An expression ending in `;`: no line break after printing it."""
  expression: StringExpression

@dataclasses.dataclass(frozen=True)
class StringTrailingTab(StringExpression):
  """An expression ending in `,`: go to the next tab stop, not a new line."""
  expression: StringExpression


### Boolean expressions

class ComparisonOp(enum.Enum):
  """Comparison operations for BooleanComparison."""
  EQUAL = 1
  NOT_EQUAL = 2
  LESS = 3
  GREATER = 4
  LESS_OR_EQUAL = 5
  GREATER_OR_EQUAL = 6


class LogicalOp(enum.Enum):
  """Logical operations for BooleanLogical."""
  AND = 1
  OR = 2


@dataclasses.dataclass(frozen=True)
class BooleanExpression(AstNode):
  """Base class for boolean (IF condition) expressions."""

@dataclasses.dataclass(frozen=True)
class BooleanComparison(BooleanExpression):
  """Node comparing two arithmetic expressions."""
  op: ComparisonOp
  expression_left: Expression
  expression_right: Expression

@dataclasses.dataclass(frozen=True)
class BooleanLogical(BooleanExpression):
  """Node combining two boolean expressions."""
  op: LogicalOp
  expression_left: BooleanExpression
  expression_right: BooleanExpression


#######################
#### ENTRY POINTS ####
#######################


def parse_expression(text: str) -> Expression:
  """Parse a complete arithmetic expression, e.g. `1+2*A(3)`."""
  return basic_scanner.parse_all(expression, text)


def parse_string_expression(text: str) -> StringExpression:
  """Parse a complete string expression, e.g. `"X=";X;`."""
  return basic_scanner.parse_all(string_expression, text)


def parse_boolean_expression(text: str) -> BooleanExpression:
  """Parse a complete boolean expression, e.g. `A<>1 AND B>=2`."""
  return basic_scanner.parse_all(boolean_expression, text)


#######################
#### ARITHMETIC ####
#######################


def expression(
    s: basic_scanner.Scanner, pos: int) -> basic_scanner.Result[Expression]:
  """Any arithmetic expression; the loosest-binding operator is `-`."""
  return _binary(s, pos, BinaryOp.SUBTRACT, '-', _sum, expression)


def _binary(s, pos, op, symbol, operand, right_rule):
  """An `operand`, then optionally `symbol` and a `right_rule` match.

  This is the ordered choice "operand symbol right_rule" before plain
  "operand". Both alternatives start with the same operand at the same
  offset, so it is parsed once and shared, and if the first alternative
  fails after it, the operand alone is the result.
  """
  left = operand(s, pos)
  if left is None: return None
  expression_left, after_left = left
  pos = s.symbol(s.spaces(after_left), symbol)
  if pos is None: return left
  right = right_rule(s, s.spaces(pos))
  if right is None: return left
  expression_right, pos = right
  return ExpressionBinary(op, expression_left, expression_right), pos


# An operator's left operand can't contain that operator or any looser one.
# Its right operand can repeat it, hence the right-nesting.

def _sum(s, pos):
  return _binary(s, pos, BinaryOp.ADD, '+', _quotient, _sum)


def _quotient(s, pos):
  return _binary(s, pos, BinaryOp.DIVIDE, '/', _product, _quotient)


def _product(s, pos):
  return _binary(s, pos, BinaryOp.MULTIPLY, '*', _atom, _product)


def _atom(s, pos):
  return s.first_of(pos,
                    _parenthesised,
                    _function_call,
                    _negation,
                    _real,
                    _integer,
                    array_reference,
                    variable)


def _parenthesised(s, pos):
  pos = s.symbol(pos, '(')
  if pos is None: return None
  inner = expression(s, s.spaces(pos))
  if inner is None: return None
  inner_expression, pos = inner
  pos = s.symbol(s.spaces(pos), ')')
  if pos is None: return None
  return inner_expression, pos


def _function_call(s, pos):
  """A call like INT(X). Unknown function names abort the parse."""
  named = s.match(pos, _FUNCTION_NAME, 'a function name')
  if named is None: return None
  name, after_name = named
  try:
    function = Function[name]
  except KeyError:
    raise s.fatal(pos, f'unknown function {name}') from None
  argument = _parenthesised(s, after_name)
  if argument is None: return None
  argument_expression, pos = argument
  return ExpressionFunction(function, argument_expression), pos


def _negation(s, pos):
  """Unary minus, which becomes a multiplication by -1."""
  pos = s.symbol(pos, '-')
  if pos is None: return None
  operand = _atom(s, s.spaces(pos))
  if operand is None: return None
  operand_expression, pos = operand
  return ExpressionBinary(
      BinaryOp.MULTIPLY, ExpressionInteger(-1), operand_expression), pos


def _real(s, pos):
  number = s.real(pos)
  if number is None: return None
  value, pos = number
  return ExpressionReal(value), pos


def _integer(s, pos):
  number = s.integer(pos)
  if number is None: return None
  value, pos = number
  return ExpressionInteger(value), pos


def array_reference(
    s: basic_scanner.Scanner,
    pos: int) -> basic_scanner.Result[ExpressionArray]:
  """An array reference like A(1,2): a letter, then 0 to 4 indices.

  Missing trailing indices are filled in with 0; indices beyond the fourth
  are parsed but then discarded.
  """
  named = s.letter(pos)
  if named is None: return None
  name, pos = named
  pos = s.symbol(pos, '(')
  if pos is None: return None
  pos = s.spaces(pos)
  listed = s.separated(pos, expression)
  indices: tuple[Expression, ...] = ()
  if listed is not None: indices, pos = listed
  pos = s.symbol(s.spaces(pos), ')')
  if pos is None: return None
  padding = (ExpressionInteger(0),) * ARRAY_RANK
  return ExpressionArray(name, (indices + padding)[:ARRAY_RANK]), pos


def variable(
    s: basic_scanner.Scanner,
    pos: int) -> basic_scanner.Result[ExpressionVariable]:
  """A scalar variable reference: one letter."""
  named = s.letter(pos)
  if named is None: return None
  name, pos = named
  return ExpressionVariable(name), pos


_FUNCTION_NAME = re.compile(r'[A-Z]{2,}(?=\()')


#######################
#### STRINGS ####
#######################


def string_expression(
    s: basic_scanner.Scanner,
    pos: int) -> basic_scanner.Result[StringExpression]:
  """A string expression, possibly ending in a dangling `,` or `;`.

  The body is parsed once. A `,` right after it is tried before a `;`.
  """
  body = string_body(s, pos)
  if body is None: return None
  body_expression, after_body = body
  for separator, node_type in _TRAILING:
    pos = s.symbol(after_body, separator)
    if pos is not None: return node_type(body_expression), pos
  return body


def string_body(
    s: basic_scanner.Scanner,
    pos: int) -> basic_scanner.Result[StringExpression]:
  """A string expression without any dangling separator.

  That's a fragment, then optionally a separator right away and more string
  body. Joining with `;` is tried before joining with `,`. If neither works
  out, the fragment stands alone.
  """
  fragment = _string_fragment(s, pos)
  if fragment is None: return None
  left_expression, after_left = fragment
  for separator, node_type in _JOINS:
    pos = s.symbol(after_left, separator)
    if pos is None: continue
    right = string_body(s, s.spaces(pos))
    if right is None: continue
    right_expression, pos = right
    return node_type(left_expression, right_expression), pos
  return fragment


def _string_fragment(s, pos):
  # TAB(n) comes before numbers, which would see TAB as an unknown function.
  return s.first_of(pos, _string_literal, _tab, _string_number)


def _string_literal(s, pos):
  quoted = s.quoted(pos)
  if quoted is None: return None
  text, pos = quoted
  return StringLiteral(text), pos


def _tab(s, pos):
  pos = s.symbol(pos, 'TAB(')
  if pos is None: return None
  column = s.integer(s.spaces(pos))
  if column is None: return None
  number, pos = column
  pos = s.symbol(s.spaces(pos), ')')
  if pos is None: return None
  return StringTab(number), pos


def _string_number(s, pos):
  number = expression(s, pos)
  if number is None: return None
  number_expression, pos = number
  return StringNumber(number_expression), pos


_TRAILING = ((',', StringTrailingTab), (';', StringTrailingSuppressNewline))
_JOINS = ((';', StringConcat), (',', StringConcatTab))


#######################
#### BOOLEANS ####
#######################


def boolean_expression(
    s: basic_scanner.Scanner,
    pos: int) -> basic_scanner.Result[BooleanExpression]:
  """A boolean expression: AND chains, then OR chains, then comparisons.

  Since ordered choice commits, an AND chain followed by OR (`a AND b OR c`)
  leaves the OR unconsumed, and the statement around it fails to parse.

  All three alternatives start with the same comparison, which is parsed
  once. Only when no AND chain follows can an OR chain come next, so the
  left operand of an OR is always a lone comparison.
  """
  first = _comparison(s, pos)
  if first is None: return None
  conjunction = _logical_tail(s, first, LogicalOp.AND, 'AND', _conjunction)
  if conjunction is not None: return conjunction
  disjunction = _logical_tail(
      s, first, LogicalOp.OR, 'OR', boolean_expression)
  if disjunction is not None: return disjunction
  return first


def _logical_tail(s, left, op, keyword, right_rule):
  """`keyword` and a `right_rule` match after an already parsed `left`."""
  expression_left, pos = left
  pos = s.symbol(s.spaces(pos), keyword)
  if pos is None: return None
  right = right_rule(s, s.spaces(pos))
  if right is None: return None
  expression_right, pos = right
  return BooleanLogical(op, expression_left, expression_right), pos


def _conjunction(s, pos):
  """An AND chain if there is one, else a lone comparison."""
  first = _comparison(s, pos)
  if first is None: return None
  conjunction = _logical_tail(s, first, LogicalOp.AND, 'AND', _conjunction)
  return first if conjunction is None else conjunction


def _comparison(s, pos):
  left = expression(s, pos)
  if left is None: return None
  expression_left, pos = left
  pos = s.spaces(pos)
  for symbol, op in _COMPARISON_OPS:
    after_symbol = s.symbol(pos, symbol)
    if after_symbol is not None: break
  else:
    return None
  right = expression(s, s.spaces(after_symbol))
  if right is None: return None
  expression_right, pos = right
  return BooleanComparison(op, expression_left, expression_right), pos


# Two-character operators precede their one-character prefixes.
_COMPARISON_OPS = (
    ('<>', ComparisonOp.NOT_EQUAL),
    ('<=', ComparisonOp.LESS_OR_EQUAL),
    ('>=', ComparisonOp.GREATER_OR_EQUAL),
    ('=', ComparisonOp.EQUAL),
    ('<', ComparisonOp.LESS),
    ('>', ComparisonOp.GREATER),
)
