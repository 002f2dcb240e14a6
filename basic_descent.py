"""Walking BASIC parse trees, and finding jump targets in them.

Forfeited into the public domain with NO WARRANTY. Read LICENSE for details.

Parse tree nodes are dataclasses, so their children are simply whichever
fields hold other nodes (or tuples of them). `nodes` visits a whole tree in
pre-order on top of that, and `line_references` uses it to collect the line
numbers that GOTO, GOSUB, IF ... THEN, and ON ... GOTO may transfer control
to. None of this checks those numbers against a program.
"""

import dataclasses

import basic_expressions
import basic_statements

from typing import Iterator


def children(
    ast: basic_expressions.AstNode) -> list[basic_expressions.AstNode]:
  """Retrieve all parse tree node children of this parse tree node."""
  kids: list[basic_expressions.AstNode] = []
  for field in dataclasses.fields(ast):
    sub_ast = getattr(ast, field.name)
    if isinstance(sub_ast, tuple):
      kids.extend(n for n in sub_ast
                  if isinstance(n, basic_expressions.AstNode))
    elif isinstance(sub_ast, basic_expressions.AstNode):
      kids.append(sub_ast)
  return kids


def nodes(
    ast: basic_expressions.AstNode) -> Iterator[basic_expressions.AstNode]:
  """Yield `ast` and everything under it, parents before children.

  Children come in the order of their dataclass fields, so e.g. the left
  operand of a binary expression comes before the right one.
  """
  pending = [ast]
  while pending:
    node = pending.pop()
    yield node
    pending.extend(reversed(children(node)))


def line_references(ast: basic_expressions.AstNode) -> tuple[int, ...]:
  """Line numbers that statements within `ast` may jump to.

  Args:
    ast: Root of the parse tree to search, usually a Statement.

  Returns:
    Referenced line numbers, ascending and without repeats.
  """
  found: set[int] = set()
  for node in nodes(ast):
    match node:
      case (basic_statements.StatementGoto(line=line) |
            basic_statements.StatementGosub(line=line) |
            basic_statements.StatementIf(line=line)):
        found.add(line)
      case basic_statements.StatementOnGoto(lines=lines):
        found.update(lines)
  return tuple(sorted(found))
