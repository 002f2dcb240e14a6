"""Tests for the basic_descent module.

Forfeited into the public domain with NO WARRANTY. Read LICENSE for details.
"""

import unittest

import basic_descent
import basic_expressions
import basic_parser
import basic_statements


# Source code used by all of the tests in this module. You'll want to check
# what the tests do before you change this code.
SOURCE_TEXT = """\
10 INPUT "How many";N
20 FOR I=1 TO N:GOSUB 100:NEXT I
30 IF N>10 THEN 60
40 ON N GOTO 60,70,60
50 END
60 PRINT "Big"
70 GOTO 50
100 LET T=T+I*I:PRINT T,:RETURN"""


def parse(source_text: str) -> list[basic_statements.Statement]:
  """Convert source text into a list of statements in line number order."""
  program = basic_parser.parse_program(source_text)
  return [line.statement for _, line in program.walk()]


class BasicDescentTest(unittest.TestCase):
  """Test harness for testing the basic_descent module."""

  def test_children(self):
    """Children come back in field order, including those inside tuples."""
    dim = basic_statements.parse_statement('DIM A(2), B(3)')
    self.assertEqual([type(kid).__name__
                      for kid in basic_descent.children(dim)],
                     ['ExpressionArray', 'ExpressionArray'])
    self.assertEqual(basic_descent.children(basic_statements.StatementEnd()),
                     [])

  def test_nodes(self):
    """Counting variable references in each line of a program."""
    counts = [
        sum(isinstance(node, basic_expressions.ExpressionVariable)
            for node in basic_descent.nodes(statement))
        for statement in parse(SOURCE_TEXT)]
    self.assertEqual(counts, [0, 1, 1, 0, 0, 0, 0, 5])

  def test_nodes_order(self):
    """Nodes are visited before their children, left before right."""
    visited = [
        node.name for node in basic_descent.nodes(
            basic_statements.parse_statement('LET A=B+C*D'))
        if isinstance(node, basic_expressions.ExpressionVariable)]
    self.assertEqual(visited, ['A', 'B', 'C', 'D'])

  def test_line_references(self):
    """All line numbers that statements may jump to."""
    references: set[int] = set()
    for statement in parse(SOURCE_TEXT):
      references.update(basic_descent.line_references(statement))
    self.assertEqual(sorted(references), [50, 60, 70, 100])

    self.assertEqual(
        basic_descent.line_references(basic_statements.parse_statement(
            'IF A=1 THEN 300:ON B GOTO 20,10:GOSUB 300')),
        (10, 20, 300))
    self.assertEqual(
        basic_descent.line_references(basic_statements.StatementEnd()), ())


if __name__ == '__main__':
  unittest.main()
