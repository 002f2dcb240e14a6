"""Tests for the basic_parser module.

Forfeited into the public domain with NO WARRANTY. Read LICENSE for details.
"""

import dataclasses
import textwrap
import time
import unittest

import basic_expressions as bx
import basic_parser
import basic_scanner
import basic_statements as bs


# A program used by several tests below. Lines are deliberately out of order.
SOURCE_TEXT = textwrap.dedent("""\
    10 REM Count to ten, twice over
    20 FOR I=1 TO 10
    40 NEXT I
    30 PRINT "I=";I
    50 GOSUB 100:IF I<20 THEN 20
    60 END
    100 LET I=I+1:RETURN
    """)


class BasicParserTest(unittest.TestCase):
  """Test harness for testing the basic_parser module."""

  def test_basic_example(self):
    """Mainly serves to show basic parser operation."""
    program = basic_parser.parse_program('10 LET A=1\n20 PRINT A\n30 END\n')

    self.assertEqual(program.entry_line, 10)
    self.assertEqual(dict(program.lines), {
        10: basic_parser.ProgramLine(
            bs.StatementLet(bx.ExpressionVariable('A'),
                            bx.ExpressionInteger(1)), 20),
        20: basic_parser.ProgramLine(
            bs.StatementPrint(bx.StringNumber(bx.ExpressionVariable('A'))),
            30),
        30: basic_parser.ProgramLine(
            bs.StatementEnd(), basic_parser.END_OF_PROGRAM),
    })

  def test_lines_are_sorted_and_linked(self):
    """Following next_line from entry_line visits each line once, in order."""
    program = basic_parser.parse_program(SOURCE_TEXT)

    self.assertEqual(program.entry_line, min(program.lines))
    visited = [number for number, _ in program.walk()]
    self.assertEqual(visited, [10, 20, 30, 40, 50, 60, 100])
    self.assertEqual(visited, sorted(program.lines))
    self.assertEqual(program.lines[100].next_line,
                     basic_parser.END_OF_PROGRAM)
    self.assertEqual(program.lines[30].statement,
                     bs.StatementPrint(bx.StringConcat(
                         bx.StringLiteral('I='),
                         bx.StringNumber(bx.ExpressionVariable('I')))))

  def test_duplicate_line_numbers(self):
    """The last statement with a given line number wins, with a warning."""
    with self.assertWarnsRegex(UserWarning, 'Line 10 is defined more than'):
      program = basic_parser.parse_program(
          '10 PRINT 1\n20 GOTO 10\n10 END\n')

    self.assertEqual(len(program.lines), 2)
    self.assertEqual(program.lines[10],
                     basic_parser.ProgramLine(bs.StatementEnd(), 20))
    self.assertEqual([number for number, _ in program.walk()], [10, 20])

  def test_duplicate_last_line(self):
    """A duplicated final line still ends the program."""
    with self.assertWarns(UserWarning):
      program = basic_parser.parse_program('10 PRINT 1\n10 END')
    self.assertEqual(program.lines[10],
                     basic_parser.ProgramLine(bs.StatementEnd(),
                                              basic_parser.END_OF_PROGRAM))

  def test_line_endings_and_trailing_spaces(self):
    """CRLF, lone CR, no final newline, and trailing spaces are all fine."""
    for text in ('10 END\r\n20 END\r\n', '10 END\n20 END',
                 '10 END   \n20 END ', '10 END\r20 END\r',
                 '10 END\r\n20 END\r'):
      with self.subTest(text=text):
        program = basic_parser.parse_program(text)
        self.assertEqual(sorted(program.lines), [10, 20])

  def test_tabs_after_line_numbers(self):
    """Tabs may separate a line number from its statement."""
    program = basic_parser.parse_program('10\tPRINT 1\n20 \t END\n')
    self.assertEqual(
        program.lines[10].statement,
        bs.StatementPrint(bx.StringNumber(bx.ExpressionInteger(1))))
    self.assertEqual(program.lines[20].statement, bs.StatementEnd())

    # Inside a statement, only spaces are skipped.
    with self.assertRaises(basic_scanner.BasicParseError) as context:
      basic_parser.parse_program('10 PRINT\t1')
    self.assertEqual(context.exception.column, 9)

  def test_nested_statements_parse_quickly(self):
    """Nesting inside statements doesn't make parsing time explode."""
    started = time.perf_counter()
    program = basic_parser.parse_program(textwrap.dedent("""\
        10 PRINT "A";INT(RND(1)*(X+(Y*2)))
        20 X=((((((((((1))))))))))
        30 IF D=1 OR ((((A))))>(((B))) AND ((C))<1 THEN 10
        40 PRINT (((1))); ((((2)))), (((3)));: X=(((X))): GOTO 10
        """))
    elapsed = time.perf_counter() - started

    self.assertEqual(sorted(program.lines), [10, 20, 30, 40])
    self.assertEqual(program.lines[20].statement,
                     bs.StatementLet(bx.ExpressionVariable('X'),
                                     bx.ExpressionInteger(1)))
    self.assertLess(elapsed, 2.0)

  def test_statement_errors(self):
    """Statement failures report absolute positions in the source text."""
    with self.assertRaises(basic_scanner.BasicParseError) as context:
      basic_parser.parse_program('10 LET = 1')
    self.assertEqual(context.exception.pos_in_stream, 7)

    with self.assertRaises(basic_scanner.BasicParseError) as context:
      basic_parser.parse_program('10 END\n20 LET = 1\n30 END\n')
    self.assertEqual(context.exception.pos_in_stream, 14)
    self.assertEqual(context.exception.line, 2)
    self.assertEqual(context.exception.column, 8)

  def test_framing_errors(self):
    """Lines without numbers and blank lines are rejected."""
    with self.assertRaises(basic_scanner.BasicParseError) as context:
      basic_parser.parse_program('PRINT 1\n')
    self.assertEqual(context.exception.pos_in_stream, 0)
    self.assertIn('a line number', context.exception.expected)

    with self.assertRaises(basic_scanner.BasicParseError) as context:
      basic_parser.parse_program('10 END\n\n20 END\n')
    self.assertEqual(context.exception.line, 2)

    with self.assertRaises(basic_scanner.BasicParseError):
      basic_parser.parse_program('')

  def test_programs_are_immutable(self):
    """Neither the program nor its line table can be changed."""
    program = basic_parser.parse_program('10 END')
    with self.assertRaises(TypeError):
      program.lines[20] = program.lines[10]  # type: ignore
    with self.assertRaises(dataclasses.FrozenInstanceError):
      program.entry_line = 20  # type: ignore

  def test_assemble(self):
    """assemble() needs at least one statement."""
    with self.assertRaises(ValueError):
      basic_parser.assemble([])
    program = basic_parser.assemble([(5, bs.StatementEnd())])
    self.assertEqual(program.entry_line, 5)

  def test_asdict_rec(self):
    """The pretty-printing helper flattens programs into built-in types."""
    program = basic_parser.parse_program('10 IF A=1 THEN 10')
    self.assertEqual(basic_parser.asdict_rec(program), {
        'entry_line': 10,
        'lines': {
            10: ((basic_parser.Colour('92', 'StatementIf'),
                  {'condition': (basic_parser.Colour('92', 'BooleanComparison'),
                                 {'op': 'EQUAL',
                                  'expression_left': (
                                      basic_parser.Colour(
                                          '92', 'ExpressionVariable'),
                                      {'name': 'A'}),
                                  'expression_right': (
                                      basic_parser.Colour(
                                          '92', 'ExpressionInteger'),
                                      {'number': 1})}),
                   'line': 10}),
                 basic_parser.END_OF_PROGRAM)}})
    self.assertEqual(basic_parser.asdict_rec(bs.StatementEnd()),
                     basic_parser.Colour('92', 'StatementEnd'))


if __name__ == '__main__':
  unittest.main()
