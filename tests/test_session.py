from pathlib import Path
import argparse
import unittest
from unittest import mock

from retrofit.diagnostics import Report, Listing, TooManyIssues
from retrofit.session import Session, split_forms
from retrofit.records import defrecord
from retrofit.render import render
from retrofit import cmdline

tour_path = Path(__file__).parent.parent / "retrofit" / "lessons" / "protocols.lesson"

class Silence(Report):
	def __init__(self, max_issues=30):
		super().__init__(verbose=False, max_issues=max_issues)
		self.complain_to_console = mock.Mock()

def _session():
	transcript = []
	return Session(console=transcript.append, report=Silence()), transcript

class SessionTests(unittest.TestCase):

	def test_expression_echoes_value(self):
		session, transcript = _session()
		self.assertEqual(3, session.evaluate("1 + 2"))
		self.assertEqual(["=> 3"], transcript)

	def test_print_goes_to_console(self):
		session, transcript = _session()
		session.evaluate("print('a', 'b')\nprint('c\\nd')")
		self.assertEqual(["a b", "c", "d"], transcript)

	def test_print_without_newline_joins_the_next_print(self):
		session, transcript = _session()
		session.evaluate("print('a', end='')\nprint('b')\nprint('c', end='')\n1 + 1\nprint('d', end='')\n")
		self.assertEqual(["ab", "c", "=> 2", "d"], transcript)

	def test_failure_aborts_only_its_form(self):
		session, transcript = _session()
		text = "\n".join([
			"Show = declare_capability('Show', {'pretty_print': ['this']})",
			"Show.pretty_print('Rich')",
			"extend_type(str, {Show: {'pretty_print': lambda s: 'My name is ' + s}})",
			"Show.pretty_print('Rich')",
		])
		self.assertEqual("My name is Rich", session.evaluate(text))
		self.assertEqual(1, len(session.report.issues))
		self.assertEqual("This form raised NoImplementationError:", session.report.issues[0].intro)
		self.assertEqual(["!! NoImplementationError: No implementation of Show for type str.", "=> 'My name is Rich'"], transcript)

	def test_state_persists_between_calls(self):
		session, _ = _session()
		session.evaluate("PersonRecord = defrecord('PersonRecord', ['name'])")
		session.evaluate("rich = PersonRecord('Rich')")
		session.evaluate("rich['nope']")
		self.assertEqual("Rich", session.evaluate("rich.name"))
		self.assertTrue(session.report.sick())

	def test_sessions_have_their_own_tables(self):
		first, _ = _session()
		second, _ = _session()
		first.evaluate("Show = declare_capability('Show', {'pretty_print': ['this']})")
		second.evaluate("Show = declare_capability('Show', {'pretty_print': ['this', 'style']})")
		self.assertTrue(first.report.ok())
		self.assertTrue(second.report.ok())

	def test_expected_raise_is_not_an_issue(self):
		session, _ = _session()
		session.evaluate("construct_positional(defrecord('P', ['a']))\n# !! ArityError\n")
		self.assertTrue(session.report.ok())
		session.evaluate("construct_positional(defrecord('P', ['a']))\n# !! UnknownFieldError\n")
		self.assertEqual(1, len(session.report.issues))
		session.evaluate("1\n# !! ArityError\n")
		self.assertEqual(2, len(session.report.issues))

	def test_expected_raise_matches_a_base_class(self):
		session, _ = _session()
		session.evaluate("invoke(declare_capability('Show', {'pp': ['this']}), 'nope', 1)\n# !! NoImplementationError\n")
		self.assertTrue(session.report.ok())

	def test_syntax_error(self):
		session, _ = _session()
		self.assertIsNone(session.evaluate("x = (1,\n"))
		self.assertEqual(1, len(session.report.issues))

	def test_too_many_issues(self):
		session = Session(console=None, report=Silence(max_issues=2))
		with self.assertRaises(TooManyIssues):
			session.evaluate("1/0\n1/0\n1/0\n")

class CheckTests(unittest.TestCase):

	def check(self, text):
		session, _ = _session()
		session.check(Listing(text))
		return session.report

	def test_forms_and_expectations(self):
		text = "\n".join([
			"x = 1",
			"# A comment that means nothing in particular",
			"print(x)",
			"# (out) 1",
			"",
			"x + 1",
			"# => 2",
			"",
			"def f(y):",
			"\treturn y * 2",
			"",
			"f(x)",
			"# => 2",
		])
		forms = split_forms(Listing(text))
		self.assertEqual(5, len(forms))
		self.assertEqual(("1",), forms[1].printed)
		self.assertEqual("2", forms[2].value)
		self.assertEqual("2", forms[4].value)
		self.assertTrue(self.check(text).ok())

	def test_output_mismatch(self):
		report = self.check("print('hello')\n# (out) goodbye\n")
		self.assertEqual(1, len(report.issues))
		self.assertIn("printed", report.issues[0].intro)

	def test_value_mismatch(self):
		report = self.check("'hello'\n# => 'goodbye'\n")
		self.assertEqual(1, len(report.issues))
		self.assertIn("value", report.issues[0].intro)
		self.assertIn("'goodbye'", report.issues[0].as_text())

	def test_issue_text_shows_the_form(self):
		report = self.check("x = 1\nx.nope\n")
		text = report.issues[0].as_text()
		self.assertIn("x.nope", text)
		self.assertIn("AttributeError", text)

	def test_bundled_tour_checks_clean(self):
		session = Session(console=None, report=Silence())
		session.check(Listing.from_path(tour_path))
		session.report.assert_no_issues("The bundled tour should check clean.")

	def test_assert_no_issues_complains(self):
		report = self.check("1/0\n")
		with self.assertRaises(AssertionError):
			report.assert_no_issues("Division by zero is an issue.")
		report.complain_to_console.assert_called_once()

	def test_bundled_tour_plays(self):
		session, transcript = _session()
		self.assertTrue(session.play(Listing.from_path(tour_path)))
		self.assertIn("I am mixed in. Name is: Rich", transcript)
		self.assertIn("=> 'I am anonymous'", transcript)

class RenderTests(unittest.TestCase):

	def test_values(self):
		PersonRecord = defrecord("PersonRecord", ["name"])
		rich = PersonRecord("Rich")
		for value, text in [
			(None, "None"),
			("Rich", "'Rich'"),
			(rich, "#PersonRecord{'name': 'Rich'}"),
			([rich, 1], "[#PersonRecord{'name': 'Rich'}, 1]"),
			((1,), "(1,)"),
			({"k": rich}, "{'k': #PersonRecord{'name': 'Rich'}}"),
			(rich.without_field("name"), "{}"),
			(PersonRecord, "<record PersonRecord [name]>"),
			(int, "<class int>"),
			(len, "<fn len>"),
		]:
			with self.subTest(text):
				self.assertEqual(text, render(value))

class CommandLineTests(unittest.TestCase):

	def args(self, lesson, check):
		return argparse.Namespace(lesson=lesson, check=check, verbose=0, max_issues=10)

	@mock.patch("retrofit.diagnostics.Report.complain_to_console", lambda self: None)
	def test_check_tour(self):
		self.assertEqual(0, cmdline.run(self.args("tour", True)))

	def test_play_tour(self):
		transcript = []
		self.assertEqual(0, cmdline.run(self.args("tour", False), console=transcript.append))
		self.assertIn("=> True", transcript)

	def test_missing_file(self):
		self.assertEqual(1, cmdline.run(self.args("no/such/lesson.lesson", True)))

	def test_parser(self):
		args = cmdline.parser.parse_args(["-c", "--max-issues", "3", "tour"])
		self.assertTrue(args.check)
		self.assertEqual(3, args.max_issues)
		self.assertEqual("protocols.lesson", cmdline.lesson_path(args.lesson).name)
		self.assertEqual(Path.cwd() / "mine.lesson", cmdline.lesson_path("mine.lesson"))


if __name__ == '__main__':
	unittest.main()
