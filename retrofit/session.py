"""
A session evaluates lesson source one form at a time, the way a reader would at a REPL.

Each top-level statement is a form. Expression forms echo their value as
"=> value"; anything printed goes to the console sink. A form that raises
aborts only itself: the session files an issue and carries on with every
earlier binding (and every registration) still in place.

Comment lines right after a form say what it ought to do:

	# (out) text       -- a line the form should print
	# => text          -- how the form's value should render
	# !! ErrorName     -- the form should raise this kind of error

Checking a lesson compares those comments against what really happened.
"""
import ast, re
from typing import Any, Callable, NamedTuple, Optional
from . import compound, errors, records, registry
from .diagnostics import Listing, Report, char_offset
from .render import render

CONSOLE = Callable[[str], None]

_EXPECT_OUT = re.compile(r"\s*# \(out\) ?(.*?)\s*$")
_EXPECT_VALUE = re.compile(r"\s*# => (.*?)\s*$")
_EXPECT_RAISE = re.compile(r"\s*# !! (\w+)")

class Form(NamedTuple):
	node: ast.stmt
	site: slice
	printed: tuple[str, ...]
	value: Optional[str]
	raises: Optional[str]

class Outcome(NamedTuple):
	printed: tuple[str, ...]
	value: Optional[str]
	error: Optional[Exception]
	result: Any

def split_forms(listing:Listing) -> list[Form]:
	""" May raise SyntaxError. """
	module = ast.parse(listing.text, listing.name)
	lines = listing.text.splitlines()
	body = module.body
	forms = []
	for i, node in enumerate(body):
		start = char_offset(listing.text, node.lineno, node.col_offset)
		stop = char_offset(listing.text, node.end_lineno, node.end_col_offset)
		last = body[i+1].lineno - 1 if i+1 < len(body) else len(lines)
		printed, value, raises = [], None, None
		for line in lines[node.end_lineno:last]:
			match = _EXPECT_OUT.match(line)
			if match:
				printed.append(match.group(1))
				continue
			match = _EXPECT_VALUE.match(line)
			if match:
				value = match.group(1)
				continue
			match = _EXPECT_RAISE.match(line)
			if match:
				raises = match.group(1)
		forms.append(Form(node, slice(start, stop), tuple(printed), value, raises))
	return forms

def vocabulary(table:registry.CapabilityTable) -> dict[str, Any]:
	""" Everything a lesson may use without importing it, with the capability functions bound to `table`. """
	words = {
		'declare_capability': table.declare_capability,
		'register': table.register,
		'extend': table.extend,
		'extend_type': table.extend_type,
		'extend_capability': table.extend_capability,
		'invoke': table.invoke,
		'create_anonymous': table.create_anonymous,
		'satisfies': table.satisfies,
		'extends': table.extends,
		'extenders': table.extenders,
		'implementation': table.implementation,
		'type_members': registry.type_members,
		'defrecord': records.defrecord,
		'construct_positional': records.construct_positional,
		'construct_from_mapping': records.construct_from_mapping,
		'with_field': records.with_field,
		'without_field': records.without_field,
		'Record': records.Record,
		'GenericMapping': records.GenericMapping,
		'deftype': compound.deftype,
		'construct': compound.construct,
		'Compound': compound.Compound,
	}
	for name in dir(errors):
		if name.endswith("Error"):
			words[name] = getattr(errors, name)
	return words

def _raised_kind(ex:Exception, name:str) -> bool:
	return any(cls.__name__ == name for cls in type(ex).__mro__)


class Session:
	"""
	One persistent namespace and one capability table, shared by every form evaluated here.
	"""

	def __init__(self, *, console:Optional[CONSOLE]=print, report:Optional[Report]=None, table:Optional[registry.CapabilityTable]=None):
		self.console = console
		self.report = report if report is not None else Report()
		self.table = table if table is not None else registry.CapabilityTable()
		self.namespace: dict[str, Any] = {'__name__': '__lesson__', 'print': self._print}
		self.namespace.update(vocabulary(self.table))
		self._printed: list[str] = []
		self._partial = ""

	def _say(self, line:str):
		if self.console is not None:
			self.console(line)

	def _print(self, *args, sep=" ", end="\n", file=None, flush=False):
		if file is not None:
			print(*args, sep=sep, end=end, file=file, flush=flush)
			return
		*lines, self._partial = (self._partial + sep.join(map(str, args)) + end).split("\n")
		for line in lines: self._emit(line)

	def _emit(self, line:str):
		self._printed.append(line)
		self._say(line)

	def _flush(self):
		""" Finish a line left open by `print(..., end="")` before saying anything else. """
		if self._partial:
			self._emit(self._partial)
			self._partial = ""

	def run_form(self, listing:Listing, form:Form) -> Outcome:
		node = form.node
		self._printed = []
		self.report.info("Evaluating %s line %d" % (listing.name, node.lineno))
		value = None
		try:
			if isinstance(node, ast.Expr):
				value = eval(compile(ast.Expression(node.value), listing.name, "eval"), self.namespace)
			else:
				exec(compile(ast.Module([node], type_ignores=[]), listing.name, "exec"), self.namespace)
		except Exception as ex:
			self._flush()
			self._say("!! %s: %s" % (type(ex).__name__, ex))
			if form.raises is None:
				self.report.form_raised(listing, form.site, ex)
			elif not _raised_kind(ex, form.raises):
				self.report.wrong_exception(listing, form.site, form.raises, ex)
			return Outcome(tuple(self._printed), None, ex, None)
		if form.raises is not None:
			self.report.wrong_exception(listing, form.site, form.raises, None)
		value_text = None
		if value is not None:
			value_text = render(value)
			self._flush()
			self._say("=> " + value_text)
		return Outcome(tuple(self._printed), value_text, None, value)

	def _each_outcome(self, listing:Listing):
		try: forms = split_forms(listing)
		except SyntaxError as ex:
			self.report.syntax_error(listing, ex)
			return
		for form in forms:
			yield form, self.run_form(listing, form)
		self._flush()

	def evaluate(self, text:str, name:str="<input>") -> Any:
		"""
		Evaluate every form in `text`. Returns the value of the last form,
		or None if that form was a statement or failed.
		"""
		result = None
		for form, outcome in self._each_outcome(Listing(text, name=name)):
			result = outcome.result
		return result

	def play(self, listing:Listing) -> bool:
		for _ in self._each_outcome(listing): pass
		return self.report.ok()

	def check(self, listing:Listing) -> bool:
		""" Evaluate the listing and compare each form against its expectation comments. """
		for form, outcome in self._each_outcome(listing):
			if outcome.error is not None: continue
			printed = tuple(line.rstrip() for line in outcome.printed)
			if form.printed and form.printed != printed:
				self.report.output_mismatch(listing, form.site, form.printed, printed)
			if form.value is not None and form.value != outcome.value:
				self.report.value_mismatch(listing, form.site, form.value, outcome.value)
		return self.report.ok()
