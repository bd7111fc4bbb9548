import sys, random
from typing import Any, Optional, Sequence
from pathlib import Path
from boozetools.support.failureprone import SourceText, illustration

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Aw, ", "", ""]

	minced_oaths = [
		'Ack', 'ARGH', 'Blargh', 'Blasted Thing',
		'Confound it', 'Crud', 'Curses', "Crikey",
		'Dag Nabbit', 'Drat',
		'Fiddlesticks', 'Flaming Flamingos',
		'Gack', 'Good Grief', 'Golly Gee Willikers', "Great Scott",
		'Heavens', "Mercy", 'Nuts', 'Rats',
	]

	resignations = [
		'That form did not go as planned.',
		'The lesson and the sandbox disagree.',
		'Something is not as advertised.',
		'Time to read the comments again.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Listing:
	""" A named piece of source text that forms get evaluated from. """
	def __init__(self, text:str, name:str="<input>"):
		self.text = text
		self.name = name
		self.source = SourceText(text, filename=self.name)

	@staticmethod
	def from_path(path:Path) -> "Listing":
		with open(path, "r", encoding="utf-8") as fh:
			return Listing(fh.read(), name=str(path))

class Report:
	""" Collects the issues of a session. Verbose reports also narrate to stderr. """
	_issues : list["Pic"]

	def __init__(self, *, verbose:int=0, max_issues=10):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues

	@property
	def issues(self): return tuple(self._issues)

	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)

	def issue(self, it:Any):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(_outburst()+" "+message)

	# Methods the session calls:

	def syntax_error(self, listing:Listing, ex:SyntaxError):
		intro = "The lesson %s does not parse: %s" % (listing.name, ex.msg)
		problem = []
		if ex.lineno:
			start = char_offset(listing.text, ex.lineno, max((ex.offset or 1) - 1, 0), in_bytes=False)
			problem.append(Annotation(listing, slice(start, start+1), "here"))
		self.issue(Pic(intro, problem))

	def form_raised(self, listing:Listing, site:slice, ex:Exception):
		intro = "This form raised %s:" % type(ex).__name__
		problem = [Annotation(listing, site, "evaluated here")]
		self.issue(Pic(intro, problem, [str(ex)]))

	def wrong_exception(self, listing:Listing, site:slice, expected:str, ex:Optional[Exception]):
		got = "nothing" if ex is None else type(ex).__name__
		intro = "This form was expected to raise %s, but raised %s." % (expected, got)
		footer = [] if ex is None else [str(ex)]
		self.issue(Pic(intro, [Annotation(listing, site)], footer))

	def output_mismatch(self, listing:Listing, site:slice, expected:Sequence[str], actual:Sequence[str]):
		intro = "This form printed something other than its comments say."
		footer = [" - Expected:"]
		footer.extend("     "+line for line in expected)
		footer.append(" - Actual:")
		footer.extend("     "+line for line in actual)
		self.issue(Pic(intro, [Annotation(listing, site)], footer))

	def value_mismatch(self, listing:Listing, site:slice, expected:str, actual:Optional[str]):
		intro = "This form produced a different value than its comments say."
		caption = "produced " + ("no value" if actual is None else actual)
		footer = [" - Expected: "+expected]
		self.issue(Pic(intro, [Annotation(listing, site, caption)], footer))

class Annotation:
	listing: Listing
	slice: slice
	caption: str
	def __init__(self, listing:Listing, site:slice, caption:str=""):
		self.listing = listing
		self.slice = site
		self.caption = caption
	def illustrate(self):
		source = self.listing.source
		row, col = source.find_row_col(self.slice.start)
		single_line = source.line_of_text(row).rstrip("\r\n")
		width = max(1, min(self.slice.stop - self.slice.start, len(single_line) - col))
		return illustration(single_line, col, width, prefix='% 6d |' % row, caption=self.caption)

class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self._intro, self._anns, self._footer = intro, anns, footer
	@property
	def intro(self): return self._intro
	def as_text(self):
		lines = [self._intro, ""]
		name = None
		for ann in self._anns:
			if ann.listing.name != name:
				name = ann.listing.name
				lines.append(name)
			lines.append(ann.illustrate())
		lines.extend(self._footer)
		return '\n'.join(lines)

def char_offset(text:str, lineno:int, col:int, in_bytes=True) -> int:
	""" Offset into `text` of a 1-based line and a column, which Python's AST counts in UTF-8 bytes. """
	lines = text.splitlines(keepends=True)
	before = sum(len(line) for line in lines[:lineno-1])
	if in_bytes and lineno <= len(lines):
		col = len(lines[lineno-1].encode("utf-8")[:col].decode("utf-8", errors="ignore"))
	return before + col

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
