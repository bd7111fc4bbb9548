"""
This is a sandbox for playing with capabilities, records, and types, one form at a time.

{0}

For example:

    retrofit tour

will play the bundled tour, printing what each form does, and

    retrofit -c tour

will check that every form does what its comments say.

    retrofit -h

will explain all the arguments.
"""
import sys, argparse
from pathlib import Path

LESSONS = {
	"tour": Path(__file__).parent/"lessons"/"protocols.lesson",
}

parser = argparse.ArgumentParser(
	prog="retrofit",
	description="Play (or check) a lesson about capabilities, records, and types.",
)
parser.add_argument("lesson", help="a lesson file, or one of: %s" % ", ".join(sorted(LESSONS)))
parser.add_argument('-c', "--check", action="store_true", help="Compare each form against its expectation comments instead of just playing it.")
parser.add_argument('-v', "--verbose", action="count", help="Narrate each form on stderr.")
parser.add_argument("--max-issues", type=int, default=10, help="Give up after this many issues.")

def lesson_path(name:str) -> Path:
	return LESSONS.get(name) or Path.cwd() / name

def run(args, console=print):
	from .diagnostics import Listing, Report, TooManyIssues
	from .session import Session
	report = Report(verbose=args.verbose, max_issues=args.max_issues)
	path = lesson_path(args.lesson)
	try:
		listing = Listing.from_path(path)
	except OSError as ex:
		print("Cannot read %s: %s" % (path, ex.strerror), file=sys.stderr)
		return 1
	session = Session(console=None if args.check else console, report=report)
	try:
		if args.check: session.check(listing)
		else: session.play(listing)
	except TooManyIssues:
		report.complain_to_console()
		print(" *"*35, file=sys.stderr)
		print("Giving up after a few issues. One crisis at a time, eh?", file=sys.stderr)
		return 1
	if report.sick():
		report.complain_to_console()
		return 1
	if args.check:
		print("Every form does what it says.", file=sys.stderr)
	return 0

def main():
	if len(sys.argv) > 1:
		exit(run(parser.parse_args()))
	else:
		print(__doc__.strip().format(parser.format_usage()))
