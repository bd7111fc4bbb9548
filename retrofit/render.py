"""
How values look when the session echoes them to the console.

Mostly this is repr(), except that records and plain mappings render their
contents through the same visitor, and types and functions get a short tag
instead of Python's address-laden default.
"""
from types import BuiltinFunctionType, FunctionType, MethodType
from boozetools.support.foundation import Visitor
from .compound import Compound
from .records import Record

class Render(Visitor):
	def visit_object(self, it): return repr(it)

	def visit_NoneType(self, it): return "None"

	def _pairs(self, pairs):
		return ", ".join("%s: %s" % (self.visit(k), self.visit(v)) for k, v in pairs)

	def visit_Record(self, it:Record):
		return "#%s{%s}" % (type(it).__name__, self._pairs(it.items()))

	def visit_GenericMapping(self, it): return "{%s}" % self._pairs(it.items())
	def visit_dict(self, it): return "{%s}" % self._pairs(it.items())

	def visit_list(self, it): return "[%s]" % ", ".join(map(self.visit, it))
	def visit_tuple(self, it):
		if len(it) == 1: return "(%s,)" % self.visit(it[0])
		return "(%s)" % ", ".join(map(self.visit, it))

	def visit_type(self, it:type):
		if issubclass(it, Record):
			return "<record %s [%s]>" % (it.__name__, " ".join(it.basis))
		if issubclass(it, Compound):
			return "<type %s [%s]>" % (it.__name__, " ".join(it.field_names))
		return "<class %s>" % it.__qualname__

	def visit_function(self, it:FunctionType): return "<fn %s>" % it.__qualname__
	def visit_builtin_function_or_method(self, it:BuiltinFunctionType): return "<fn %s>" % it.__qualname__
	def visit_method(self, it:MethodType): return "<fn %s>" % it.__qualname__

def render(value) -> str:
	# A fresh visitor each time, since the visitor may cache its dispatch by class name.
	return Render().visit(value)
