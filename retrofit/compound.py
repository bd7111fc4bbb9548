"""
Opaque compound types: a fixed bundle of named fields and nothing else.

Unlike a record, a compound has no mapping view at all. Its fields are
reached only by name (`c.name`), never by key (`c["name"]`). Fields declared
mutable may be reassigned in place; the rest are fixed at construction.
Equality is identity, as it would be for any plain object.
"""
from typing import Any, Optional, Sequence
from .errors import ArityError, UnsupportedOperationError
from .ontology import Capability, check_field_names
from .registry import IMPL_MAP, implement_inline

class Compound:
	""" Base for the classes `deftype` makes. """
	__slots__ = ()
	field_names: tuple[str, ...] = ()
	mutable_fields: frozenset[str] = frozenset()

	def __init__(self, *values):
		if len(values) != len(self.field_names):
			raise ArityError("Type %s" % type(self).__name__, len(self.field_names), len(values))
		for name, value in zip(self.field_names, values):
			object.__setattr__(self, name, value)

	def __setattr__(self, name, value):
		if name in self.mutable_fields:
			object.__setattr__(self, name, value)
		elif name in self.field_names:
			raise UnsupportedOperationError("Field %r of %s is not mutable." % (name, type(self).__name__))
		else:
			raise AttributeError("%s has no field %r." % (type(self).__name__, name))

	def __delattr__(self, name):
		raise UnsupportedOperationError("Fields of %s cannot be removed." % type(self).__name__)

	def __getitem__(self, key):
		raise UnsupportedOperationError(
			"%s supports only named field access; try .%s instead of [%r]." % (type(self).__name__, key, key)
		)

	def __iter__(self):
		raise UnsupportedOperationError("%s is not a mapping and cannot be iterated." % type(self).__name__)

	def __repr__(self):
		return "#<%s@%x>" % (type(self).__name__, id(self))


def deftype(
		name:str,
		fields:Sequence[str],
		mutable:Sequence[str]=(),
		implements:Optional[dict[Capability, IMPL_MAP]]=None,
) -> type[Compound]:
	field_names = check_field_names(Compound, name, fields)
	mutable_fields = frozenset(mutable)
	stray = mutable_fields - set(field_names)
	if stray:
		raise ValueError("%s: cannot make undeclared field(s) %s mutable." % (name, ", ".join(sorted(stray))))
	namespace: dict[str, Any] = {
		'__slots__': field_names,
		'field_names': field_names,
		'mutable_fields': mutable_fields,
	}
	cls = type(name, (Compound,), namespace)
	implement_inline(cls, implements)
	return cls

def construct(compound_type:type[Compound], *values) -> Compound:
	assert issubclass(compound_type, Compound), compound_type
	return compound_type(*values)
