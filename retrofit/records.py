"""
Structural records: immutable, type-tagged, ordered mappings from field name to value.

A record answers to both calling conventions. `r.name` reads a declared field
the way a member would be read; `r["name"]` reads it the way a map would be.
Updates never happen in place: `with_field` hands back a new record of the same
type (even for a field the type never declared), while `without_field` hands
back a plain GenericMapping, because a record missing one of its declared
fields is no longer that kind of record.
"""
from collections.abc import Mapping
from operator import itemgetter
from typing import Any, Optional, Sequence
from .errors import ArityError, UnknownFieldError
from .ontology import Capability, check_field_names
from .registry import IMPL_MAP, implement_inline

class _Immutable:
	__slots__ = ()
	def __setattr__(self, name, value):
		raise AttributeError("%s is immutable; use with_field to make an updated copy." % type(self).__name__)
	def __delattr__(self, name):
		raise AttributeError("%s is immutable; use without_field to make a reduced copy." % type(self).__name__)


class GenericMapping(_Immutable, Mapping):
	""" An immutable ordered mapping with no declared type: what a record degrades to. """
	__slots__ = ('_fields',)
	_fields: dict

	def __init__(self, pairs=()):
		object.__setattr__(self, '_fields', dict(pairs))

	def __getitem__(self, key): return self._fields[key]
	def __iter__(self): return iter(self._fields)
	def __len__(self): return len(self._fields)

	def __eq__(self, other):
		if isinstance(other, Record): return False
		if isinstance(other, Mapping): return self._fields == dict(other.items())
		return NotImplemented

	def __hash__(self): return hash(frozenset(self._fields.items()))

	def __repr__(self):
		return "{%s}" % ", ".join("%r: %r" % pair for pair in self._fields.items())

	def with_field(self, key, value) -> "GenericMapping":
		fields = dict(self._fields)
		fields[key] = value
		return GenericMapping(fields)

	def without_field(self, key) -> "GenericMapping":
		if key not in self._fields: raise UnknownFieldError("This mapping", key)
		return GenericMapping((k, v) for k, v in self._fields.items() if k != key)


class Record(_Immutable, Mapping):
	"""
	Base for the classes `defrecord` makes. `basis` lists the declared fields in order.
	Extension fields, added by with_field, follow the basis in insertion order.
	"""
	__slots__ = ('_fields',)
	_fields: dict
	basis: tuple[str, ...] = ()

	def __init__(self, *values):
		basis = self.basis
		if len(values) != len(basis):
			raise ArityError("Record %s" % type(self).__name__, len(basis), len(values))
		object.__setattr__(self, '_fields', dict(zip(basis, values)))

	@classmethod
	def from_mapping(cls, field_values:Mapping) -> "Record":
		for key in field_values:
			if key not in cls.basis:
				raise UnknownFieldError(cls.__name__, key)
		return cls(*(field_values.get(name) for name in cls.basis))

	@classmethod
	def _from_fields(cls, fields:dict) -> "Record":
		record = object.__new__(cls)
		object.__setattr__(record, '_fields', fields)
		return record

	def __getitem__(self, key):
		try: return self._fields[key]
		except KeyError: raise UnknownFieldError(type(self).__name__, key) from None

	def __iter__(self): return iter(self._fields)
	def __len__(self): return len(self._fields)

	def __eq__(self, other):
		if type(other) is not type(self): return False
		return self._fields == other._fields

	def __hash__(self): return hash((type(self), frozenset(self._fields.items())))

	def __repr__(self):
		return "#%s{%s}" % (type(self).__name__, ", ".join("%r: %r" % pair for pair in self._fields.items()))

	def extension_fields(self) -> tuple:
		return tuple(key for key in self._fields if key not in self.basis)

	def with_field(self, key, value) -> "Record":
		fields = dict(self._fields)
		fields[key] = value
		return self._from_fields(fields)

	def without_field(self, key) -> GenericMapping:
		if key not in self._fields: raise UnknownFieldError(type(self).__name__, key)
		return GenericMapping((k, v) for k, v in self._fields.items() if k != key)


def defrecord(name:str, fields:Sequence[str], implements:Optional[dict[Capability, IMPL_MAP]]=None) -> type[Record]:
	"""
	Make a new record type. Each declared field gets a read-only attribute.
	Capability implementations given inline are registered right away,
	just as if `extend_type` had been called on the new type.
	"""
	basis = check_field_names(Record, name, fields)
	namespace: dict[str, Any] = {'__slots__': (), 'basis': basis}
	for field in basis:
		namespace[field] = property(itemgetter(field), doc="Declared field %r" % field)
	cls = type(Record)(name, (Record,), namespace)
	implement_inline(cls, implements)
	return cls

def construct_positional(record_type:type[Record], *values) -> Record:
	assert issubclass(record_type, Record), record_type
	return record_type(*values)

def construct_from_mapping(record_type:type[Record], field_values:Mapping) -> Record:
	assert issubclass(record_type, Record), record_type
	return record_type.from_mapping(field_values)

def with_field(record, key, value):
	return record.with_field(key, value)

def without_field(record, key) -> GenericMapping:
	return record.without_field(key)
