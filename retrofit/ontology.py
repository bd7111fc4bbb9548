"""
The most-fundamental vocabulary: capabilities, their operation signatures,
and the callable operations that dispatch through a capability table.

A capability carries no implementation of its own. It only names operations
and says how many arguments each one takes, counting the receiver ("this").
"""
from keyword import iskeyword
from typing import NamedTuple, Mapping, Sequence
from .errors import ArityError, UnknownOperationError

class Signature(NamedTuple):
	name: str
	params: tuple[str, ...]
	def arity(self) -> int: return len(self.params)
	def __str__(self): return "%s(%s)" % (self.name, ", ".join(self.params))

def signatures_from(capability_name:str, operation_signatures:Mapping[str, Sequence[str]]) -> dict[str, Signature]:
	"""
	Normalize {operation: [param, ...]} into Signature objects, insisting on a receiver.
	Operation names become attributes of the capability, so they must not hide what a capability already has.
	"""
	signatures = {}
	for name, params in operation_signatures.items():
		assert isinstance(name, str), name
		if not name.isidentifier() or name.startswith("_") or iskeyword(name):
			raise ValueError("%s: %r cannot be an operation name." % (capability_name, name))
		if name in RESERVED_OPERATION_NAMES:
			raise ValueError("%s: operation %r would hide Capability.%s" % (capability_name, name, name))
		params = tuple(params)
		if not params:
			raise ArityError("Operation %s.%s" % (capability_name, name), 1, 0, at_least=True)
		signatures[name] = Signature(name, params)
	return signatures


class Capability:
	"""
	A named set of operation signatures.
	Operations read as attributes, so `Show.pretty_print(x)` works like a protocol function.
	"""
	name: str
	signatures: dict[str, Signature]

	def __init__(self, name:str, signatures:dict[str, Signature], table):
		self.name = name
		self.signatures = signatures
		self.table = table

	def __repr__(self): return "<capability %s>" % self.name

	def __getattr__(self, name):
		# Only reached when normal lookup fails, so "signatures" itself may not be there yet.
		signatures = self.__dict__.get("signatures", {})
		if name in signatures: return Operation(self, name)
		raise AttributeError(name)

	def operation(self, name:str) -> "Operation":
		if name not in self.signatures:
			raise UnknownOperationError(self.name, name)
		return Operation(self, name)

	def signature(self, name:str) -> Signature:
		try: return self.signatures[name]
		except KeyError: raise UnknownOperationError(self.name, name) from None

	def same_shape(self, signatures:dict[str, Signature]) -> bool:
		return self.signatures == signatures

# Instance attributes plus everything the class defines.
RESERVED_OPERATION_NAMES = frozenset(dir(Capability)) | {"name", "signatures", "table"}


class Operation:
	""" One operation of one capability, usable as a plain function. """
	def __init__(self, capability:Capability, name:str):
		self.capability = capability
		self.name = name

	def __repr__(self): return "<operation %s.%s>" % (self.capability.name, self.name)

	def __eq__(self, other):
		return isinstance(other, Operation) and (self.capability, self.name) == (other.capability, other.name)

	def __hash__(self): return hash((self.capability, self.name))

	def __call__(self, instance, *rest_args):
		return self.capability.table.invoke(self.capability, self.name, instance, *rest_args)

###############################################################################

def check_field_names(base:type, type_name:str, fields:Sequence[str]) -> tuple[str, ...]:
	"""
	Field names become attributes of a generated subclass of `base`,
	so they must be identifiers, distinct, and must not hide anything `base` already has.
	"""
	fields = tuple(fields)
	reserved = set(dir(base))
	for name in fields:
		assert isinstance(name, str), name
		if not name.isidentifier() or name.startswith("_") or iskeyword(name):
			raise ValueError("%s: %r cannot be a field name." % (type_name, name))
		if name in reserved:
			raise ValueError("%s: field %r would hide %s.%s" % (type_name, name, base.__name__, name))
	if len(set(fields)) != len(fields):
		raise ValueError("%s: some field is named twice in %r." % (type_name, fields))
	return fields
