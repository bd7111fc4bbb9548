"""
The capability table: who implements what, looked up by the exact runtime type
of the first argument at call time.

Nothing here touches the implementing types themselves. Bindings live in a
free-standing table, which is what lets code extend types it did not author,
such as the built-in str. Dispatch is by exact type: a binding for a base class
does not leak into its subclasses.
"""
from typing import Any, Callable, Iterable, Mapping, Optional
from weakref import WeakKeyDictionary
from .errors import ArityError, DuplicateCapabilityError, ForeignCapabilityError, NoImplementationError, UnknownOperationError
from .locking import ReadWriteLock
from .ontology import Capability, signatures_from

IMPL_MAP = Mapping[str, Callable]

class Anonymous:
	""" Base for the one-off types minted by create_anonymous. """
	__slots__ = ()
	_capability: Capability
	def __repr__(self): return "<anonymous %s>" % self._capability.name


class CapabilityTable:

	def __init__(self):
		self._lock = ReadWriteLock()
		self._capabilities: dict[str, Capability] = {}
		# Weak keys so the one-off types behind anonymous instances can go away.
		self._bindings: WeakKeyDictionary[type, dict[Capability, dict[str, Callable]]] = WeakKeyDictionary()

	def declare_capability(self, name:str, operation_signatures:Mapping[str, Iterable[str]]) -> Capability:
		signatures = signatures_from(name, operation_signatures)
		with self._lock.exclusive():
			prior = self._capabilities.get(name)
			if prior is not None:
				if prior.same_shape(signatures): return prior
				old = ", ".join(map(str, prior.signatures.values()))
				raise DuplicateCapabilityError("Capability %s is already declared as {%s}." % (name, old))
			capability = self._capabilities[name] = Capability(name, signatures, self)
			return capability

	def capability(self, name:str) -> Capability:
		with self._lock.shared():
			try: return self._capabilities[name]
			except KeyError: raise NoImplementationError("No capability is called %r." % name) from None

	def register(self, cls:type, capability:Capability, *implementation_maps:IMPL_MAP) -> None:
		"""
		Bind (cls, capability) to the merger of the given maps, later maps winning per key.
		Whatever was bound to that pair before is forgotten entirely.
		"""
		impl = self._merge(capability, implementation_maps)
		with self._lock.exclusive():
			self._bind(cls, capability, impl)

	def extend(self, cls:type, *pairs) -> None:
		""" extend(cls, Show, {...}, Identify, {...}) -- several capabilities, one type, one batch. """
		if len(pairs) % 2:
			raise ArityError("extend (after the type)", len(pairs) + 1, len(pairs))
		self.extend_type(cls, dict(zip(pairs[0::2], pairs[1::2])))

	def extend_type(self, cls:type, impls:Mapping[Capability, IMPL_MAP]) -> None:
		""" One type, several capabilities. All bindings become visible together. """
		staged = [(capability, self._merge(capability, [impl])) for capability, impl in impls.items()]
		with self._lock.exclusive():
			for capability, impl in staged:
				self._bind(cls, capability, impl)

	def extend_capability(self, capability:Capability, impls:Mapping[type, IMPL_MAP]) -> None:
		""" One capability, several types. """
		staged = [(cls, self._merge(capability, [impl])) for cls, impl in impls.items()]
		with self._lock.exclusive():
			for cls, impl in staged:
				self._bind(cls, capability, impl)

	def _own(self, capability:Capability):
		# Operations dispatch through capability.table, so a binding anywhere else could never be found.
		if capability.table is not self:
			raise ForeignCapabilityError("Capability %s was declared in a different table." % capability.name)

	def _merge(self, capability:Capability, implementation_maps:Iterable[IMPL_MAP]) -> dict[str, Callable]:
		self._own(capability)
		merged = {}
		for each in implementation_maps:
			merged.update(each)
		for name, fn in merged.items():
			if name not in capability.signatures:
				raise UnknownOperationError(capability.name, name)
			assert callable(fn), (name, fn)
		return merged

	def _bind(self, cls:type, capability:Capability, impl:dict[str, Callable]):
		# Precondition: the exclusive lock is held.
		assert isinstance(cls, type), cls
		try: per_type = self._bindings[cls]
		except KeyError: per_type = self._bindings[cls] = {}
		per_type[capability] = impl

	def resolve(self, capability:Capability, operation:str, cls:type) -> Callable:
		self._own(capability)
		capability.signature(operation)
		with self._lock.shared():
			impl = self._bindings.get(cls, {}).get(capability)
		if impl is None:
			raise NoImplementationError("No implementation of %s for type %s." % (capability.name, cls.__qualname__))
		try: return impl[operation]
		except KeyError:
			pattern = "The implementation of %s for type %s lacks %r."
			raise NoImplementationError(pattern % (capability.name, cls.__qualname__, operation)) from None

	def invoke(self, capability:Capability, operation:str, instance:Any, *rest_args) -> Any:
		self._own(capability)
		signature = capability.signature(operation)
		if 1 + len(rest_args) != signature.arity():
			raise ArityError("%s.%s" % (capability.name, operation), signature.arity(), 1 + len(rest_args))
		fn = self.resolve(capability, operation, type(instance))
		return fn(instance, *rest_args)

	def create_anonymous(self, capability:Capability, operation_map:IMPL_MAP) -> Anonymous:
		"""
		A one-off instance of a fresh type that implements just this one capability.
		Since the type is unique to the instance, no other value can find the binding.
		"""
		cls = type("Anonymous" + capability.name, (Anonymous,), {'__slots__': (), '_capability': capability})
		self.register(cls, capability, operation_map)
		return cls()

	# Reflection. None of these mutate anything.

	def satisfies(self, capability:Capability, instance:Any) -> bool:
		return self.extends(capability, type(instance))

	def extends(self, capability:Capability, cls:type) -> bool:
		with self._lock.shared():
			return capability in self._bindings.get(cls, {})

	def extenders(self, capability:Capability) -> list[type]:
		with self._lock.shared():
			return [cls for cls, per_type in self._bindings.items() if capability in per_type]

	def implementation(self, cls:type, capability:Capability) -> dict[str, Callable]:
		""" A copy of the bound map, suitable for merging into a new registration. """
		with self._lock.shared():
			try: return dict(self._bindings[cls][capability])
			except KeyError:
				raise NoImplementationError("No implementation of %s for type %s." % (capability.name, cls.__qualname__)) from None


def type_members(cls:type) -> list[str]:
	""" Public members of a Python type. Registering a capability never adds to this list. """
	return [name for name in dir(cls) if not name.startswith("_")]

###############################################################################

TABLE = CapabilityTable()

declare_capability = TABLE.declare_capability
register = TABLE.register
extend = TABLE.extend
extend_type = TABLE.extend_type
extend_capability = TABLE.extend_capability
invoke = TABLE.invoke
create_anonymous = TABLE.create_anonymous
satisfies = TABLE.satisfies
extends = TABLE.extends
extenders = TABLE.extenders
implementation = TABLE.implementation

def implement_inline(cls:type, implements:Optional[Mapping[Capability, IMPL_MAP]]) -> None:
	""" Register implementations given at type-definition time, each in its own capability's table. """
	for capability, impl in (implements or {}).items():
		capability.table.register(cls, capability, impl)
