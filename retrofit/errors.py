"""
Everything that can go wrong in the sandbox goes wrong by raising one of these.
Nothing here recovers locally: the caller (or the session) gets the exception directly.
"""

class RetrofitError(Exception):
	""" Root of the sandbox's own failure modes. """
	pass

class ArityError(RetrofitError):
	""" Wrong number of positional arguments for a constructor or operation. """
	def __init__(self, what:str, need:int, got:int, at_least=False):
		plural = '' if need == 1 else 's'
		bound = 'at least ' if at_least else ''
		super().__init__("%s takes %s%d argument%s, but got %d instead." % (what, bound, need, plural, got))
		self.need, self.got = need, got

class UnknownFieldError(RetrofitError, KeyError):
	""" Also a KeyError, so records still honor the mapping protocol (`in`, `get`). """
	def __init__(self, type_name:str, key):
		super().__init__("%s has no field %r." % (type_name, key))
		self.key = key
	def __str__(self): return self.args[0]

class NoImplementationError(RetrofitError):
	""" No binding for the (type, capability) pair, or the binding lacks the operation. """
	pass

class UnknownOperationError(NoImplementationError):
	""" The capability itself declares no such operation. """
	def __init__(self, capability_name:str, operation:str):
		super().__init__("Capability %s declares no operation %r." % (capability_name, operation))
		self.operation = operation

class DuplicateCapabilityError(RetrofitError):
	pass

class UnsupportedOperationError(RetrofitError):
	""" Generic (map-style) access attempted on something that only supports named access. """
	pass

class ForeignCapabilityError(RetrofitError):
	""" A capability can only be bound or invoked through the table it was declared in. """
	pass
