"""
A reader/writer lock made from plain threading primitives.
The capability table is the only shared mutable state in the sandbox,
so this is the only synchronization anything needs.
"""
from contextlib import contextmanager
from threading import Condition, Lock

class ReadWriteLock:
	"""
	Any number of readers, or exactly one writer.
	A waiting writer holds off new readers so that registration cannot starve.
	Not re-entrant: do not take the shared side while holding either side.
	"""

	def __init__(self):
		self._mutex = Lock()
		self._changed = Condition(self._mutex)
		self._nr_readers = 0
		self._nr_writers_waiting = 0
		self._is_writing = False

	@contextmanager
	def shared(self):
		with self._mutex:
			while self._is_writing or self._nr_writers_waiting:
				self._changed.wait()
			self._nr_readers += 1
		try: yield
		finally:
			with self._mutex:
				self._nr_readers -= 1
				if not self._nr_readers:
					self._changed.notify_all()

	@contextmanager
	def exclusive(self):
		with self._mutex:
			self._nr_writers_waiting += 1
			while self._is_writing or self._nr_readers:
				self._changed.wait()
			self._nr_writers_waiting -= 1
			self._is_writing = True
		try: yield
		finally:
			with self._mutex:
				self._is_writing = False
				self._changed.notify_all()
