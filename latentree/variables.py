# variables.py

import re
import enum
import threading

from ._utils import _check_parameter
from .errors import InvalidArgumentError


class VariableType(enum.Enum):
	"""Whether a variable is observed in the data or a hidden cluster."""

	MANIFEST = "manifest"
	LATENT = "latent"


class VariableRegistry(object):
	"""Hands out indices and default names for new variables.

	Every variable created with a registry receives the next integer index.
	Variables created without an explicit name are named `<prefix><index>`.
	When a variable is created with an explicit name that looks like
	`<prefix><number>` the registry skips past that number so that later
	default names never collide with it. Both operations are serialized by
	the same lock, so one registry can be shared between threads.


	Parameters
	----------
	prefix: str, optional
		The prefix of the generated names. Default is "variable".
	"""

	def __init__(self, prefix="variable"):
		self.prefix = prefix
		self._counter = 0
		self._lock = threading.Lock()
		self._pattern = re.compile(r"^{}(\d+)$".format(re.escape(prefix)))

	def next(self):
		"""Return the next (index, name) pair and advance the counter."""

		with self._lock:
			index = self._counter
			self._counter += 1

		return index, "{}{}".format(self.prefix, index)

	def reserve(self, name):
		"""Advance the counter past the number embedded in `name`, if any."""

		match = self._pattern.match(name)
		if match is None:
			return

		with self._lock:
			self._counter = max(self._counter, int(match.group(1)) + 1)

	def __len__(self):
		return self._counter


manifest_registry = VariableRegistry("variable")
latent_registry = VariableRegistry("latent")


class Variable(object):
	"""A discrete random variable.

	Variables are compared by identity: two variables with the same name and
	the same cardinality are still different variables. Networks, datasets
	and distributions all refer to the same Variable objects.


	Parameters
	----------
	cardinality: int
		The number of states the variable can take.

	role: VariableType, optional
		Whether the variable is manifest (a column of the data) or latent.
		Default is VariableType.MANIFEST.

	name: str or None, optional
		The name of the variable. If None, a name is generated by the
		registry. Default is None.

	registry: VariableRegistry or None, optional
		The registry that gives out the index. If None, the module level
		registry for the role is used. Default is None.
	"""

	def __init__(self, cardinality, role=VariableType.MANIFEST, name=None,
		registry=None):
		_check_parameter(cardinality, "cardinality", min_value=1, ndim=0)

		if not isinstance(role, VariableType):
			raise InvalidArgumentError("Parameter role must be a "
				"VariableType.")

		if registry is None:
			if role == VariableType.MANIFEST:
				registry = manifest_registry
			else:
				registry = latent_registry

		if name is not None:
			registry.reserve(name)

		self.index, default_name = registry.next()
		self.name = default_name if name is None else name
		self.cardinality = int(cardinality)
		self.role = role
		self.registry = registry

	@property
	def is_manifest(self):
		return self.role == VariableType.MANIFEST

	@property
	def is_latent(self):
		return self.role == VariableType.LATENT

	@property
	def states(self):
		return list(range(self.cardinality))

	def __repr__(self):
		return "Variable({}, cardinality={}, role={})".format(self.name,
			self.cardinality, self.role.value)
