# conditional_categorical.py

import numpy
import torch

from .._utils import _cast_as_tensor
from .._utils import _check_parameter
from .._utils import _check_random_state
from .._utils import _update_parameter
from ..errors import InvalidArgumentError

from ._distribution import Distribution


class ConditionalCategorical(Distribution):
	"""A conditional probability table over one discrete variable.

	The table stores the probability of each state of a child variable given
	every joint configuration of its parents. The last axis of `probs` spans
	the child's states and the preceding axes span the parents' states, in
	the order in which the parents were attached to the child. A node
	without parents is a table with a single axis.

	Parameters are learned through the summarize / from_summaries pair. The
	sufficient statistics can be hard counts of observed family assignments
	or the soft counts produced by the E step of EM.


	Parameters
	----------
	probs: list, numpy.ndarray, torch.tensor, shape=(*parents, k)
		The conditional probabilities. Every slice along the last axis must
		sum to 1.

	pseudocount: float, optional
		A value to add to the observed counts of each configuration when
		training. Setting this to a positive value ensures that no
		probabilities are truly zero. Default is 0.

	inertia: float, [0, 1], optional
		Indicates the proportion of the update to apply to the parameters
		during training. When the inertia is 0.0, the update is applied in
		its entirety and the previous parameters are ignored. When the
		inertia is 1.0, the update is entirely ignored and the previous
		parameters are kept. Default is 0.0.

	frozen: bool, optional
		Whether the parameters are left untouched by from_summaries. Default
		is False.
	"""

	def __init__(self, probs, pseudocount=0, inertia=0.0, frozen=False):
		super().__init__(inertia=inertia, frozen=frozen)
		self.name = "ConditionalCategorical"

		probs = _check_parameter(_cast_as_tensor(probs, dtype=torch.float64),
			"probs", min_value=0, max_value=1)
		if probs.ndim == 0:
			raise InvalidArgumentError("Parameter probs must have at least 1 dims")

		self.register_buffer("probs", probs.clone())
		self.pseudocount = _check_parameter(pseudocount, "pseudocount",
			min_value=0, ndim=0)

		self._reset_cache()

	@classmethod
	def uniform(cls, n_categories, **kwargs):
		"""A table where every child state is equally likely."""

		probs = torch.ones(*n_categories, dtype=torch.float64)
		return cls(probs / n_categories[-1], **kwargs)

	@classmethod
	def random(cls, n_categories, random_state=None, **kwargs):
		"""A table with every row drawn uniformly at random and normalized."""

		random_state = _check_random_state(random_state)
		probs = random_state.uniform(size=tuple(n_categories))
		probs = probs / probs.sum(axis=-1, keepdims=True)
		return cls(probs, **kwargs)

	@property
	def n_categories(self):
		return tuple(self.probs.shape)

	@property
	def n_parents(self):
		return self.probs.ndim - 1

	@property
	def dimension(self):
		"""The number of free parameters of the table."""

		return int(numpy.prod(self.n_categories[:-1], dtype=numpy.int64)
			* (self.n_categories[-1] - 1))

	def _reset_cache(self):
		self.register_buffer("_xw_sum", torch.zeros_like(self.probs))
		self.register_buffer("_log_probs", torch.log(self.probs))

	def copy(self):
		return ConditionalCategorical(self.probs, pseudocount=self.pseudocount,
			inertia=self.inertia.item(), frozen=bool(self.frozen))

	def randomize(self, random_state=None):
		"""Overwrite the parameters with random ones, in place."""

		random_state = _check_random_state(random_state)
		probs = random_state.uniform(size=self.n_categories)
		probs = probs / probs.sum(axis=-1, keepdims=True)

		self.probs[...] = torch.from_numpy(probs)
		self._reset_cache()
		return self

	def add_parent(self, n_categories):
		"""Return a copy of this table with one more parent.

		The new parent is appended after the existing ones and the table is
		repeated along its axis, so the child still does not depend on it
		until the parameters are learned again.
		"""

		probs = self.probs.unsqueeze(-2).expand(*self.n_categories[:-1],
			n_categories, self.n_categories[-1])

		distribution = self.copy()
		distribution.register_buffer("probs", probs.contiguous().clone())
		distribution._reset_cache()
		return distribution

	def remove_parent(self, index):
		"""Return a copy of this table without the parent at `index`.

		The removed axis is averaged out.
		"""

		_check_parameter(index, "index", min_value=0,
			max_value=self.n_parents-1, ndim=0)

		probs = torch.mean(self.probs, dim=index)

		distribution = self.copy()
		distribution.register_buffer("probs", probs.contiguous().clone())
		distribution._reset_cache()
		return distribution

	def log_probability(self, X):
		"""The log probability of each family assignment in X.

		Parameters
		----------
		X: list, numpy.ndarray, torch.tensor, shape=(n, n_parents+1)
			The state of each parent followed by the state of the child.

		Returns
		-------
		logp: torch.tensor, shape=(n,)
			The log probability of each row.
		"""

		X = _check_parameter(_cast_as_tensor(X), "X", ndim=2, min_value=0,
			shape=(-1, self.n_parents+1), dtypes=(torch.int32, torch.int64))

		return self._log_probs[tuple(X.T)]

	def summarize(self, X, sample_weight=None):
		"""Accumulate hard counts of observed family assignments.

		Parameters
		----------
		X: list, numpy.ndarray, torch.tensor, shape=(n, n_parents+1)
			The state of each parent followed by the state of the child.

		sample_weight: list, numpy.ndarray, torch.tensor or None, shape=(n,)
			The weight of each row. Default is None, meaning weight 1.
		"""

		if self.frozen == True:
			return

		X = _check_parameter(_cast_as_tensor(X), "X", ndim=2, min_value=0,
			shape=(-1, self.n_parents+1), dtypes=(torch.int32, torch.int64))

		if sample_weight is None:
			sample_weight = torch.ones(X.shape[0], dtype=torch.float64)
		else:
			sample_weight = _check_parameter(_cast_as_tensor(sample_weight,
				dtype=torch.float64), "sample_weight", min_value=0, ndim=1,
				shape=(X.shape[0],))

		strides = torch.tensor(self._xw_sum.stride())
		X_ = torch.sum(X * strides, dim=-1)
		self._xw_sum.view(-1).scatter_add_(0, X_, sample_weight)

	def summarize_counts(self, counts):
		"""Accumulate soft counts with the same shape as the table."""

		if self.frozen == True:
			return

		counts = _check_parameter(_cast_as_tensor(counts, dtype=torch.float64),
			"counts", min_value=0, shape=self.n_categories)
		self._xw_sum += counts

	def from_summaries(self):
		if self.frozen == True:
			return

		counts = self._xw_sum + self.pseudocount
		probs = counts / counts.sum(dim=-1, keepdim=True)
		probs = torch.nan_to_num(probs, 1. / self.n_categories[-1])

		_update_parameter(self.probs, probs, self.inertia)
		self._reset_cache()
