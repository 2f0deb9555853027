# joint_categorical.py

import torch

from .._utils import _cast_as_tensor
from .._utils import _check_parameter
from .._utils import _update_parameter
from ..errors import InvalidArgumentError

from ._distribution import Distribution


class JointCategorical(Distribution):
	"""A joint categorical distribution over a list of variables.

	A joint categorical distribution models the probability of a vector of
	categorical values occurring without assuming that the dimensions are
	independent from each other. Each axis of `probs` corresponds to one of
	`variables`, in order, and spans the states of that variable.

	There are two ways to initialize this object. The first is to pass in
	the tensor of probability parameters, at which point they can immediately
	be used. The second is to only pass in the variables and then call
	either `fit` or `summarize` + `from_summaries`, at which point the
	probabilities will be estimated from data. Rows with a missing value in
	any of the columns do not contribute to the counts.


	Parameters
	----------
	variables: list of latentree.Variable
		The variables spanned by the distribution.

	probs: list, numpy.ndarray, torch.tensor or None, shape=*cardinalities
		The joint probabilities. Default is None.

	inertia: float, [0, 1], optional
		Indicates the proportion of the update to apply to the parameters
		during training. Default is 0.0.

	frozen: bool, optional
		Whether the parameters are left untouched by from_summaries. Default
		is False.
	"""

	def __init__(self, variables, probs=None, inertia=0.0, frozen=False):
		super().__init__(inertia=inertia, frozen=frozen)
		self.name = "JointCategorical"

		self.variables = list(variables)
		if len(set(self.variables)) != len(self.variables):
			raise InvalidArgumentError("Variables of a joint distribution "
				"must be unique.")

		shape = tuple(variable.cardinality for variable in self.variables)

		if probs is None:
			probs = torch.ones(*shape, dtype=torch.float64) / max(
				int(torch.tensor(shape).prod()), 1)
		else:
			probs = _check_parameter(_cast_as_tensor(probs,
				dtype=torch.float64), "probs", min_value=0, max_value=1,
				shape=shape)

		self.register_buffer("probs", probs.clone())
		self._reset_cache()

	@property
	def n_categories(self):
		return tuple(self.probs.shape)

	def _reset_cache(self):
		self.register_buffer("_xw_sum", torch.zeros_like(self.probs))

	def _axes(self, variables):
		axes = []
		for variable in variables:
			try:
				axes.append(self.variables.index(variable))
			except ValueError:
				raise InvalidArgumentError("Variable {} is not part of the "
					"distribution.".format(variable.name))

		return axes

	def contains(self, variables):
		return all(variable in self.variables for variable in variables)

	def marginal(self, variables):
		"""The distribution marginalized onto `variables`, in that order."""

		variables = list(variables)
		axes = self._axes(variables)

		others = [i for i in range(len(self.variables)) if i not in axes]
		probs = torch.sum(self.probs, dim=others) if others else self.probs

		remaining = [i for i in range(len(self.variables)) if i in axes]
		order = [remaining.index(axis) for axis in axes]
		if order:
			probs = probs.permute(*order)

		return JointCategorical(variables, probs)

	def sum_out(self, variable):
		"""The distribution with `variable` summed out."""

		return self.marginal([v for v in self.variables if v is not variable])

	def normalize(self):
		"""Rescale the probabilities to sum to 1, in place."""

		total = torch.sum(self.probs)
		if total <= 0:
			raise InvalidArgumentError("Cannot normalize a distribution "
				"with zero mass.")

		self.probs /= total
		return self

	def log_probability(self, X):
		X = _check_parameter(_cast_as_tensor(X), "X", ndim=2, min_value=0,
			shape=(-1, len(self.variables)), dtypes=(torch.int32, torch.int64))

		return torch.log(self.probs[tuple(X.T)])

	def summarize(self, X, sample_weight=None):
		"""Accumulate weighted counts of the observed joint assignments.

		Parameters
		----------
		X: list, numpy.ndarray, torch.tensor, shape=(n, len(variables))
			The states, with -1 marking a missing value.

		sample_weight: list, numpy.ndarray, torch.tensor or None, shape=(n,)
			The weight of each row. Default is None, meaning weight 1.
		"""

		if self.frozen == True:
			return

		X = _check_parameter(_cast_as_tensor(X), "X", ndim=2, min_value=-1,
			shape=(-1, len(self.variables)), dtypes=(torch.int32, torch.int64))

		if sample_weight is None:
			sample_weight = torch.ones(X.shape[0], dtype=torch.float64)
		else:
			sample_weight = _check_parameter(_cast_as_tensor(sample_weight,
				dtype=torch.float64), "sample_weight", min_value=0, ndim=1,
				shape=(X.shape[0],))

		observed = torch.all(X >= 0, dim=1)
		X, sample_weight = X[observed], sample_weight[observed]

		strides = torch.tensor(self._xw_sum.stride())
		X_ = torch.sum(X * strides, dim=-1)
		self._xw_sum.view(-1).scatter_add_(0, X_, sample_weight)

	def from_summaries(self):
		if self.frozen == True:
			return

		probs = self._xw_sum / torch.sum(self._xw_sum)
		probs = torch.nan_to_num(probs, 1. / self.probs.numel())

		_update_parameter(self.probs, probs, self.inertia)
		self._reset_cache()
