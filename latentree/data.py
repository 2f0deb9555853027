# data.py

import torch

from ._utils import _cast_as_tensor
from ._utils import _check_parameter
from ._utils import _as_list
from .errors import InvalidArgumentError


MISSING_VALUE = -1


class DiscreteData(object):
	"""A weighted dataset over an ordered list of discrete variables.

	Each row is one instance holding, per variable, an observed state or
	`MISSING_VALUE`, together with a non-negative weight. Identical rows
	may appear several times or be aggregated into one row with the sum of
	the weights; both forms describe the same data. The dataset is not
	modified after construction.


	Parameters
	----------
	variables: list of latentree.Variable
		The variables of the columns, in order.

	X: list, numpy.ndarray, torch.tensor, shape=(n, len(variables))
		The states of each instance. -1 marks a missing value.

	weights: list, numpy.ndarray, torch.tensor or None, shape=(n,), optional
		The weight of each instance. Default is None, meaning weight 1.

	name: str or None, optional
		The name of the dataset. Default is None.
	"""

	def __init__(self, variables, X, weights=None, name=None):
		self.variables = list(variables)
		self.name = name

		if len(set(self.variables)) != len(self.variables):
			raise InvalidArgumentError("Variables of a dataset must be unique.")

		X = _cast_as_tensor(X)
		if X.numel() == 0:
			X = X.reshape(-1, len(self.variables))

		X = _check_parameter(X.type(torch.int64), "X", ndim=2,
			min_value=MISSING_VALUE, shape=(-1, len(self.variables)))

		for i, variable in enumerate(self.variables):
			if X.shape[0] > 0 and X[:, i].max() >= variable.cardinality:
				raise InvalidArgumentError("Column {} has a state outside of "
					"the {} states of its variable.".format(variable.name,
					variable.cardinality))

		if weights is None:
			weights = torch.ones(X.shape[0], dtype=torch.float64)
		else:
			weights = _check_parameter(_cast_as_tensor(weights,
				dtype=torch.float64), "weights", min_value=0, ndim=1,
				shape=(X.shape[0],))

		self.X = X
		self.weights = weights
		self._columns = {variable: i for i, variable in enumerate(
			self.variables)}

	@property
	def n(self):
		return self.X.shape[0]

	@property
	def total_weight(self):
		return float(torch.sum(self.weights))

	@property
	def has_missing(self):
		return bool(torch.any(self.X == MISSING_VALUE))

	def __len__(self):
		return self.n

	def __contains__(self, variable):
		return variable in self._columns

	def index(self, variable):
		"""The column of `variable`."""

		try:
			return self._columns[variable]
		except KeyError:
			raise InvalidArgumentError("Variable {} is not part of the "
				"dataset.".format(getattr(variable, 'name', variable)))

	def columns(self, variables):
		"""The states of `variables`, shape=(n, len(variables))."""

		idxs = [self.index(variable) for variable in _as_list(variables)]
		return self.X[:, idxs]

	def project(self, variables):
		"""A dataset restricted to `variables`.

		Rows that become identical after the projection are merged into one
		row carrying the sum of their weights.
		"""

		variables = _as_list(variables)
		X = self.columns(variables)

		if X.shape[0] == 0:
			return DiscreteData(variables, X, self.weights, name=self.name)

		X_, inverse = torch.unique(X, dim=0, return_inverse=True)
		weights = torch.zeros(X_.shape[0], dtype=torch.float64)
		weights.scatter_add_(0, inverse, self.weights)

		return DiscreteData(variables, X_, weights, name=self.name)

	def subset(self, start, end):
		"""The instances from `start` up to, but excluding, `end`."""

		return DiscreteData(self.variables, self.X[start:end],
			self.weights[start:end], name=self.name)

	def __repr__(self):
		return "DiscreteData(name={}, n={}, variables={})".format(self.name,
			self.n, [variable.name for variable in self.variables])
