# stattest.py

import torch

from scipy.stats import chi2

from ._utils import _as_list
from .frequency import FrequencyCounter
from .information import NMIJoint
from .information import _normalize
from .information import empirical_distribution
from .information import conditional_mutual_information
from .information import normalized_mutual_information
from .errors import InvalidArgumentError


def _binary_entropies(frequencies, total_weight):
	"""Entropies of every variable and pair of binary variables.

	Recovers the 2x2 joint distribution of each pair from the weight of the
	instances where each variable, and each pair, is in state 1.
	"""

	p1 = frequencies.diagonal() / total_weight
	p11 = frequencies / total_weight
	p10 = torch.clamp(p1.unsqueeze(1) - p11, min=0)
	p01 = torch.clamp(p1.unsqueeze(0) - p11, min=0)
	p00 = torch.clamp(1 - p1.unsqueeze(1) - p1.unsqueeze(0) + p11, min=0)

	h = -(torch.xlogy(p1, p1) + torch.xlogy(1 - p1, 1 - p1))
	h_xy = -sum(torch.xlogy(p, p) for p in (p00, p01, p10, p11))
	return h.unsqueeze(1), h.unsqueeze(0), h_xy


class IndependenceTest(object):
	"""A dependency score between two groups of variables.

	Every test can be computed over a precomputed joint distribution, from
	a dataset for a pair of variables or groups, for every pair of a set of
	variables at once, and conditioned on a third group. Higher scores mean
	stronger dependence.

	When every variable involved is binary and fully observed, the pairwise
	scores come from the frequency table of the data, computed by `counter`.
	Otherwise the empirical joint distribution of each pair is built.


	Parameters
	----------
	counter: FrequencyCounter or None, optional
		Computes frequency tables. Pass a ParallelFrequencyCounter to count
		in parallel. Default is None, meaning a sequential FrequencyCounter.
	"""

	def __init__(self, counter=None):
		self.counter = counter or FrequencyCounter()

	def _score(self, distribution, x, y, z=()):
		raise NotImplementedError

	def _combine(self, mi, h_x, h_y, h_xy):
		raise NotImplementedError

	def compute(self, distribution, x=None, y=None, z=()):
		"""The score over a precomputed joint distribution.

		Without `x` and `y` the distribution must span exactly two
		variables and sum to 1, and the score is between those two. With `z`
		the score is conditioned on that group.
		"""

		if x is None and y is None:
			if len(distribution.variables) != 2:
				raise InvalidArgumentError("The distribution must span exactly "
					"two variables.")

			if abs(torch.sum(distribution.probs).item() - 1) > 1e-4:
				raise InvalidArgumentError("The distribution must sum to 1.")

			x, y = distribution.variables

		return self._score(distribution, x, y, _as_list(z))

	def _use_frequencies(self, data, variables, models):
		if models:
			return False

		for variable in variables:
			if variable not in data or variable.cardinality != 2:
				return False

		return not bool(torch.any(data.columns(variables) < 0))

	def _pairwise(self, data, variables):
		if data.total_weight <= 0:
			raise InvalidArgumentError("The data has zero total weight.")

		frequencies = self.counter.compute(data, variables)
		h_x, h_y, h_xy = _binary_entropies(frequencies, data.total_weight)

		mi = torch.clamp(h_x + h_y - h_xy, min=0)
		return self._combine(mi, h_x, h_y, h_xy)

	def test(self, data, x, y, models=None):
		"""The score between `x` and `y` computed from the data.

		Parameters
		----------
		data: latentree.DiscreteData
			The data.

		x, y: latentree.Variable or list of latentree.Variable
			The two groups.

		models: latentree.DiscreteBayesNet, list or None, optional
			Models providing posteriors of the variables that are not in the
			data. Default is None.


		Returns
		-------
		score: float
			The score.
		"""

		x, y = _as_list(x), _as_list(y)

		if len(x) == 1 and len(y) == 1 and x[0] is not y[0]:
			if self._use_frequencies(data, x + y, models):
				return self._pairwise(data, x + y)[0, 1].item()

		variables = x + [v for v in y if v not in x]
		distribution = empirical_distribution(variables, data, models)
		return self._score(distribution, x, y)

	def test_all(self, data, variables=None, models=None):
		"""The score between every pair of `variables`.

		Returns
		-------
		scores: dict
			A symmetric mapping variable -> variable -> score, without the
			pairs of a variable with itself.
		"""

		variables = data.variables if variables is None else list(variables)
		scores = {variable: {} for variable in variables}

		if self._use_frequencies(data, variables, models):
			matrix = self._pairwise(data, variables)
			for i, a in enumerate(variables):
				for j, b in enumerate(variables):
					if i != j:
						scores[a][b] = matrix[i, j].item()

			return scores

		for i, a in enumerate(variables):
			for b in variables[i+1:]:
				distribution = empirical_distribution([a, b], data, models)
				scores[a][b] = scores[b][a] = self._score(distribution, a, b)

		return scores

	def test_conditional(self, data, x, y, z, models=None):
		"""The score between `x` and `y` given `z` computed from the data."""

		x, y, z = _as_list(x), _as_list(y), _as_list(z)
		distribution = empirical_distribution(x + y + z, data, models)
		return self._score(distribution, x, y, z)


class MutualInformationTest(IndependenceTest):
	"""The mutual information, in nats."""

	def _score(self, distribution, x, y, z=()):
		return conditional_mutual_information(distribution, x, y, z)

	def _combine(self, mi, h_x, h_y, h_xy):
		return mi


class NormalizedMutualInformationTest(IndependenceTest):
	"""The mutual information divided by a normalization factor.

	Parameters
	----------
	normalization: NormalizationFactor or None, optional
		What to divide by. Default is None, meaning NMIJoint().

	counter: FrequencyCounter or None, optional
		See IndependenceTest. Default is None.
	"""

	def __init__(self, normalization=None, counter=None):
		super().__init__(counter=counter)
		self.normalization = normalization or NMIJoint()

	def _score(self, distribution, x, y, z=()):
		return normalized_mutual_information(distribution, x, y,
			self.normalization, z)

	def _combine(self, mi, h_x, h_y, h_xy):
		h_x, h_y = h_x.expand_as(h_xy), h_y.expand_as(h_xy)
		return _normalize(mi, self.normalization(h_x, h_y, h_xy))


class FrequencyNMITest(object):
	"""A chi-square calibrated conditional independence signal.

	Builds the empirical joint distribution of two variables and of the
	conditioning variables, computes their conditional normalized mutual
	information and returns the density of the chi-square distribution with
	(|a| - 1) * (|b| - 1) degrees of freedom at twice that value. The
	result is a continuous signal, not an accept / reject decision: high
	values mean the statistic is compatible with independence.


	Parameters
	----------
	normalization: NormalizationFactor or None, optional
		What to divide the mutual information by. Default is None, meaning
		NMIJoint().
	"""

	def __init__(self, normalization=None):
		self.normalization = normalization or NMIJoint()

	def test(self, data, a, b, conditioning=()):
		"""The chi-square density of the statistic between `a` and `b`.

		Parameters
		----------
		data: latentree.DiscreteData
			The data. Every variable must be a column of it.

		a, b: latentree.Variable
			The two variables.

		conditioning: list of latentree.Variable, optional
			The conditioning variables. Default is ().


		Returns
		-------
		density: float
			The density of the statistic.
		"""

		conditioning = _as_list(conditioning)
		df = (a.cardinality - 1) * (b.cardinality - 1)
		if df < 1:
			raise InvalidArgumentError("Both variables need at least two "
				"states.")

		distribution = empirical_distribution([a, b] + conditioning, data)
		ncmi = normalized_mutual_information(distribution, a, b,
			self.normalization, conditioning)

		return float(chi2(df).pdf(2 * ncmi))
