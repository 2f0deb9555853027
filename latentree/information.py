# information.py

"""
Entropies and mutual information over discrete joint distributions, and the
empirical distributions they are computed on. All quantities are in nats.
"""

import string

import torch

from ._utils import _as_list
from .distributions import JointCategorical
from .inference import VariableElimination
from .errors import InvalidArgumentError


_LETTERS = string.ascii_letters.replace("z", "")

def empirical_distribution(variables, data, models=None):
	"""The weighted empirical joint distribution of `variables`.

	Variables that are columns of the data are counted directly and
	instances with a missing value in any of them are skipped. Other
	variables must belong to one of `models`, and contribute the posterior
	distribution given each instance, computed by exact inference. Latent
	variables of the same model are handled jointly, those of different
	models are combined assuming independence given the data.


	Parameters
	----------
	variables: list of latentree.Variable
		The variables of the distribution, in order.

	data: latentree.DiscreteData
		The data.

	models: latentree.DiscreteBayesNet, list of them or None, optional
		The models providing posteriors for the variables that are not
		columns of the data. Default is None.


	Returns
	-------
	distribution: latentree.distributions.JointCategorical
		The normalized empirical distribution.
	"""

	variables = _as_list(variables)
	models = [] if models is None else _as_list(models)

	observed = [v for v in variables if v in data]
	groups = {}
	for variable in variables:
		if variable in data:
			continue

		for i, model in enumerate(models):
			if variable in model:
				groups.setdefault(i, []).append(variable)
				break
		else:
			raise InvalidArgumentError("Variable {} is neither in the data "
				"nor in any of the models.".format(variable.name))

	if not groups:
		distribution = JointCategorical(variables)
		distribution.summarize(data.columns(variables), data.weights)
		if torch.sum(distribution._xw_sum) <= 0:
			raise InvalidArgumentError("No instance with a positive weight "
				"observes all of the variables.")

		distribution.from_summaries()
		return distribution

	if len(variables) > len(_LETTERS):
		raise InvalidArgumentError("Too many variables in one empirical "
			"distribution, at most {} are supported.".format(len(_LETTERS)))

	letters = {v: _LETTERS[i] for i, v in enumerate(variables)}
	subscripts, operands = ['z'], [data.weights]

	for variable in observed:
		column = data.columns([variable])[:, 0]
		indicator = torch.zeros(data.n, variable.cardinality,
			dtype=torch.float64)
		present = column >= 0
		indicator[present] = torch.nn.functional.one_hot(column[present],
			variable.cardinality).type(torch.float64)

		subscripts.append('z' + letters[variable])
		operands.append(indicator)

	for i, group in groups.items():
		posterior = VariableElimination(models[i]).marginal(data, group)
		subscripts.append('z' + ''.join(letters[v] for v in group))
		operands.append(posterior)

	equation = "{}->{}".format(",".join(subscripts),
		''.join(letters[v] for v in variables))
	probs = torch.einsum(equation, *operands)

	total = torch.sum(probs)
	if total <= 0:
		raise InvalidArgumentError("No instance with a positive weight "
			"observes all of the variables.")

	return JointCategorical(variables, probs / total)


def _entropy(probs):
	probs = probs[probs > 0]
	return -torch.sum(probs * torch.log(probs))


def _check_variables(distribution, *groups):
	for group in groups:
		for variable in group:
			if variable not in distribution.variables:
				raise InvalidArgumentError("Variable {} is not part of the "
					"distribution.".format(getattr(variable, 'name',
					variable)))


def _union(*groups):
	union = []
	for group in groups:
		for variable in group:
			if variable not in union:
				union.append(variable)

	return union


def entropy(distribution, variables=None):
	"""The entropy of the marginal of `variables`, or of the whole joint."""

	if variables is None:
		return _entropy(distribution.probs).item()

	variables = _as_list(variables)
	_check_variables(distribution, variables)
	if not variables:
		return 0.0

	return _entropy(distribution.marginal(variables).probs).item()


def conditional_entropy(distribution, x, y):
	"""H(x | y) = H(x, y) - H(y)."""

	x, y = _as_list(x), _as_list(y)
	_check_variables(distribution, x, y)

	return entropy(distribution, _union(x, y)) - entropy(distribution, y)


def _check_disjoint(x, y):
	if any(variable in y for variable in x):
		raise InvalidArgumentError("Variable groups must be disjoint.")


def mutual_information(distribution, x, y):
	"""The mutual information between the groups `x` and `y`.

	The groups must be disjoint, except that the mutual information of a
	group with itself, or with one of its subsets, is the entropy of the
	smaller group.
	"""

	x, y = _as_list(x), _as_list(y)
	_check_variables(distribution, x, y)

	if all(variable in x for variable in y):
		return entropy(distribution, y)
	if all(variable in y for variable in x):
		return entropy(distribution, x)

	_check_disjoint(x, y)
	mi = (entropy(distribution, x) + entropy(distribution, y)
		- entropy(distribution, x + y))
	return max(mi, 0.0)


def conditional_mutual_information(distribution, x, y, z):
	"""The mutual information between `x` and `y` given `z`.

	I(x; y | z) = H(x, z) + H(y, z) - H(x, y, z) - H(z). With an empty `z`
	this is the mutual information.
	"""

	x, y, z = _as_list(x), _as_list(y), _as_list(z)
	_check_variables(distribution, x, y, z)

	if not z:
		return mutual_information(distribution, x, y)

	_check_disjoint(x, y)
	_check_disjoint(x, z)
	_check_disjoint(y, z)

	cmi = (entropy(distribution, x + z) + entropy(distribution, y + z)
		- entropy(distribution, x + y + z) - entropy(distribution, z))
	return max(cmi, 0.0)


class NormalizationFactor(object):
	"""Turns mutual information into a value in [0, 1].

	A factor is called with the entropies of the two groups and of their
	union, or with the same entropies conditioned on a third group, and
	returns the value the (conditional) mutual information is divided by.
	Works on floats and on tensors of entropies alike.
	"""

	def __call__(self, h_x, h_y, h_xy):
		raise NotImplementedError


class NMIJoint(NormalizationFactor):
	"""Normalize by the joint entropy."""

	def __call__(self, h_x, h_y, h_xy):
		return torch.as_tensor(h_xy, dtype=torch.float64)


class NMIMin(NormalizationFactor):
	"""Normalize by the smaller of the two entropies."""

	def __call__(self, h_x, h_y, h_xy):
		return torch.minimum(torch.as_tensor(h_x, dtype=torch.float64),
			torch.as_tensor(h_y, dtype=torch.float64))


class NMIMax(NormalizationFactor):
	"""Normalize by the larger of the two entropies."""

	def __call__(self, h_x, h_y, h_xy):
		return torch.maximum(torch.as_tensor(h_x, dtype=torch.float64),
			torch.as_tensor(h_y, dtype=torch.float64))


class NMISqrt(NormalizationFactor):
	"""Normalize by the geometric mean of the two entropies."""

	def __call__(self, h_x, h_y, h_xy):
		return torch.sqrt(torch.as_tensor(h_x, dtype=torch.float64)
			* torch.as_tensor(h_y, dtype=torch.float64))


def _normalize(mi, factor):
	"""Divide by the factor, a zero factor gives zero."""

	mi = torch.as_tensor(mi, dtype=torch.float64)
	return torch.where(factor > 0, mi / torch.where(factor > 0, factor,
		torch.ones_like(factor)), torch.zeros_like(mi))


def normalized_mutual_information(distribution, x, y, normalization, z=()):
	"""The (conditional) mutual information divided by a normalization.

	Parameters
	----------
	distribution: latentree.distributions.JointCategorical
		A joint distribution containing every variable of x, y and z.

	x, y: latentree.Variable or list of latentree.Variable
		The two groups.

	normalization: NormalizationFactor
		The factor to divide by.

	z: latentree.Variable or list of latentree.Variable, optional
		The conditioning group. Default is ().


	Returns
	-------
	nmi: float
		The normalized mutual information.
	"""

	x, y, z = _as_list(x), _as_list(y), _as_list(z)

	if not z:
		mi = mutual_information(distribution, x, y)
		factor = normalization(entropy(distribution, x), entropy(distribution,
			y), entropy(distribution, _union(x, y)))
	else:
		mi = conditional_mutual_information(distribution, x, y, z)
		factor = normalization(conditional_entropy(distribution, x, z),
			conditional_entropy(distribution, y, z),
			conditional_entropy(distribution, x + y, z))

	return _normalize(mi, factor).item()
