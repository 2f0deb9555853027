# inference.py

import string

import torch
import networkx

from ._utils import _as_list
from .errors import InvalidArgumentError
from .errors import NumericInconsistencyError


_BATCH = 'z'
_LETTERS = string.ascii_letters.replace(_BATCH, '')


def _contract(factors, variables):
	"""Multiply factors together and sum out everything not in `variables`.

	Each factor is a tuple (tensor, variables, batched). A batched factor
	carries the instances of the data on its first axis. The product is
	batched if any of the factors is.
	"""

	letters = {}
	for _, factor_variables, _ in factors:
		for variable in factor_variables:
			if variable not in letters:
				if len(letters) == len(_LETTERS):
					raise InvalidArgumentError("Too many variables in one "
						"elimination step.")

				letters[variable] = _LETTERS[len(letters)]

	batched = any(factor[2] for factor in factors)
	subscripts, operands = [], []
	for tensor, factor_variables, factor_batched in factors:
		subscript = ''.join(letters[v] for v in factor_variables)
		subscripts.append(_BATCH + subscript if factor_batched else subscript)
		operands.append(tensor)

	output = ''.join(letters[v] for v in variables)
	if batched:
		output = _BATCH + output

	equation = "{}->{}".format(",".join(subscripts), output)
	return torch.einsum(equation, *operands), list(variables), batched


def _elimination_order(network):
	"""Greedy min-degree elimination order over the moral graph."""

	graph = networkx.Graph(networkx.moral_graph(network._graph))
	order = []

	while graph.number_of_nodes() > 0:
		variable = min(graph.nodes, key=lambda v: (graph.degree(v),
			v.cardinality))
		neighbors = list(graph.neighbors(variable))

		for i, u in enumerate(neighbors):
			for v in neighbors[i+1:]:
				graph.add_edge(u, v)

		graph.remove_node(variable)
		order.append(variable)

	return order


class VariableElimination(object):
	"""Exact inference in a discrete Bayesian network.

	Queries are answered for a whole dataset at once: every table of the
	network is a factor shared by all instances and the evidence of each
	variable is a batched indicator factor with one row per instance.
	Variables are then summed out one at a time following a greedy
	min-degree order. A missing value and a variable absent from the data
	are both treated as unobserved.

	The object is tied to the structure of one network, re-create it when
	the structure changes.


	Parameters
	----------
	network: latentree.DiscreteBayesNet
		A fully parameterized network.
	"""

	def __init__(self, network):
		self.network = network
		self._order = _elimination_order(network)
		self._families = {v: network.family(v) for v in network.variables}

	def _columns(self, data):
		return {v: data.X[:, data.index(v)] for v in self.network.variables
			if v in data}, data.n

	def _evidence_columns(self, evidence):
		columns = {}
		for variable, state in evidence.items():
			if variable not in self.network:
				raise InvalidArgumentError("Variable {} is not part of the "
					"network.".format(getattr(variable, 'name', variable)))

			columns[variable] = torch.tensor([state], dtype=torch.int64)

		return columns, 1

	def _factors(self, columns, n, probs=None):
		factors = []
		for variable in self.network.variables:
			table = self.network.distributions[variable].probs
			if probs is not None:
				table = probs[variable]

			factors.append((table, self._families[variable], False))

		for variable, column in columns.items():
			observed = column >= 0
			if not torch.any(observed):
				continue

			indicator = torch.ones(n, variable.cardinality, dtype=torch.float64)
			indicator[observed] = torch.nn.functional.one_hot(column[observed],
				variable.cardinality).type(torch.float64)
			factors.append((indicator, [variable], True))

		return factors

	def _eliminate(self, factors, keep, n):
		for variable in self._order:
			if variable in keep:
				continue

			bucket = [f for f in factors if variable in f[1]]
			if not bucket:
				continue

			factors = [f for f in factors if variable not in f[1]]
			remaining = []
			for factor in bucket:
				for v in factor[1]:
					if v is not variable and v not in remaining:
						remaining.append(v)

			factors.append(_contract(bucket, remaining))

		joint, _, batched = _contract(factors, keep)
		if not batched:
			joint = joint.expand(n, *joint.shape)

		return joint

	def _joint(self, columns, n, variables, probs=None):
		return self._eliminate(self._factors(columns, n, probs=probs),
			variables, n)

	def likelihood(self, data):
		"""The probability of the evidence of each instance.

		Parameters
		----------
		data: latentree.DiscreteData
			The instances.

		Returns
		-------
		likelihood: torch.tensor, shape=(n,)
			The probability of the observed values of each instance.
		"""

		columns, n = self._columns(data)
		return self._joint(columns, n, [])

	def propagate(self, evidence):
		"""The probability of one full or partial assignment.

		Parameters
		----------
		evidence: dict
			A mapping from variables of the network to observed states.

		Returns
		-------
		probability: float
			The probability of the evidence.
		"""

		columns, n = self._evidence_columns(evidence)
		return self._joint(columns, n, [])[0].item()

	def marginal(self, data, variables):
		"""The posterior joint distribution of `variables` per instance.

		Parameters
		----------
		data: latentree.DiscreteData
			The instances.

		variables: latentree.Variable or list of latentree.Variable
			Variables of the network.

		Returns
		-------
		posterior: torch.tensor, shape=(n, *cardinalities)
			For every instance the distribution of the variables given the
			evidence, with one axis per variable in the order given.
		"""

		variables = _as_list(variables)
		for variable in variables:
			if variable not in self.network:
				raise InvalidArgumentError("Variable {} is not part of the "
					"network.".format(getattr(variable, 'name', variable)))

		columns, n = self._columns(data)
		joint = self._joint(columns, n, variables)

		dims = tuple(range(1, joint.ndim))
		total = torch.sum(joint, dim=dims, keepdim=True) if dims else joint
		if torch.any(total <= 0):
			raise NumericInconsistencyError("The evidence of an instance has "
				"zero probability under the network.")

		return joint / total

	def belief(self, data, variable):
		"""The posterior of a single variable, shape=(n, cardinality)."""

		return self.marginal(data, [variable])

	def family_belief(self, data, variable):
		"""The posterior of the parents of `variable` and the variable.

		The axes follow `network.family(variable)`, matching the table of
		the variable.
		"""

		return self.marginal(data, self._families[variable])

	def expected_counts(self, data):
		"""The expected sufficient statistics of every table.

		For every table the expected count of each family configuration,
		summed over the weighted instances, is the table times the gradient
		of the weighted log-likelihood with respect to it.


		Parameters
		----------
		data: latentree.DiscreteData
			The instances.

		Returns
		-------
		counts: dict
			A mapping from each variable to a tensor shaped like its table.

		log_likelihood: float
			The weighted log-likelihood of the data under the current
			parameters.
		"""

		probs = {v: self.network.distributions[v].probs.detach().clone()
			.requires_grad_(True) for v in self.network.variables}

		columns, n = self._columns(data)
		likelihood = self._joint(columns, n, [], probs=probs)

		weighted = data.weights > 0
		if torch.any(weighted & (likelihood <= 0)):
			raise NumericInconsistencyError("The evidence of an instance has "
				"zero probability under the network.")

		likelihood = torch.where(weighted, likelihood,
			torch.ones_like(likelihood))
		log_likelihood = torch.sum(data.weights * torch.log(likelihood))
		log_likelihood.backward()

		counts = {v: torch.clamp(p.detach() * p.grad, min=0)
			for v, p in probs.items()}
		return counts, log_likelihood.item()
