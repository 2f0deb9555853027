# bayesian_network.py

import numpy
import networkx

from ._utils import _check_random_state
from .variables import Variable
from .variables import VariableType
from .distributions import ConditionalCategorical
from .errors import InvalidArgumentError
from .errors import StructuralError


class DiscreteBayesNet(object):
	"""A Bayesian network over discrete variables.

	The network is a directed acyclic graph whose nodes are variables. Each
	node owns a `ConditionalCategorical` table giving the distribution of
	the node given its parents, with one axis per parent in the order the
	parents were attached and the node's own states on the last axis.

	Acyclicity is kept by construction: `add_edge` checks reachability
	before inserting anything and raises a `StructuralError` for an edge
	that would close a cycle. Structural edits keep the tables consistent
	with the graph. A new parent repeats the child's table along the new
	axis and a removed parent is averaged out, so the current parameters
	remain a usable starting point for learning.


	Parameters
	----------
	name: str, optional
		The name of the network. Default is "DiscreteBayesNet".
	"""

	def __init__(self, name="DiscreteBayesNet"):
		self.name = name
		self._graph = networkx.DiGraph()
		self.distributions = {}

	@property
	def variables(self):
		return list(self._graph.nodes)

	@property
	def manifest_variables(self):
		return [v for v in self._graph.nodes if v.is_manifest]

	@property
	def latent_variables(self):
		return [v for v in self._graph.nodes if v.is_latent]

	@property
	def edges(self):
		return list(self._graph.edges)

	@property
	def n_nodes(self):
		return self._graph.number_of_nodes()

	@property
	def n_edges(self):
		return self._graph.number_of_edges()

	def __contains__(self, variable):
		return variable in self._graph

	def _check_variable(self, variable):
		if variable not in self._graph:
			raise InvalidArgumentError("Variable {} is not part of the "
				"network.".format(getattr(variable, 'name', variable)))

	def get_variable(self, name):
		"""The variable of the network called `name`."""

		for variable in self._graph.nodes:
			if variable.name == name:
				return variable

		raise InvalidArgumentError("No variable called {} in the "
			"network.".format(name))

	def parents(self, variable):
		self._check_variable(variable)
		return list(self._graph.predecessors(variable))

	def children(self, variable):
		self._check_variable(variable)
		return list(self._graph.successors(variable))

	def family(self, variable):
		"""The parents of `variable` followed by the variable itself."""

		return self.parents(variable) + [variable]

	def contains_edge(self, parent, child):
		return self._graph.has_edge(parent, child)

	def add_node(self, variable, distribution=None):
		"""Add a variable without parents.

		Parameters
		----------
		variable: latentree.Variable
			The variable to add.

		distribution: ConditionalCategorical or None, optional
			The marginal distribution of the variable. If None, a uniform
			distribution is used. Default is None.
		"""

		if not isinstance(variable, Variable):
			raise InvalidArgumentError("Nodes must be Variable objects.")

		if variable in self._graph:
			raise StructuralError("Variable {} is already part of the "
				"network.".format(variable.name))

		if distribution is None:
			distribution = ConditionalCategorical.uniform((variable.cardinality,))
		elif distribution.n_categories != (variable.cardinality,):
			raise InvalidArgumentError("Distribution of {} must have shape "
				"{}".format(variable.name, (variable.cardinality,)))

		self._graph.add_node(variable)
		self.distributions[variable] = distribution
		return variable

	def remove_node(self, variable):
		"""Remove a variable and every edge touching it."""

		self._check_variable(variable)

		for child in self.children(variable):
			self.remove_edge(variable, child)

		self._graph.remove_node(variable)
		del self.distributions[variable]

	def _check_edge(self, parent, child, graph):
		if parent is child:
			raise StructuralError("Cannot have self-loops.")

		if graph.has_edge(parent, child):
			raise StructuralError("Edge {} -> {} already exists.".format(
				parent.name, child.name))

		if networkx.has_path(graph, child, parent):
			raise StructuralError("Edge {} -> {} would create a "
				"cycle.".format(parent.name, child.name))

	def add_edge(self, parent, child):
		"""Adds a directed edge from the parent to the child node.

		Parameters
		----------
		parent: latentree.Variable
			The variable the edge begins at.

		child: latentree.Variable
			The variable the edge points to.
		"""

		self._check_variable(parent)
		self._check_variable(child)
		self._check_edge(parent, child, self._graph)

		self._graph.add_edge(parent, child)
		self.distributions[child] = self.distributions[child].add_parent(
			parent.cardinality)

	def add_edges(self, edges):
		for parent, child in edges:
			self.add_edge(parent, child)

	def remove_edge(self, parent, child):
		if not self._graph.has_edge(parent, child):
			raise StructuralError("Edge {} -> {} does not exist.".format(
				getattr(parent, 'name', parent), getattr(child, 'name', child)))

		idx = self.parents(child).index(parent)
		self._graph.remove_edge(parent, child)
		self.distributions[child] = self.distributions[child].remove_parent(
			idx)

	def reverse_edge(self, parent, child):
		"""Replace the edge parent -> child by child -> parent.

		If the reversed edge cannot be inserted the network is left as it
		was and a `StructuralError` is raised.
		"""

		if not self._graph.has_edge(parent, child):
			raise StructuralError("Edge {} -> {} does not exist.".format(
				getattr(parent, 'name', parent), getattr(child, 'name', child)))

		view = networkx.restricted_view(self._graph, [], [(parent, child)])
		self._check_edge(child, parent, view)

		self.remove_edge(parent, child)
		self.add_edge(child, parent)

	def dimension(self):
		"""The number of free parameters of the network."""

		return sum(distribution.dimension for distribution in
			self.distributions.values())

	def is_dag(self):
		return networkx.is_directed_acyclic_graph(self._graph)

	def is_tree(self):
		"""Whether the network is a single tree with one root."""

		if self.n_nodes == 0:
			return False

		if any(self._graph.in_degree(v) > 1 for v in self._graph.nodes):
			return False

		return networkx.is_tree(self._graph.to_undirected(as_view=True))

	def topological_order(self):
		return list(networkx.topological_sort(self._graph))

	def _copy_edges(self, graph, mapping=None):
		mapping = mapping or {}

		# parents must keep their order, it matches the table axes
		for child in self._graph.nodes:
			for parent in self._graph.predecessors(child):
				graph.add_edge(mapping.get(parent, parent),
					mapping.get(child, child))

	def _copy_into(self, network):
		for variable in self._graph.nodes:
			network._graph.add_node(variable)
			network.distributions[variable] = self.distributions[variable].copy()

		self._copy_edges(network._graph)
		return network

	def clone(self):
		"""A copy of the network sharing the same Variable objects."""

		return self._copy_into(type(self)(name=self.name))

	def randomly_parameterize(self, random_state=None, variables=None):
		"""Draw random tables for `variables`, or for every node if None."""

		random_state = _check_random_state(random_state)
		variables = self.variables if variables is None else variables

		for variable in variables:
			self._check_variable(variable)
			self.distributions[variable].randomize(random_state)

		return self

	def _replace_variable(self, old, new, random_state):
		network = type(self)(name=self.name)

		for variable in self._graph.nodes:
			node = new if variable is old else variable
			network._graph.add_node(node)

		self._copy_edges(network._graph, {old: new})

		affected = {new} | set(network._graph.successors(new))
		for variable in network._graph.nodes:
			if variable in affected:
				shape = [p.cardinality for p in network.parents(variable)]
				shape.append(variable.cardinality)
				network.distributions[variable] = ConditionalCategorical.random(
					shape, random_state)
			else:
				network.distributions[variable] = self.distributions[
					variable].copy()

		return network

	def _check_latent(self, variable):
		self._check_variable(variable)
		if variable.role != VariableType.LATENT:
			raise InvalidArgumentError("Variable {} is not latent.".format(
				variable.name))

	def increase_cardinality(self, variable, amount=1, random_state=None):
		"""A copy of the network where a latent variable has more states.

		The latent variable is replaced by a new variable with the same name
		and `amount` more states. The tables of the variable and of its
		children are drawn at random, the others are copied.


		Parameters
		----------
		variable: latentree.Variable
			A latent variable of the network.

		amount: int, optional
			How many states to add. Default is 1.

		random_state: int, numpy.random.RandomState or None, optional
			The source of randomness for the new tables. Default is None.


		Returns
		-------
		network: DiscreteBayesNet
			The new network. The original network is not modified.
		"""

		self._check_latent(variable)
		random_state = _check_random_state(random_state)

		new = Variable(variable.cardinality + amount, role=variable.role,
			name=variable.name, registry=variable.registry)
		return self._replace_variable(variable, new, random_state)

	def decrease_cardinality(self, variable, amount=1, random_state=None):
		"""A copy of the network where a latent variable has fewer states.

		Works like `increase_cardinality`. A latent variable must keep at
		least 2 states.
		"""

		self._check_latent(variable)
		random_state = _check_random_state(random_state)

		if variable.cardinality - amount < 2:
			raise InvalidArgumentError("Latent variable {} cannot have fewer "
				"than 2 states.".format(variable.name))

		new = Variable(variable.cardinality - amount, role=variable.role,
			name=variable.name, registry=variable.registry)
		return self._replace_variable(variable, new, random_state)

	def __repr__(self):
		return "{}(name={}, nodes={}, edges={})".format(type(self).__name__,
			self.name, self.n_nodes, self.n_edges)
