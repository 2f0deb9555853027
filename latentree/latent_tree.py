# latent_tree.py

import itertools

import networkx

from ._utils import _check_random_state
from .bayesian_network import DiscreteBayesNet
from .variables import Variable
from .variables import VariableType
from .information import empirical_distribution
from .errors import InvalidArgumentError
from .errors import StructuralError


class LatentTreeModel(DiscreteBayesNet):
	"""A tree shaped Bayesian network with latent internal nodes.

	Every node has at most one parent, so the network is a forest at all
	times and a tree once it is connected. The leaves are usually manifest
	variables and the internal nodes latent variables.


	Parameters
	----------
	name: str, optional
		The name of the model. Default is "LatentTreeModel".
	"""

	def __init__(self, name="LatentTreeModel"):
		super().__init__(name=name)

	def _check_edge(self, parent, child, graph):
		super()._check_edge(parent, child, graph)

		if graph.in_degree(child) > 0:
			raise StructuralError("Variable {} already has a parent.".format(
				child.name))

	@property
	def root(self):
		roots = [v for v in self._graph.nodes if self._graph.in_degree(v) == 0]
		if len(roots) != 1:
			raise StructuralError("The model has {} roots.".format(len(roots)))

		return roots[0]

	@property
	def leaves(self):
		return [v for v in self._graph.nodes if self._graph.out_degree(v) == 0]

	@property
	def internal_nodes(self):
		return [v for v in self._graph.nodes if self._graph.out_degree(v) > 0]

	def parent(self, variable):
		parents = self.parents(variable)
		return parents[0] if parents else None

	def to_bayes_net(self):
		"""A DiscreteBayesNet copy of the model, free of the tree constraint."""

		return self._copy_into(DiscreteBayesNet(name=self.name))


def create_lcm(manifest_variables, cardinality=2, name="LCM",
	random_state=None):
	"""Create a latent class model with random parameters.

	The model has a single new latent root with `cardinality` states and
	one edge from the root to every manifest variable.


	Parameters
	----------
	manifest_variables: list of latentree.Variable
		The leaves of the model.

	cardinality: int, optional
		The number of states of the latent root. Default is 2.

	name: str, optional
		The name of the model. Default is "LCM".

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for the parameters. Default is None.


	Returns
	-------
	model: LatentTreeModel
		The latent class model.
	"""

	model = LatentTreeModel(name=name)
	root = model.add_node(Variable(cardinality, role=VariableType.LATENT))

	for variable in manifest_variables:
		model.add_node(variable)
		model.add_edge(root, variable)

	return model.randomly_parameterize(random_state)


def chow_liu_tree(variables, data, test, models=None, root=None,
	conditioning=None):
	"""The maximum weight spanning tree over pairwise dependency scores.

	Every pair of variables is scored by `test` over its empirical
	distribution, conditioned on `conditioning` when one is given. The
	undirected maximum spanning tree is then oriented away from `root`.


	Parameters
	----------
	variables: list of latentree.Variable
		The variables to connect.

	data: latentree.DiscreteData
		The data.

	test: latentree.IndependenceTest
		The pairwise score.

	models: latentree.DiscreteBayesNet, list or None, optional
		Models providing posteriors of variables that are not in the data.
		Default is None.

	root: latentree.Variable or None, optional
		The root of the oriented tree. If None, the first variable. Default
		is None.

	conditioning: latentree.Variable or None, optional
		A variable every pairwise score is conditioned on, typically the
		latent class of a model in `models`. Default is None.


	Returns
	-------
	tree: networkx.DiGraph
		The tree, with edges pointing from parents to children.
	"""

	variables = list(variables)
	root = variables[0] if root is None else root
	if root not in variables:
		raise InvalidArgumentError("The root must be one of the variables.")

	if conditioning is not None and conditioning in variables:
		raise InvalidArgumentError("The conditioning variable cannot be one of "
			"the variables.")

	z = [] if conditioning is None else [conditioning]
	graph = networkx.Graph()
	graph.add_nodes_from(variables)

	for a, b in itertools.combinations(variables, 2):
		distribution = empirical_distribution([a, b] + z, data, models)
		graph.add_edge(a, b, weight=test.compute(distribution, a, b, z))

	spanning_tree = networkx.maximum_spanning_tree(graph)

	tree = networkx.DiGraph()
	tree.add_nodes_from(variables)
	tree.add_edges_from(networkx.bfs_edges(spanning_tree, root))
	return tree


def create_flat_ltm(clusters, root, data, test, name="FlatLTM"):
	"""Connect the roots of several clusters into one latent tree.

	The roots of the clusters are linked by a Chow-Liu tree oriented away
	from `root`, with the dependency between two roots measured on their
	posteriors given the data. The clusters keep their structure and
	parameters, a root that gets a parent starts with a table that does not
	depend on it. With a single cluster, that cluster is returned.


	Parameters
	----------
	clusters: list of LatentTreeModel
		The clusters, each with a single latent root.

	root: latentree.Variable
		The root of one of the clusters, which becomes the global root.

	data: latentree.DiscreteData
		The data.

	test: latentree.IndependenceTest
		The pairwise score between roots.

	name: str, optional
		The name of the model. Default is "FlatLTM".


	Returns
	-------
	model: LatentTreeModel
		The flat latent tree model.
	"""

	if len(clusters) == 0:
		raise InvalidArgumentError("At least one cluster is needed.")

	if len(clusters) == 1:
		return clusters[0]

	roots = [cluster.root for cluster in clusters]
	if root not in roots:
		raise InvalidArgumentError("The root must be the root of one of the "
			"clusters.")

	tree = chow_liu_tree(roots, data, test, models=clusters, root=root)

	model = LatentTreeModel(name=name)
	for cluster in clusters:
		for variable in cluster.variables:
			model.add_node(variable)
			model.distributions[variable] = cluster.distributions[
				variable].copy()

		cluster._copy_edges(model._graph)

	for parent, child in tree.edges:
		model.add_edge(parent, child)

	return model


def create_flat_ltm_random_root(clusters, data, test, random_state=None,
	name="FlatLTM"):
	"""Like create_flat_ltm with the root of a random cluster as root."""

	if len(clusters) == 0:
		raise InvalidArgumentError("At least one cluster is needed.")

	random_state = _check_random_state(random_state)
	root = clusters[random_state.randint(len(clusters))].root
	return create_flat_ltm(clusters, root, data, test, name=name)
