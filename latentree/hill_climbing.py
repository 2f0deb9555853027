# hill_climbing.py

import time

from ._utils import _check_parameter
from ._utils import _check_random_state
from .execution import ClusteringAlgorithm
from .callbacks import _epoch_logs
from .errors import InvalidArgumentError


class StructureType(object):
	"""A constraint on the networks the search may visit."""

	def is_valid(self, network):
		raise NotImplementedError


class DagStructure(StructureType):
	"""Any directed acyclic graph. Acyclicity is kept by the network."""

	def is_valid(self, network):
		return True


class TreeStructure(StructureType):
	"""A single tree: one root and no node with two parents."""

	def is_valid(self, network):
		return network.is_tree()


def _names(variables):
	return {getattr(v, 'name', v) for v in variables}


class Operator(object):
	"""A local edit of the structure of a network.

	Applying an operator tries every legal edit of a copy of the network,
	learns the parameters of each candidate and returns the best one. Ties
	keep the candidate found first. Edits that would break the structure,
	or whose result is rejected by `structure_type`, are skipped. An
	operator without any legal edit returns None.


	Parameters
	----------
	black_list: iterable, optional
		Variables, or their names, the operator never touches. Default is ().

	structure_type: StructureType or None, optional
		The constraint every candidate must satisfy. Default is None,
		meaning DagStructure().
	"""

	def __init__(self, black_list=(), structure_type=None):
		self.black_list = _names(black_list)
		self.structure_type = structure_type or DagStructure()

	def _allowed(self, variable):
		return variable.name not in self.black_list

	def candidates(self, network):
		"""Yield every edited copy of the network."""

		raise NotImplementedError

	def apply(self, network, data, learner):
		"""Return the best scoring edit of the network, or None.

		Parameters
		----------
		network: latentree.DiscreteBayesNet
			The network to edit. It is not modified.

		data: latentree.DiscreteData
			The data.

		learner: latentree.EM or any object with a `learn` method
			Learns the parameters of each candidate.


		Returns
		-------
		result: latentree.LearningResult or None
			The best candidate with its learned parameters and score.
		"""

		best = None

		for candidate in self.candidates(network):
			if not self.structure_type.is_valid(candidate):
				continue

			result = learner.learn(candidate, data)
			if best is None or result.score > best.score:
				best = result

		return best


class _ArcOperator(Operator):
	def __init__(self, black_list=(), edge_black_list=(), structure_type=None,
		max_parents=None):
		super().__init__(black_list=black_list, structure_type=structure_type)
		self.edge_black_list = {(getattr(a, 'name', a), getattr(b, 'name', b))
			for a, b in edge_black_list}
		self.max_parents = max_parents

	def _edge_allowed(self, parent, child):
		return (self._allowed(parent) and self._allowed(child) and
			(parent.name, child.name) not in self.edge_black_list)


class AddArc(_ArcOperator):
	"""Add one edge between two nodes that are not yet connected.

	Parameters
	----------
	black_list: iterable, optional
		Variables, or their names, that never gain or lose an edge.

	edge_black_list: iterable of (parent, child), optional
		Edges that are never added.

	structure_type: StructureType or None, optional
		The constraint every candidate must satisfy.

	max_parents: int or None, optional
		The maximum number of parents of a node. Default is None, meaning no
		limit.
	"""

	def candidates(self, network):
		variables = [v for v in network.variables if self._allowed(v)]

		for parent in variables:
			for child in variables:
				if parent is child or not self._edge_allowed(parent, child):
					continue

				if (network.contains_edge(parent, child) or
					network.contains_edge(child, parent)):
					continue

				if (self.max_parents is not None and
					len(network.parents(child)) >= self.max_parents):
					continue

				candidate = network.clone()
				try:
					candidate.add_edge(parent, child)
				except InvalidArgumentError:
					continue

				yield candidate


class RemoveArc(_ArcOperator):
	"""Remove one edge of the network."""

	def candidates(self, network):
		for parent, child in network.edges:
			if not self._edge_allowed(parent, child):
				continue

			candidate = network.clone()
			candidate.remove_edge(parent, child)
			yield candidate


class ReverseArc(_ArcOperator):
	"""Reverse the direction of one edge of the network."""

	def candidates(self, network):
		for parent, child in network.edges:
			if not self._edge_allowed(parent, child):
				continue

			if (self.max_parents is not None and
				len(network.parents(parent)) >= self.max_parents):
				continue

			candidate = network.clone()
			try:
				candidate.reverse_edge(parent, child)
			except InvalidArgumentError:
				continue

			yield candidate


class IncreaseLatentCardinality(Operator):
	"""Give one latent variable `amount` more states.

	Parameters
	----------
	amount: int, optional
		The number of states added. Default is 1.

	max_cardinality: int or None, optional
		Latent variables with this many states are left alone. Default is
		None, meaning no limit.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for the new tables. Default is None.
	"""

	def __init__(self, amount=1, max_cardinality=None, black_list=(),
		structure_type=None, random_state=None):
		super().__init__(black_list=black_list, structure_type=structure_type)
		self.amount = _check_parameter(amount, "amount", min_value=1, ndim=0)
		self.max_cardinality = max_cardinality
		self.random_state = _check_random_state(random_state)

	def candidates(self, network):
		for variable in network.latent_variables:
			if not self._allowed(variable):
				continue

			if (self.max_cardinality is not None and
				variable.cardinality + self.amount > self.max_cardinality):
				continue

			yield network.increase_cardinality(variable, self.amount,
				random_state=self.random_state)


class DecreaseLatentCardinality(Operator):
	"""Remove `amount` states from one latent variable, keeping at least 2.

	Parameters
	----------
	amount: int, optional
		The number of states removed. Default is 1.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for the new tables. Default is None.
	"""

	def __init__(self, amount=1, black_list=(), structure_type=None,
		random_state=None):
		super().__init__(black_list=black_list, structure_type=structure_type)
		self.amount = _check_parameter(amount, "amount", min_value=1, ndim=0)
		self.random_state = _check_random_state(random_state)

	def candidates(self, network):
		for variable in network.latent_variables:
			if not self._allowed(variable):
				continue

			if variable.cardinality - self.amount < 2:
				continue

			yield network.decrease_cardinality(variable, self.amount,
				random_state=self.random_state)


class HillClimbing(ClusteringAlgorithm):
	"""Greedy search over network structures.

	The parameters of the seed network are learned first. Then, at every
	iteration, every operator proposes its best edit of the current network
	and the best proposal over all operators is considered, operators being
	tried in the order given. The search stops and keeps the current
	network when the proposal does not score strictly higher, or when it
	improves the score by more than `threshold`. Otherwise the proposal
	becomes the current network. After `max_iter` accepted iterations the
	last accepted network is returned.

	Since edits are evaluated independently, the search can be bounded in
	time: with a `timeout`, the deadline is checked before every iteration
	and every operator and the current network is returned once it passes.


	Parameters
	----------
	operators: list of Operator
		The edits to consider.

	learner: latentree.EM or any object with `learn` and `score_type`
		Learns the parameters and scores every candidate.

	max_iter: int, optional
		The maximum number of iterations. Default is 100.

	threshold: float, optional
		Improvements larger than this stop the search. Default is inf.

	timeout: float or None, optional
		The time budget in seconds. Default is None, meaning no limit.

	seed: latentree.DiscreteBayesNet or None, optional
		The starting network used by `learn_model`. Default is None.

	verbose: bool, optional
		Whether to print the improvement and timings after each iteration.
		Default is False.

	callbacks: list or None, optional
		Callbacks called during the search. Default is None.
	"""

	def __init__(self, operators, learner, max_iter=100,
		threshold=float("inf"), timeout=None, seed=None, verbose=False,
		callbacks=None):
		self.operators = list(operators)
		self.learner = learner
		self.max_iter = _check_parameter(max_iter, "max_iter", min_value=0,
			ndim=0)
		self.threshold = _check_parameter(threshold, "threshold", min_value=0,
			ndim=0)
		self.timeout = timeout
		self.seed = seed
		self.verbose = verbose
		self.callbacks = callbacks or []
		self.n_iter = 0

	def learn(self, network, data):
		"""Search for the best structure starting from `network`.

		Parameters
		----------
		network: latentree.DiscreteBayesNet
			The seed network. It is not modified.

		data: latentree.DiscreteData
			The data.


		Returns
		-------
		result: latentree.LearningResult
			The best network found with its score.
		"""

		deadline = None
		if self.timeout is not None:
			deadline = time.time() + self.timeout

		for callback in self.callbacks:
			callback.model = self
			callback.on_training_begin()

		previous = self.learner.learn(network.clone(), data)
		self.n_iter = 0

		logs = {}
		for i in range(1, self.max_iter+1):
			if deadline is not None and time.time() >= deadline:
				break

			start_time = time.time()
			best = None
			for operator in self.operators:
				if deadline is not None and time.time() >= deadline:
					break

				result = operator.apply(previous.model, data, self.learner)
				if result is not None and (best is None or
					result.score > best.score):
					best = result

			self.n_iter = i
			if best is None:
				break

			improvement = best.score - previous.score
			end_time = time.time()

			if self.verbose:
				print("[{}] Improvement: {}, Time: {:4.4}s".format(i,
					improvement, end_time - start_time))

			logs = _epoch_logs(i, best.score, improvement, start_time,
				end_time)
			for callback in self.callbacks:
				callback.on_epoch_end(logs)

			if (previous.score >= best.score or
				abs(best.score - previous.score) > self.threshold):
				break

			previous = best

		for callback in self.callbacks:
			callback.on_training_end(logs)

		return previous

	def learn_model(self, data):
		if self.seed is None:
			raise InvalidArgumentError("A seed network is needed to search "
				"from data alone.")

		return self.learn(self.seed, data)
