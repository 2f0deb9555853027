# singleview.py

"""
Single-view clustering: one latent class variable explains every manifest
variable, with the manifest variables possibly depending on each other.
Every algorithm starts from a binary latent class model over the columns of
the data and searches the number of latent states.
"""

import time

import networkx

from ._utils import _check_parameter
from ._utils import _check_random_state
from .execution import ClusteringAlgorithm
from .hill_climbing import AddArc
from .hill_climbing import RemoveArc
from .hill_climbing import ReverseArc
from .hill_climbing import IncreaseLatentCardinality
from .hill_climbing import DecreaseLatentCardinality
from .hill_climbing import HillClimbing
from .latent_tree import create_lcm
from .latent_tree import chow_liu_tree
from .stattest import MutualInformationTest
from .callbacks import _epoch_logs


class HiddenNaiveBayes(ClusteringAlgorithm):
	"""A latent class model whose number of states is searched.

	Runs a hill climbing from a binary latent class model over every column
	of the data, where the only edit is adding a state to the latent class.


	Parameters
	----------
	learner: latentree.EM
		Learns and scores every candidate. Use a penalized score, such as
		BIC, to avoid always adding states.

	max_cardinality: int or None, optional
		The maximum number of states of the latent class. Default is None,
		meaning no limit.

	max_iter: int, optional
		The maximum number of iterations of the search. Default is 10.

	threshold: float, optional
		Improvements larger than this stop the search. Default is inf.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for new tables. Default is None.

	verbose: bool, optional
		Whether to print the improvement and timings after each iteration.
		Default is False.

	callbacks: list or None, optional
		Callbacks called during the search. Default is None.
	"""

	def __init__(self, learner, max_cardinality=None, max_iter=10,
		threshold=float("inf"), random_state=None, verbose=False,
		callbacks=None):
		self.learner = learner
		self.max_cardinality = max_cardinality
		self.max_iter = max_iter
		self.threshold = threshold
		self.random_state = _check_random_state(random_state)
		self.verbose = verbose
		self.callbacks = callbacks

	def _operators(self, seed):
		return [IncreaseLatentCardinality(max_cardinality=self.max_cardinality,
			random_state=self.random_state)]

	def _seed(self, data):
		return create_lcm(data.variables, 2, random_state=self.random_state)

	def learn_model(self, data):
		seed = self._seed(data)
		search = HillClimbing(self._operators(seed), self.learner,
			max_iter=self.max_iter, threshold=self.threshold,
			verbose=self.verbose, callbacks=self.callbacks)
		return search.learn(seed, data)


class HiddenKDB(HiddenNaiveBayes):
	"""A latent class model with dependencies between manifest variables.

	The search may change the number of states of the latent class in both
	directions and add, remove or reverse edges between variables, with at
	most `max_parents` parents per node. The edges from the latent class to
	the manifest variables are never removed nor reversed.


	Parameters
	----------
	learner: latentree.EM
		Learns and scores every candidate.

	max_cardinality: int or None, optional
		The maximum number of states of the latent class. Default is None.

	max_parents: int, optional
		The maximum number of parents of a node, the latent class included.
		Default is 2.

	max_iter: int, optional
		The maximum number of iterations of the search. Default is 10.

	threshold: float, optional
		Improvements larger than this stop the search. Default is inf.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for new tables. Default is None.

	verbose: bool, optional
		Whether to print the improvement and timings after each iteration.
		Default is False.

	callbacks: list or None, optional
		Callbacks called during the search. Default is None.
	"""

	def __init__(self, learner, max_cardinality=None, max_parents=2,
		max_iter=10, threshold=float("inf"), random_state=None, verbose=False,
		callbacks=None):
		super().__init__(learner, max_cardinality=max_cardinality,
			max_iter=max_iter, threshold=threshold, random_state=random_state,
			verbose=verbose, callbacks=callbacks)
		self.max_parents = _check_parameter(max_parents, "max_parents",
			min_value=1, ndim=0)

	def _seed(self, data):
		return super()._seed(data).to_bayes_net()

	def _operators(self, seed):
		fixed = seed.edges

		return [
			IncreaseLatentCardinality(max_cardinality=self.max_cardinality,
				random_state=self.random_state),
			DecreaseLatentCardinality(random_state=self.random_state),
			AddArc(max_parents=self.max_parents),
			RemoveArc(edge_black_list=fixed),
			ReverseArc(edge_black_list=fixed)
		]


class HiddenTAN(ClusteringAlgorithm):
	"""A tree augmented latent class model.

	For each number of latent states, from 2 up to `max_cardinality`, the
	parameters of a latent class model are learned, the manifest variables
	are connected by a Chow-Liu tree conditioned on the latent class, and
	the parameters of the augmented model are learned. The tree is rooted
	either at a random manifest variable or at the one giving the best
	score. The loop stops when a number of states scores lower than the
	previous one, which is then returned, or when it improves the score by
	more than `threshold`.


	Parameters
	----------
	learner: latentree.EM
		Learns and scores every model. Use a penalized score, such as BIC,
		to compare numbers of states.

	max_cardinality: int, optional
		The largest number of latent states tried. Default is 4.

	test: latentree.IndependenceTest or None, optional
		Scores the pairs of manifest variables given the latent class.
		Default is None, meaning MutualInformationTest().

	threshold: float, optional
		Improvements larger than this stop the loop. Default is inf.

	random_root: bool, optional
		Whether to root the tree at a random manifest variable rather than
		trying all of them. Default is False.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for initial tables and the tree root.
		Default is None.

	verbose: bool, optional
		Whether to print the improvement and timings after each number of
		states. Default is False.

	callbacks: list or None, optional
		Callbacks called after each number of states. Default is None.
	"""

	def __init__(self, learner, max_cardinality=4, test=None,
		threshold=float("inf"), random_root=False, random_state=None,
		verbose=False, callbacks=None):
		self.learner = learner
		self.max_cardinality = _check_parameter(max_cardinality,
			"max_cardinality", min_value=2, ndim=0)
		self.test = test or MutualInformationTest()
		self.threshold = threshold
		self.random_root = random_root
		self.random_state = _check_random_state(random_state)
		self.verbose = verbose
		self.callbacks = callbacks or []

	def _learn_tan(self, lcm, skeleton, root, data):
		network = lcm.to_bayes_net()
		network.add_edges(networkx.bfs_edges(skeleton, root))
		return self.learner.learn(network, data)

	def learn_tan(self, cardinality, data):
		"""The best tree augmented model with `cardinality` latent states."""

		lcm = create_lcm(data.variables, cardinality,
			random_state=self.random_state)
		lcm = self.learner.learn(lcm, data).model

		manifest = lcm.manifest_variables
		tree = chow_liu_tree(manifest, data, self.test, models=lcm,
			conditioning=lcm.root)
		skeleton = tree.to_undirected(as_view=True)

		if self.random_root:
			root = manifest[self.random_state.randint(len(manifest))]
			return self._learn_tan(lcm, skeleton, root, data)

		best = None
		for root in manifest:
			result = self._learn_tan(lcm, skeleton, root, data)
			if best is None or result.score > best.score:
				best = result

		return best

	def learn_model(self, data):
		for callback in self.callbacks:
			callback.model = self
			callback.on_training_begin()

		previous, logs = None, {}
		for cardinality in range(2, self.max_cardinality+1):
			start_time = time.time()
			result = self.learn_tan(cardinality, data)
			end_time = time.time()

			improvement = (float("inf") if previous is None
				else result.score - previous.score)
			if self.verbose:
				print("[{}] Improvement: {}, Time: {:4.4}s".format(cardinality,
					improvement, end_time - start_time))

			logs = _epoch_logs(cardinality, result.score, improvement,
				start_time, end_time)
			for callback in self.callbacks:
				callback.on_epoch_end(logs)

			if previous is not None and previous.score > result.score:
				break

			if previous is not None and abs(improvement) > self.threshold:
				previous = result
				break

			previous = result

		for callback in self.callbacks:
			callback.on_training_end(logs)

		return previous
