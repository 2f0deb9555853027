# clustering.py

import time

from ._utils import _check_parameter
from ._utils import _check_random_state
from .execution import ClusteringAlgorithm
from .hill_climbing import HillClimbing
from .hill_climbing import IncreaseLatentCardinality
from .hill_climbing import DecreaseLatentCardinality
from .latent_tree import create_lcm
from .latent_tree import create_flat_ltm_random_root
from .information import empirical_distribution
from .score import ScoreType
from .score import LearningResult
from .score import compute_score
from .stattest import FrequencyNMITest
from .errors import InvalidArgumentError
from .errors import ExtensionNotImplementedError


class StopCondition(object):
	"""Decides when an island stops growing."""

	def should_stop(self, data, cluster, candidate):
		"""Whether `candidate` should not be added to `cluster`."""

		raise NotImplementedError


class MaxSizeStopCondition(StopCondition):
	"""Stop once the island holds `max_size` variables."""

	def __init__(self, max_size=5):
		self.max_size = _check_parameter(max_size, "max_size", min_value=3,
			ndim=0)

	def should_stop(self, data, cluster, candidate):
		return len(cluster) >= self.max_size


class FrequencyNMIStopCondition(StopCondition):
	"""Stop when the candidate looks independent of the whole island.

	The chi-square density of the normalized mutual information between the
	candidate and each variable of the island is computed with a
	FrequencyNMITest. The island stops growing when even the smallest
	density, the one of the most dependent member, exceeds `threshold`.


	Parameters
	----------
	threshold: float, optional
		The density above which the candidate is rejected. Default is 0.5.

	test: FrequencyNMITest or None, optional
		The test. Default is None, meaning FrequencyNMITest().
	"""

	def __init__(self, threshold=0.5, test=None):
		self.threshold = _check_parameter(threshold, "threshold", min_value=0,
			ndim=0)
		self.test = test or FrequencyNMITest()

	def should_stop(self, data, cluster, candidate):
		density = min(self.test.test(data, candidate, member)
			for member in cluster)
		return density > self.threshold


def _best_pair(variables, scores, allowed=None):
	best, best_score = None, float("-inf")

	for i, a in enumerate(variables):
		for b in variables[i+1:]:
			if allowed is not None and not allowed(a, b):
				continue

			if scores[a][b] > best_score:
				best, best_score = (a, b), scores[a][b]

	return best


def _closest(cluster, variables, scores):
	best, best_score = None, float("-inf")

	for a in cluster:
		for b in variables:
			if scores[a][b] > best_score:
				best, best_score = b, scores[a][b]

	return best


class AttributeGrouping(object):
	"""Partitions the manifest variables into islands.

	`find` returns one latent class model per island, each with a single
	latent root and learned parameters.
	"""

	def __init__(self, learner, test, random_state=None):
		self.learner = learner
		self.test = test
		self.random_state = _check_random_state(random_state)

	def find(self, data):
		raise NotImplementedError

	def _check_data(self, data):
		if len(data.variables) < 3:
			raise InvalidArgumentError("Not enough attributes in the data, at "
				"least 3 are needed.")

	def _learn_lcm(self, variables, data):
		lcm = create_lcm(variables, 2, random_state=self.random_state)
		return self.learner.learn(lcm, data).model


class IslandFinder(AttributeGrouping):
	"""Grow islands around the most dependent pairs of variables.

	The pair of remaining variables with the highest score starts an
	island, the remaining variable closest to the island is added, and
	variables keep being added until the stop condition says otherwise.
	Three remaining variables form the last island. One or two leftover
	variables join the island of the variable they depend on the most.


	Parameters
	----------
	learner: latentree.EM
		Learns the parameters of the latent class model of each island.

	stop_condition: StopCondition
		Decides when an island stops growing.

	test: latentree.IndependenceTest
		The pairwise score between variables.

	max_groups: int or None, optional
		The maximum number of islands. The last island takes every remaining
		variable. Default is None, meaning no limit.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for the initial parameters. Default is None.
	"""

	def __init__(self, learner, stop_condition, test, max_groups=None,
		random_state=None):
		super().__init__(learner, test, random_state=random_state)
		self.stop_condition = stop_condition
		self.max_groups = _check_parameter(max_groups, "max_groups",
			min_value=1, ndim=0)

	def find(self, data):
		self._check_data(data)

		remaining = list(data.variables)
		scores = self.test.test_all(data, remaining)
		islands = []

		while remaining:
			if len(remaining) < 3:
				for variable in remaining:
					island = max(islands, key=lambda island: max(
						scores[variable][v] for v in island))
					island.append(variable)
				break

			last_group = (self.max_groups is not None and
				len(islands) == self.max_groups - 1)
			if len(remaining) == 3 or last_group:
				islands.append(remaining)
				break

			cluster = list(_best_pair(remaining, scores))
			remaining = [v for v in remaining if v not in cluster]

			while remaining:
				candidate = _closest(cluster, remaining, scores)
				if len(cluster) >= 3 and self.stop_condition.should_stop(data,
					cluster, candidate):
					break

				cluster.append(candidate)
				remaining.remove(candidate)

			islands.append(cluster)

		return [self._learn_lcm(island, data) for island in islands]


class KeivaniFinder(AttributeGrouping):
	"""Agglomerate variables into islands pair by pair.

	At each step the highest scoring pair among the remaining manifest
	variables and island roots is merged. Two manifest variables start a new
	island, a manifest variable paired with an island root joins that island,
	whose latent class model is then learned again. Pairs of two roots are
	never merged. Scores between a root and the manifest variables are
	computed on the posterior of the root given the data.


	Parameters
	----------
	learner: latentree.EM
		Learns the parameters of the latent class model of each island.

	test: latentree.IndependenceTest
		The pairwise score between variables.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for the initial parameters. Default is None.
	"""

	def _add_root(self, model, remaining, scores, data):
		root = model.root
		scores[root] = {}

		for variable in remaining:
			if variable.is_manifest:
				distribution = empirical_distribution([root, variable], data,
					model)
				score = self.test.compute(distribution, root, variable)
				scores[root][variable] = scores[variable][root] = score

		remaining.append(root)

	def find(self, data):
		self._check_data(data)

		remaining = list(data.variables)
		scores = self.test.test_all(data, remaining)
		islands = {}

		while any(v.is_manifest for v in remaining):
			if len(remaining) == 1:
				raise InvalidArgumentError("Variable {} cannot be "
					"grouped.".format(remaining[0].name))

			a, b = _best_pair(remaining, scores,
				allowed=lambda a, b: a.is_manifest or b.is_manifest)

			if a.is_manifest and b.is_manifest:
				variables = [a, b]
			else:
				root, variable = (a, b) if a.is_latent else (b, a)
				variables = islands.pop(root).leaves + [variable]
				remaining.remove(root)

			remaining = [v for v in remaining if v is not a and v is not b]

			model = self._learn_lcm(variables, data)
			islands[model.root] = model
			self._add_root(model, remaining, scores, data)

		return list(islands.values())


class ClusterRefinement(object):
	"""Refines the islands before they are connected.

	This is an extension point: subclasses return the refined list of
	islands.
	"""

	def refine_clusters(self, clusters, data):
		raise ExtensionNotImplementedError("Cluster refinement is not "
			"implemented by {}.".format(type(self).__name__))


class KeepCardinality(ClusterRefinement):
	"""Leaves the islands as they are."""

	def refine_clusters(self, clusters, data):
		return list(clusters)


class CardinalityRefinement(ClusterRefinement):
	"""Search the number of states of each island root.

	Runs a hill climbing over every island with operators that increase or
	decrease the cardinality of its latent root.


	Parameters
	----------
	learner: latentree.EM
		Learns and scores every candidate. Use a penalized score, such as
		BIC, to avoid always adding states.

	max_cardinality: int or None, optional
		The maximum number of states of a root. Default is None, meaning no
		limit.

	max_iter: int, optional
		The maximum number of iterations of each search. Default is 10.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for new tables. Default is None.
	"""

	def __init__(self, learner, max_cardinality=None, max_iter=10,
		random_state=None):
		self.learner = learner
		self.max_cardinality = max_cardinality
		self.max_iter = max_iter
		self.random_state = _check_random_state(random_state)

	def refine_clusters(self, clusters, data):
		operators = [
			IncreaseLatentCardinality(max_cardinality=self.max_cardinality,
				random_state=self.random_state),
			DecreaseLatentCardinality(random_state=self.random_state)
		]

		search = HillClimbing(operators, self.learner, max_iter=self.max_iter)
		return [search.learn(cluster, data).model for cluster in clusters]


class Refinement(object):
	"""Refines the assembled latent tree.

	This is an extension point: subclasses return a LearningResult.
	"""

	def refine(self, model, data):
		raise ExtensionNotImplementedError("Model refinement is not "
			"implemented by {}.".format(type(self).__name__))


class PassThroughRefinement(Refinement):
	"""Returns the assembled model unchanged, with its score."""

	def __init__(self, score_type=ScoreType.LOG_LIKELIHOOD):
		self.score_type = score_type

	def refine(self, model, data):
		return LearningResult(model, compute_score(model, data,
			self.score_type), self.score_type)


class HillClimbingRefinement(Refinement):
	"""Improves the assembled model with a structure search."""

	def __init__(self, search):
		self.search = search

	def refine(self, model, data):
		return self.search.learn(model, data)


class BridgedIslands(ClusteringAlgorithm):
	"""Multi-view clustering with a flat latent tree model.

	The pipeline groups the manifest variables into islands, each modeled by
	a latent class model, refines the islands, connects the island roots
	with a Chow-Liu tree rooted at a random island, learns the parameters
	of the connected model and finally refines it. With a single island the
	island itself is the model and no tree is built.


	Parameters
	----------
	grouping: AttributeGrouping
		Finds the islands. Its learner learns the parameters of the connected
		model and its test scores the pairs of roots.

	cluster_refinement: ClusterRefinement or None, optional
		Refines the islands. Default is None, meaning KeepCardinality().

	refinement: Refinement or None, optional
		Refines the connected model. Default is None, meaning
		PassThroughRefinement with the score type of the learner.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for the choice of the root. Default is None.

	verbose: bool, optional
		Whether to print the duration of each stage. Default is False.
	"""

	def __init__(self, grouping, cluster_refinement=None, refinement=None,
		random_state=None, verbose=False):
		self.grouping = grouping
		self.cluster_refinement = cluster_refinement or KeepCardinality()
		self.refinement = refinement or PassThroughRefinement(
			getattr(grouping.learner, 'score_type', ScoreType.LOG_LIKELIHOOD))
		self.random_state = _check_random_state(random_state)
		self.verbose = verbose

	def _report(self, stage, start_time, detail=""):
		if self.verbose:
			print("[{}] {}Time: {:4.4}s".format(stage, detail,
				time.time() - start_time))

	def find_clusters(self, data):
		start_time = time.time()
		clusters = self.grouping.find(data)
		self._report("grouping", start_time, "Islands: {}, ".format(
			len(clusters)))

		start_time = time.time()
		clusters = self.cluster_refinement.refine_clusters(clusters, data)
		self._report("cluster refinement", start_time)
		return clusters

	def assemble(self, clusters, data):
		"""Connect the islands into one model with learned parameters."""

		if len(clusters) == 1:
			return clusters[0]

		start_time = time.time()
		model = create_flat_ltm_random_root(clusters, data, self.grouping.test,
			random_state=self.random_state)
		model = self.grouping.learner.learn(model, data).model
		self._report("assembly", start_time)
		return model

	def learn_model(self, data):
		"""Learn a flat latent tree model from the data.

		Returns
		-------
		result: latentree.LearningResult
			The refined model and its score.
		"""

		clusters = self.find_clusters(data)
		model = self.assemble(clusters, data)

		start_time = time.time()
		result = self.refinement.refine(model, data)
		self._report("refinement", start_time)
		return result
