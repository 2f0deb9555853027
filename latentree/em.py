# em.py

import time

import torch

from joblib import Parallel
from joblib import delayed
from joblib import effective_n_jobs

from ._utils import _check_parameter
from ._utils import _check_random_state
from .inference import VariableElimination
from .score import ScoreType
from .score import LearningResult
from .score import score
from .score import log_likelihood
from .callbacks import _epoch_logs
from .errors import InvalidArgumentError


class ChickeringHeckerman(object):
	"""Pick a starting point for EM by successive halving.

	Every candidate first runs `n_init_iter` EM steps. Then, in rounds, the
	surviving candidates all run some EM steps, the worse half is dropped
	and the number of steps per round is doubled, until a single candidate
	remains or the step budget of the learner is spent.


	Parameters
	----------
	n_init_iter: int, optional
		The number of EM steps every candidate runs before the first round.
		Default is 1.
	"""

	def __init__(self, n_init_iter=1):
		self.n_init_iter = _check_parameter(n_init_iter, "n_init_iter",
			min_value=1, ndim=0)

	def initialize(self, em, candidates, data):
		scores = []
		for candidate in candidates:
			for i in range(self.n_init_iter):
				ll = em._step(candidate, data)

			scores.append(ll)

		em.n_steps += self.n_init_iter
		n_candidates, n_steps_per_round = len(candidates), 1

		while n_candidates > 1 and em.n_steps < em.max_iter:
			for j in range(n_steps_per_round):
				improved = False
				for i in range(n_candidates):
					last_score = scores[i]
					scores[i] = em._step(candidates[i], data)

					if scores[i] - last_score > em.tol:
						improved = True

				em.n_steps += 1
				if not improved:
					best = max(range(n_candidates), key=lambda i: scores[i])
					return candidates[best]

			order = sorted(range(n_candidates), key=lambda i: -scores[i])
			candidates = [candidates[i] for i in order]
			scores = [scores[i] for i in order]

			n_candidates //= 2
			n_steps_per_round = min(n_steps_per_round * 2,
				em.max_iter - em.n_steps)

		return candidates[0]


class MultipleRestarts(object):
	"""Pick a starting point for EM by running every candidate a little.

	Every candidate first runs `n_init_iter` EM steps, then up to
	`n_pre_steps` more, stopping early once it stops improving. The
	candidate with the highest log-likelihood is kept.


	Parameters
	----------
	n_pre_steps: int, optional
		The maximum number of EM steps each candidate runs after its initial
		steps. Default is 10.

	n_init_iter: int, optional
		The number of EM steps every candidate runs before the pre-steps.
		Default is 1.
	"""

	def __init__(self, n_pre_steps=10, n_init_iter=1):
		self.n_pre_steps = _check_parameter(n_pre_steps, "n_pre_steps",
			min_value=0, ndim=0)
		self.n_init_iter = _check_parameter(n_init_iter, "n_init_iter",
			min_value=1, ndim=0)

	def initialize(self, em, candidates, data):
		best, best_score = None, float("-inf")

		for candidate in candidates:
			for i in range(self.n_init_iter):
				last_score = em._step(candidate, data)

			for i in range(self.n_pre_steps):
				ll = em._step(candidate, data)
				improvement = ll - last_score
				last_score = ll

				if improvement <= em.tol:
					break

			if best is None or last_score > best_score:
				best, best_score = candidate, last_score

		em.n_steps += self.n_init_iter + self.n_pre_steps
		return best


class EM(object):
	"""Expectation-maximization for the tables of a discrete network.

	The E step computes the expected counts of every family configuration
	given the data by exact inference, the M step renormalizes them into
	new tables. Several random starting points are explored first, as
	chosen by the initialization strategy, and the surviving one is run
	until the log-likelihood improves by no more than `tol` or the step
	budget is spent. The network passed in is never modified, learning
	happens on copies.


	Parameters
	----------
	n_restarts: int, optional
		The number of starting points. Default is 64.

	tol: float, optional
		The minimum improvement in log-likelihood between two steps to keep
		going. Default is 1e-4.

	max_iter: int, optional
		The maximum number of EM steps, including those spent by the
		initialization. Default is 500.

	initialization: ChickeringHeckerman, MultipleRestarts or None, optional
		How to choose among the starting points. If None,
		ChickeringHeckerman(1) is used. Default is None.

	reuse: bool, optional
		Whether the parameters of the network passed in are the first
		starting point. The others are random. Default is True.

	frozen_variables: iterable, optional
		Variables, or names of variables, whose tables are never updated
		nor randomized. Default is ().

	score_type: ScoreType, optional
		The score of the returned result. Default is
		ScoreType.LOG_LIKELIHOOD.

	pseudocount: float, optional
		Added to every expected count before normalizing. Default is 0.

	random_state: int, numpy.random.RandomState or None, optional
		The source of randomness for the starting points. Default is None.

	verbose: bool, optional
		Whether to print the improvement and timings after each step.
		Default is False.

	callbacks: list or None, optional
		Callbacks called during learning. Default is None.
	"""

	def __init__(self, n_restarts=64, tol=1e-4, max_iter=500,
		initialization=None, reuse=True, frozen_variables=(),
		score_type=ScoreType.LOG_LIKELIHOOD, pseudocount=0, random_state=None,
		verbose=False, callbacks=None):
		self.n_restarts = _check_parameter(n_restarts, "n_restarts",
			min_value=1, ndim=0)
		self.tol = _check_parameter(tol, "tol", min_value=0, ndim=0)
		self.max_iter = _check_parameter(max_iter, "max_iter", min_value=1,
			ndim=0)
		self.initialization = initialization or ChickeringHeckerman(1)
		self.reuse = reuse
		self.frozen_variables = {getattr(v, 'name', v) for v in
			frozen_variables}

		if not isinstance(score_type, ScoreType):
			raise InvalidArgumentError("Unknown score type {}.".format(
				score_type))

		self.score_type = score_type
		self.pseudocount = pseudocount
		self.random_state = _check_random_state(random_state)
		self.verbose = verbose
		self.callbacks = callbacks or []
		self.n_steps = 0

	def _mutable(self, network):
		return [v for v in network.variables
			if v.name not in self.frozen_variables]

	def _e_step(self, network, data):
		return VariableElimination(network).expected_counts(data)

	def _step(self, network, data):
		"""Run one EM step on `network` in place.

		Returns the log-likelihood of the parameters before the update.
		"""

		counts, ll = self._e_step(network, data)

		for variable in self._mutable(network):
			distribution = network.distributions[variable]
			distribution.pseudocount = self.pseudocount
			distribution._reset_cache()
			distribution.summarize_counts(counts[variable])
			distribution.from_summaries()

		return ll

	def _candidates(self, network):
		mutable = self._mutable(network)
		candidates = []

		for i in range(self.n_restarts):
			candidate = network.clone()
			if not self.reuse or i != 0:
				candidate.randomly_parameterize(self.random_state, mutable)

			candidates.append(candidate)

		return candidates

	def learn(self, network, data):
		"""Learn the tables of a network from data.

		Parameters
		----------
		network: latentree.DiscreteBayesNet
			The network whose structure is kept and whose current parameters
			may serve as a starting point.

		data: latentree.DiscreteData
			The data. Every manifest variable of the network must be a
			column of the data.


		Returns
		-------
		result: latentree.LearningResult
			A new network with the learned parameters and its score.
		"""

		for variable in network.manifest_variables:
			if variable not in data:
				raise InvalidArgumentError("The data must contain all the "
					"manifest variables of the network, {} is "
					"missing.".format(variable.name))

		for callback in self.callbacks:
			callback.model = self
			callback.on_training_begin()

		self.n_steps = 0
		model = self.initialization.initialize(self, self._candidates(network),
			data)

		last_ll = self._step(model, data)
		self.n_steps += 1

		logs = {}
		while self.n_steps < self.max_iter:
			start_time = time.time()
			ll = self._step(model, data)
			self.n_steps += 1
			end_time = time.time()

			improvement = ll - last_ll
			if self.verbose:
				print("[{}] Improvement: {}, Time: {:4.4}s".format(
					self.n_steps, improvement, end_time - start_time))

			logs = _epoch_logs(self.n_steps, ll, improvement, start_time,
				end_time)
			for callback in self.callbacks:
				callback.on_epoch_end(logs)

			if improvement <= self.tol:
				break

			last_ll = ll

		for callback in self.callbacks:
			callback.on_training_end(logs)

		ll = log_likelihood(model, data)
		return LearningResult(model, score(data, model, ll, self.score_type),
			self.score_type)


def _expected_counts(network, data):
	return VariableElimination(network).expected_counts(data)


class ParallelEM(EM):
	"""EM whose E step is split over chunks of the data with joblib.

	The expected counts and log-likelihoods of the chunks are summed, so the
	result matches `EM` up to floating point rounding.


	Parameters
	----------
	n_jobs: int, optional
		The number of jobs, as understood by joblib. Default is -1, meaning
		all processors.

	backend: str, optional
		The joblib backend. Default is 'threading'.

	**kwargs: dict
		The arguments of `EM`.
	"""

	def __init__(self, n_jobs=-1, backend='threading', **kwargs):
		super().__init__(**kwargs)
		self.n_jobs = n_jobs
		self.backend = backend

	def _e_step(self, network, data):
		n_jobs = max(min(effective_n_jobs(self.n_jobs), data.n), 1)
		if n_jobs == 1:
			return _expected_counts(network, data)

		starts = [data.n * i // n_jobs for i in range(n_jobs)]
		ends = starts[1:] + [data.n]

		parallel = Parallel(n_jobs=n_jobs, backend=self.backend)
		results = parallel(delayed(_expected_counts)(network,
			data.subset(start, end)) for start, end in zip(starts, ends))

		counts = {v: torch.zeros_like(c) for v, c in results[0][0].items()}
		for chunk_counts, _ in results:
			for variable, c in chunk_counts.items():
				counts[variable] += c

		return counts, sum(ll for _, ll in results)


class LocalEM(EM):
	"""EM that only re-estimates the tables of some variables.

	Every other table is kept as is, which is useful after a local edit of
	the structure where most of the network is already fitted.


	Parameters
	----------
	mutable_variables: iterable
		Variables, or names of variables, whose tables are learned.

	**kwargs: dict
		The arguments of `EM`.
	"""

	def __init__(self, mutable_variables, **kwargs):
		super().__init__(**kwargs)
		self.mutable_variables = {getattr(v, 'name', v) for v in
			mutable_variables}

	def _mutable(self, network):
		return [v for v in network.variables if v.name in
			self.mutable_variables and v.name not in self.frozen_variables]
