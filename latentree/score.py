# score.py

import enum
import math
import collections

import torch

from .inference import VariableElimination
from .errors import InvalidArgumentError
from .errors import NumericInconsistencyError


class ScoreType(enum.Enum):
	"""How a log-likelihood is turned into a score.

	Scores of different types are never compared with each other.
	"""

	LOG_LIKELIHOOD = "LogLikelihood"
	BIC = "BIC"
	AIC = "AIC"


class LearningResult(collections.namedtuple("LearningResult",
	["model", "score", "score_type"])):
	"""A learned model together with its score and the type of the score."""

	__slots__ = ()

	def __repr__(self):
		return "LearningResult(model={}, score={:.6f}, score_type={})".format(
			self.model, self.score, self.score_type.value)


def _check_score_type(score_type):
	if not isinstance(score_type, ScoreType):
		raise InvalidArgumentError("Unknown score type {}.".format(score_type))

	return score_type


def score(data, network, log_likelihood, score_type):
	"""Convert a log-likelihood into a score.

	The log-likelihood is returned as is, BIC subtracts
	`dimension * ln(total weight) / 2` and AIC subtracts the dimension,
	where the dimension is the number of free parameters of the network.


	Parameters
	----------
	data: latentree.DiscreteData
		The data the log-likelihood was computed on.

	network: latentree.DiscreteBayesNet
		The model the log-likelihood was computed for.

	log_likelihood: float
		The weighted log-likelihood of the data.

	score_type: ScoreType
		The score to compute.


	Returns
	-------
	score: float
		The score.
	"""

	score_type = _check_score_type(score_type)

	if score_type == ScoreType.LOG_LIKELIHOOD:
		return log_likelihood

	if score_type == ScoreType.BIC:
		total_weight = data.total_weight
		if total_weight <= 0:
			raise InvalidArgumentError("Cannot compute BIC on data with zero "
				"total weight.")

		return log_likelihood - network.dimension() * math.log(total_weight) / 2

	return log_likelihood - network.dimension()


def log_likelihood(network, data):
	"""The weighted log-likelihood of the data under the network.

	Raises a NumericInconsistencyError when an instance with a positive
	weight has zero probability, since the data cannot have been generated
	by the network.
	"""

	likelihood = VariableElimination(network).likelihood(data)

	weighted = data.weights > 0
	if torch.any(weighted & (likelihood <= 0)):
		raise NumericInconsistencyError("The evidence of an instance has zero "
			"probability under the network.")

	return torch.sum(data.weights[weighted] * torch.log(likelihood[weighted])
		).item()


def compute_score(network, data, score_type):
	"""Run inference over the data and score the network in one step."""

	return score(data, network, log_likelihood(network, data), score_type)
