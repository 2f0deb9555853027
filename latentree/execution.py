# execution.py

import time
import uuid
import collections

from .score import LearningResult
from .errors import ExtensionNotImplementedError


class ExecutionResult(collections.namedtuple("ExecutionResult", ["model",
	"score", "score_type", "id", "index", "start_time", "finish_time"])):
	"""A learning result with an identifier, an index and its timings.

	Two results are equal only if all of their fields are, the unique
	identifier included, so two runs never compare equal.
	"""

	__slots__ = ()

	@property
	def duration(self):
		return self.finish_time - self.start_time

	@property
	def result(self):
		return LearningResult(self.model, self.score, self.score_type)

	def __str__(self):
		return ("ExecutionResult(index={}, id={}, score={}, score_type={}, "
			"duration={:4.4}s)".format(self.index, self.id, self.score,
			self.score_type.value, self.duration))


def execute(learn, data, index=0):
	"""Time a learning call and wrap its result.

	Exceptions raised by `learn` propagate unchanged.


	Parameters
	----------
	learn: callable
		Takes the data and returns a LearningResult.

	data: latentree.DiscreteData
		The data.

	index: int, optional
		The position of this run in a sequence of runs. Default is 0.


	Returns
	-------
	result: ExecutionResult
		The result of `learn` with a new identifier, the index and the start
		and finish wall clock times.
	"""

	start_time = time.time()
	result = learn(data)
	finish_time = time.time()

	return ExecutionResult(result.model, result.score, result.score_type,
		str(uuid.uuid4()), index, start_time, finish_time)


class ClusteringAlgorithm(object):
	"""An algorithm that learns a model from a dataset alone."""

	def learn_model(self, data):
		raise ExtensionNotImplementedError("{} does not implement "
			"learn_model.".format(type(self).__name__))

	def execute(self, data, index=0):
		"""Run learn_model and wrap the result in an ExecutionResult."""

		return execute(self.learn_model, data, index=index)
