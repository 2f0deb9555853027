# callbacks.py

class Callback(object):
	"""An object that adds functionality during learning.

	A callback is a function or group of functions that can be executed
	during any of latentree's iterative procedures: EM, hill climbing and
	the clustering pipeline. A callback can be called at three stages-- the
	beginning of learning, at the end of each iteration, and at the end of
	learning. Users can define any functions that they wish in the
	corresponding functions.

	The `logs` passed to `on_epoch_end` and `on_training_end` are a dict with
	the keys `epoch`, `score`, `improvement`, `duration`, `epoch_start_time`
	and `epoch_end_time`.
	"""

	def __init__(self):
		self.model = None

	def on_training_begin(self):
		"""Functionality to add to the beginning of learning.

		This method will be called at the beginning of each procedure.
		"""

		pass

	def on_training_end(self, logs):
		"""Functionality to add to the end of learning.

		This method will be called at the end of each procedure.
		"""

		pass

	def on_epoch_end(self, logs):
		"""Functionality to add to the end of each iteration."""

		pass


class History(Callback):
	"""Keeps a history of the score during learning."""

	def on_training_begin(self):
		self.scores = []
		self.improvements = []
		self.epoch_start_times = []
		self.epoch_end_times = []
		self.epoch_durations = []
		self.epochs = []

	def on_epoch_end(self, logs):
		"""Save the logs to the appropriate lists."""

		self.scores.append(logs['score'])
		self.improvements.append(logs['improvement'])
		self.epoch_start_times.append(logs['epoch_start_time'])
		self.epoch_end_times.append(logs['epoch_end_time'])
		self.epoch_durations.append(logs['duration'])
		self.epochs.append(logs['epoch'])


class LambdaCallback(Callback):
	"""A callback that takes in anonymous functions for any of the methods, for convenience."""

	def __init__(self, on_training_begin=None, on_training_end=None, on_epoch_end=None):
		self.on_training_begin_ = on_training_begin
		self.on_training_end_ = on_training_end
		self.on_epoch_end_ = on_epoch_end

	def on_training_begin(self):
		if self.on_training_begin_ is not None:
			self.on_training_begin_()

	def on_training_end(self, logs):
		if self.on_training_end_ is not None:
			self.on_training_end_(logs)

	def on_epoch_end(self, logs):
		if self.on_epoch_end_ is not None:
			self.on_epoch_end_(logs)


def _epoch_logs(epoch, score, improvement, start_time, end_time):
	return {
		'epoch': epoch,
		'score': score,
		'improvement': improvement,
		'duration': end_time - start_time,
		'epoch_start_time': start_time,
		'epoch_end_time': end_time
	}
