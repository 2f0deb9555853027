# _distribution.py

import torch

from .._utils import _cast_as_tensor
from .._utils import _check_parameter


class Distribution(torch.nn.Module):
	"""A base distribution object.

	This distribution is inherited by all the other distributions. It holds
	the bookkeeping shared by every table: the inertia used when updating
	parameters and whether the parameters are frozen.
	"""

	def __init__(self, inertia, frozen):
		super(Distribution, self).__init__()

		_check_parameter(inertia, "inertia", min_value=0, max_value=1, ndim=0)
		_check_parameter(frozen, "frozen", value_set=[True, False], ndim=0)

		self.register_buffer("inertia", _cast_as_tensor(float(inertia)))
		self.register_buffer("frozen", _cast_as_tensor(frozen))

	def freeze(self):
		self.register_buffer("frozen", _cast_as_tensor(True))
		return self

	def unfreeze(self):
		self.register_buffer("frozen", _cast_as_tensor(False))
		return self

	def _reset_cache(self):
		raise NotImplementedError

	def probability(self, X):
		return torch.exp(self.log_probability(X))

	def log_probability(self, X):
		raise NotImplementedError

	def summarize(self, X, sample_weight=None):
		raise NotImplementedError

	def from_summaries(self):
		raise NotImplementedError

	def fit(self, X, sample_weight=None):
		self.summarize(X, sample_weight=sample_weight)
		self.from_summaries()
		return self
