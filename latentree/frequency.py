# frequency.py

import torch

from joblib import Parallel
from joblib import delayed

from ._utils import _check_parameter


def _count(X, weights):
	"""Weighted co-occurrence counts of the present states of X.

	A state is present when it is greater than 0. The diagonal holds the
	weight of the instances where each variable is present and the other
	cells the weight of the instances where both variables are.
	"""

	present = (X > 0).type(torch.float64)
	return torch.matmul((present * weights.unsqueeze(1)).T, present)


class FrequencyCounter(object):
	"""Compute the frequency table of a dataset in a single pass.

	The frequency table is a square matrix indexed by the positions of the
	variables. Only states explicitly present in an instance, meaning
	observed and different from 0, contribute to the counts. For binary
	variables without missing values this is exactly the weight of the
	instances where a variable, or a pair of variables, takes the value 1.
	"""

	def compute(self, data, variables=None):
		"""Compute the frequency table.

		Parameters
		----------
		data: latentree.DiscreteData
			The data to count.

		variables: list of latentree.Variable or None, optional
			The variables indexing the table. If None, every variable of the
			data. Default is None.


		Returns
		-------
		frequencies: torch.tensor, shape=(len(variables), len(variables))
			The weighted co-occurrence counts.
		"""

		X = data.X if variables is None else data.columns(variables)
		return _count(X, data.weights)


class ParallelFrequencyCounter(FrequencyCounter):
	"""Compute the frequency table by divide and conquer.

	The instances are split in two halves recursively until a chunk holds
	no more than `threshold` instances. The chunks are counted in parallel
	with joblib and the partial tables are summed back up the same binary
	tree. The result equals the one of `FrequencyCounter` up to floating
	point rounding.


	Parameters
	----------
	threshold: int, optional
		The largest chunk counted directly. Default is 500.

	n_jobs: int, optional
		The number of jobs, as understood by joblib. Default is -1, meaning
		all processors.

	backend: str, optional
		The joblib backend. Default is 'threading'.
	"""

	def __init__(self, threshold=500, n_jobs=-1, backend='threading'):
		self.threshold = _check_parameter(threshold, "threshold", min_value=1,
			ndim=0)
		self.n_jobs = n_jobs
		self.backend = backend

	def _split(self, start, end):
		if end - start <= self.threshold:
			return [(start, end)]

		middle = (start + end) // 2
		return self._split(start, middle) + self._split(middle, end)

	def compute(self, data, variables=None):
		X = data.X if variables is None else data.columns(variables)
		chunks = self._split(0, X.shape[0])

		if len(chunks) == 1:
			return _count(X, data.weights)

		parallel = Parallel(n_jobs=self.n_jobs, backend=self.backend)
		tables = parallel(delayed(_count)(X[start:end],
			data.weights[start:end]) for start, end in chunks)

		while len(tables) > 1:
			merged = [tables[i] + tables[i+1] for i in range(0,
				len(tables) - 1, 2)]
			if len(tables) % 2 == 1:
				merged.append(tables[-1])

			tables = merged

		return tables[0]
