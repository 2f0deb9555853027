# test_frequency.py

import numpy
import torch
import pytest

from latentree.variables import Variable
from latentree.data import DiscreteData
from latentree.frequency import FrequencyCounter
from latentree.frequency import ParallelFrequencyCounter
from latentree.errors import InvalidArgumentError

from .tools import assert_raises
from numpy.testing import assert_array_equal
from numpy.testing import assert_array_almost_equal


def _data(n, d=5, random_state=0):
	random_state = numpy.random.RandomState(random_state)
	variables = [Variable(2) for i in range(d)]
	X = random_state.randint(2, size=(n, d))
	w = random_state.uniform(0, 3, size=n)
	return DiscreteData(variables, X, w)


def _expected(data):
	X, w = data.X.numpy(), data.weights.numpy()
	d = X.shape[1]

	frequencies = numpy.zeros((d, d))
	for i in range(d):
		for j in range(d):
			frequencies[i, j] = numpy.sum(w * (X[:, i] > 0) * (X[:, j] > 0))

	return frequencies


###


def test_frequency_counter():
	data = DiscreteData([Variable(2), Variable(2), Variable(3)],
		[[1, 0, 2],
		 [1, 1, 0],
		 [0, 1, -1],
		 [1, 1, 1]], [1.0, 2.0, 0.5, 1.5])

	frequencies = FrequencyCounter().compute(data)
	assert_array_almost_equal(frequencies, [[4.5, 3.5, 2.5],
		[3.5, 4.0, 1.5],
		[2.5, 1.5, 2.5]])


def test_frequency_counter_symmetric():
	data = _data(200)
	frequencies = FrequencyCounter().compute(data)

	assert frequencies.shape == (5, 5)
	assert_array_almost_equal(frequencies, frequencies.T)
	assert_array_almost_equal(frequencies, _expected(data))


def test_frequency_counter_variables():
	data = _data(50)
	variables = [data.variables[3], data.variables[1]]

	frequencies = FrequencyCounter().compute(data, variables)
	expected = _expected(data)

	assert_array_almost_equal(frequencies, expected[[3, 1]][:, [3, 1]])


@pytest.mark.parametrize("n", [0, 1, 499, 500, 501, 1234, 4000])
def test_parallel_frequency_counter(n):
	data = _data(n)

	expected = FrequencyCounter().compute(data)
	frequencies = ParallelFrequencyCounter(n_jobs=2).compute(data)

	assert frequencies.shape == (5, 5)
	assert_array_almost_equal(frequencies, expected)


def test_parallel_frequency_counter_threshold():
	data = _data(100)
	counter = ParallelFrequencyCounter(threshold=7, n_jobs=3)

	chunks = counter._split(0, 100)
	assert chunks[0][0] == 0
	assert chunks[-1][1] == 100
	assert all(end - start <= 7 for start, end in chunks)
	assert all(a[1] == b[0] for a, b in zip(chunks[:-1], chunks[1:]))

	assert_array_almost_equal(counter.compute(data), _expected(data))


def test_parallel_frequency_counter_default_threshold():
	counter = ParallelFrequencyCounter()

	assert counter.threshold == 500
	assert counter._split(0, 500) == [(0, 500)]
	assert counter._split(0, 501) == [(0, 250), (250, 501)]
	assert_raises(InvalidArgumentError, ParallelFrequencyCounter, 0)
