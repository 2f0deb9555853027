# test_data.py

import numpy
import torch
import pytest

from latentree.variables import Variable
from latentree.data import DiscreteData
from latentree.data import MISSING_VALUE
from latentree.errors import InvalidArgumentError

from .tools import assert_raises
from numpy.testing import assert_array_equal
from numpy.testing import assert_array_almost_equal


@pytest.fixture
def variables():
	return [Variable(2, name="a"), Variable(3, name="b"), Variable(2, name="c")]


@pytest.fixture
def X():
	return [[0, 1, 1],
		[1, 2, 0],
		[0, 1, 0],
		[1, -1, 1],
		[0, 1, 1]]


@pytest.fixture
def w():
	return [1.0, 2.0, 0.5, 1.0, 3.0]


###


def test_initialization(variables, X, w):
	data = DiscreteData(variables, X, w, name="toy")

	assert data.n == 5
	assert len(data) == 5
	assert data.name == "toy"
	assert data.X.dtype == torch.int64
	assert data.weights.dtype == torch.float64
	assert data.total_weight == 7.5
	assert data.has_missing


def test_initialization_default_weights(variables, X):
	data = DiscreteData(variables, X)

	assert_array_almost_equal(data.weights, numpy.ones(5))
	assert data.total_weight == 5.0


def test_initialization_empty(variables):
	data = DiscreteData(variables, [])

	assert data.n == 0
	assert data.X.shape == (0, 3)
	assert data.total_weight == 0.0


def test_initialization_raises(variables, X, w):
	assert_raises(InvalidArgumentError, DiscreteData, variables, [[0, 3, 0]])
	assert_raises(InvalidArgumentError, DiscreteData, variables, [[0, -2, 0]])
	assert_raises(InvalidArgumentError, DiscreteData, variables, [[0, 1]])
	assert_raises(InvalidArgumentError, DiscreteData, variables, X,
		[1, 1, 1, 1, -1])
	assert_raises(InvalidArgumentError, DiscreteData, variables, X, [1, 1])
	assert_raises(InvalidArgumentError, DiscreteData, variables[:1] * 3, X)


def test_contains_index(variables, X):
	data = DiscreteData(variables, X)

	assert variables[1] in data
	assert Variable(2, name="a") not in data
	assert data.index(variables[2]) == 2
	assert_raises(InvalidArgumentError, data.index, Variable(2))


def test_columns(variables, X):
	data = DiscreteData(variables, X)

	assert_array_equal(data.columns([variables[2], variables[0]]),
		[[1, 0], [0, 1], [0, 0], [1, 1], [1, 0]])
	assert_array_equal(data.columns(variables[1]), [[1], [2], [1], [-1], [1]])


def test_project(variables, X, w):
	data = DiscreteData(variables, X, w)
	projected = data.project([variables[0], variables[2]])

	assert projected.variables == [variables[0], variables[2]]
	assert projected.n == 4
	assert projected.total_weight == data.total_weight

	counts = {tuple(row.tolist()): weight.item() for row, weight in
		zip(projected.X, projected.weights)}
	assert counts == {(0, 1): 4.0, (1, 0): 2.0, (0, 0): 0.5, (1, 1): 1.0}


def test_project_missing(variables, X):
	data = DiscreteData(variables, X).project([variables[1]])

	assert data.n == 3
	assert MISSING_VALUE in data.X[:, 0].tolist()


def test_subset(variables, X, w):
	data = DiscreteData(variables, X, w).subset(1, 3)

	assert data.n == 2
	assert_array_equal(data.X, [[1, 2, 0], [0, 1, 0]])
	assert_array_almost_equal(data.weights, [2.0, 0.5])
