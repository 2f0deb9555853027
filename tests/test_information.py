# test_information.py

import math

import numpy
import torch
import pytest

from sklearn.metrics import mutual_info_score

from latentree.variables import Variable
from latentree.data import DiscreteData
from latentree.distributions import JointCategorical
from latentree.latent_tree import create_lcm
from latentree.inference import VariableElimination
from latentree.information import empirical_distribution
from latentree.information import entropy
from latentree.information import conditional_entropy
from latentree.information import mutual_information
from latentree.information import conditional_mutual_information
from latentree.information import normalized_mutual_information
from latentree.information import NMIJoint
from latentree.information import NMIMin
from latentree.information import NMIMax
from latentree.information import NMISqrt
from latentree.errors import InvalidArgumentError

from .tools import assert_raises
from .tools import assert_almost_equal
from numpy.testing import assert_array_almost_equal


LN2 = math.log(2)


@pytest.fixture
def variables():
	return Variable(2, name="x"), Variable(2, name="y"), Variable(2, name="z")


@pytest.fixture
def copies(variables):
	x, y, z = variables
	probs = torch.zeros(2, 2, 2, dtype=torch.float64)
	probs[0, 0] = 0.25
	probs[1, 1] = 0.25
	return JointCategorical([x, y, z], probs)


@pytest.fixture
def skewed(variables):
	x, y, z = variables
	return JointCategorical([x, y], [[0.5, 0.1], [0.1, 0.3]])


###


def test_entropy(variables, copies):
	x, y, z = variables

	assert_almost_equal(entropy(copies, [x]), LN2)
	assert_almost_equal(entropy(copies, [x, y]), LN2)
	assert_almost_equal(entropy(copies), 2 * LN2)
	assert_almost_equal(entropy(copies, []), 0.0)
	assert_almost_equal(conditional_entropy(copies, x, y), 0.0)
	assert_almost_equal(conditional_entropy(copies, x, z), LN2)


def test_mutual_information_copies(variables, copies):
	x, y, z = variables

	assert_almost_equal(mutual_information(copies, x, y), LN2)
	assert_almost_equal(mutual_information(copies, x, z), 0.0)
	assert_almost_equal(mutual_information(copies, [x, y], z), 0.0)


def test_mutual_information_overlap(variables, copies):
	x, y, z = variables

	assert_almost_equal(mutual_information(copies, x, x), LN2)
	assert_almost_equal(mutual_information(copies, [x, z], [z]), LN2)
	assert_almost_equal(mutual_information(copies, [x], [x, z]), LN2)
	assert_raises(InvalidArgumentError, mutual_information, copies, [x, y],
		[y, z])


def test_mutual_information_raises(variables, skewed):
	x, y, z = variables
	assert_raises(InvalidArgumentError, mutual_information, skewed, x, z)


def test_conditional_mutual_information(variables, copies):
	x, y, z = variables

	assert_almost_equal(conditional_mutual_information(copies, x, y, z), LN2)
	assert_almost_equal(conditional_mutual_information(copies, x, z, y), 0.0)
	assert_almost_equal(conditional_mutual_information(copies, x, y, []),
		LN2)
	assert_raises(InvalidArgumentError, conditional_mutual_information,
		copies, x, y, x)


def test_normalized_mutual_information(variables, copies, skewed):
	x, y, z = variables

	for normalization in (NMIJoint(), NMIMin(), NMIMax(), NMISqrt()):
		assert_almost_equal(normalized_mutual_information(copies, x, y,
			normalization), 1.0)
		assert_almost_equal(normalized_mutual_information(copies, x, z,
			normalization), 0.0)
		assert_almost_equal(normalized_mutual_information(copies, x, y,
			normalization, z), 1.0)

	mi = mutual_information(skewed, x, y)
	h_x, h_y = entropy(skewed, x), entropy(skewed, y)
	h_xy = entropy(skewed, [x, y])

	assert_almost_equal(normalized_mutual_information(skewed, x, y,
		NMIJoint()), mi / h_xy)
	assert_almost_equal(normalized_mutual_information(skewed, x, y,
		NMIMin()), mi / min(h_x, h_y))
	assert_almost_equal(normalized_mutual_information(skewed, x, y,
		NMIMax()), mi / max(h_x, h_y))
	assert_almost_equal(normalized_mutual_information(skewed, x, y,
		NMISqrt()), mi / math.sqrt(h_x * h_y))


def test_normalized_mutual_information_zero_entropy(variables):
	x, y, z = variables
	constant = JointCategorical([x, y], [[1.0, 0.0], [0.0, 0.0]])

	for normalization in (NMIJoint(), NMIMin(), NMIMax(), NMISqrt()):
		assert normalized_mutual_information(constant, x, y,
			normalization) == 0.0


def test_normalization_factors_tensors():
	h_x = torch.tensor([0.5, 0.2], dtype=torch.float64)
	h_y = torch.tensor([0.3, 0.4], dtype=torch.float64)
	h_xy = torch.tensor([0.7, 0.5], dtype=torch.float64)

	assert_array_almost_equal(NMIJoint()(h_x, h_y, h_xy), [0.7, 0.5])
	assert_array_almost_equal(NMIMin()(h_x, h_y, h_xy), [0.3, 0.2])
	assert_array_almost_equal(NMIMax()(h_x, h_y, h_xy), [0.5, 0.4])
	assert_array_almost_equal(NMISqrt()(h_x, h_y, h_xy), numpy.sqrt([0.15,
		0.08]))


def test_empirical_distribution(variables):
	x, y, z = variables
	data = DiscreteData([x, y], [[0, 0], [1, 1], [1, 0], [-1, 1]],
		[1.0, 2.0, 1.0, 5.0])

	distribution = empirical_distribution([y, x], data)
	assert distribution.variables == [y, x]
	assert_array_almost_equal(distribution.probs, [[0.25, 0.25],
		[0.0, 0.5]])

	assert_raises(InvalidArgumentError, empirical_distribution, [x, z], data)


def test_empirical_distribution_zero_weight(variables):
	x, y, z = variables
	data = DiscreteData([x, y], [[0, -1], [-1, 1]])

	assert_raises(InvalidArgumentError, empirical_distribution, [x, y], data)


def test_empirical_distribution_sklearn():
	random_state = numpy.random.RandomState(0)
	X = random_state.randint(3, size=(500, 2))
	X[:, 1] = numpy.where(random_state.uniform(size=500) < 0.6, X[:, 0],
		X[:, 1])

	a, b = Variable(3), Variable(3)
	data = DiscreteData([a, b], X)

	distribution = empirical_distribution([a, b], data)
	assert_almost_equal(mutual_information(distribution, a, b),
		mutual_info_score(X[:, 0], X[:, 1]))


def test_empirical_distribution_latent(variables):
	x, y, z = variables
	model = create_lcm([x, y, z], random_state=0)
	root = model.root

	data = DiscreteData([x, y, z], [[0, 1, 1], [1, 1, 0], [0, -1, 0]],
		[1.0, 3.0, 2.0])

	distribution = empirical_distribution([root, x], data, model)
	assert distribution.variables == [root, x]
	assert_almost_equal(torch.sum(distribution.probs).item(), 1.0)

	posterior = VariableElimination(model).belief(data, root)
	expected = torch.zeros(2, 2, dtype=torch.float64)
	for i in range(data.n):
		expected[:, data.X[i, 0]] += data.weights[i] * posterior[i]

	assert_array_almost_equal(distribution.probs, expected / 6.0)
	assert_raises(InvalidArgumentError, empirical_distribution, [root, x],
		data)


def test_empirical_distribution_too_many_variables():
	manifest = [Variable(2) for i in range(52)]
	model = create_lcm(manifest, random_state=0)
	data = DiscreteData(manifest, numpy.zeros((2, 52), dtype=int))

	variables = [model.root] + manifest
	assert_raises(InvalidArgumentError, empirical_distribution, variables,
		data, model)


def test_mutual_information_copied_and_coin_flip():
	x, y, z = Variable(2), Variable(2), Variable(2)
	X = numpy.zeros((100, 3), dtype=int)
	X[:, 0] = numpy.arange(100) % 2
	X[:, 1] = X[:, 0]
	X[:, 2] = numpy.random.RandomState(0).randint(2, size=100)
	data = DiscreteData([x, y, z], X)

	distribution = empirical_distribution([x, y, z], data)
	assert_almost_equal(mutual_information(distribution, x, y), LN2)
	assert mutual_information(distribution, x, z) < 0.05


def test_mutual_information_independent_converges():
	random_state = numpy.random.RandomState(0)
	x, y = Variable(2), Variable(2)

	for n in (100, 1000, 10000, 100000):
		data = DiscreteData([x, y], random_state.randint(2, size=(n, 2)))
		distribution = empirical_distribution([x, y], data)
		mi = mutual_information(distribution, x, y)

		# 2 * n * mi is asymptotically chi-square with one degree of freedom
		assert 0 <= mi < 10.0 / n
