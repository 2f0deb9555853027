# test_bayesian_network.py

import numpy
import torch
import pytest

from latentree.variables import Variable
from latentree.variables import VariableType
from latentree.bayesian_network import DiscreteBayesNet
from latentree.distributions import ConditionalCategorical
from latentree.errors import InvalidArgumentError
from latentree.errors import StructuralError

from .tools import assert_raises
from numpy.testing import assert_array_almost_equal


@pytest.fixture
def variables():
	h = Variable(2, role=VariableType.LATENT, name="h")
	return h, Variable(2, name="a"), Variable(3, name="b"), Variable(2,
		name="c")


@pytest.fixture
def network(variables):
	h, a, b, c = variables

	model = DiscreteBayesNet(name="toy")
	model.add_node(h, ConditionalCategorical([0.3, 0.7]))
	model.add_node(a)
	model.add_node(b)
	model.add_node(c)
	model.add_edges([(h, a), (h, b), (a, c)])
	return model


###


def test_initialization():
	model = DiscreteBayesNet()

	assert model.name == "DiscreteBayesNet"
	assert model.n_nodes == 0
	assert model.n_edges == 0
	assert len(model.distributions) == 0
	assert not model.is_tree()


def test_add_node(variables):
	h, a, b, c = variables
	model = DiscreteBayesNet()
	model.add_node(b)

	assert b in model
	assert a not in model
	assert model.distributions[b].n_categories == (3,)
	assert_array_almost_equal(model.distributions[b].probs, [1. / 3] * 3)

	assert_raises(StructuralError, model.add_node, b)
	assert_raises(InvalidArgumentError, model.add_node, "b")
	assert_raises(InvalidArgumentError, model.add_node, a,
		ConditionalCategorical([0.2, 0.3, 0.5]))


def test_structure(network, variables):
	h, a, b, c = variables

	assert network.n_nodes == 4
	assert network.n_edges == 3
	assert network.latent_variables == [h]
	assert set(network.manifest_variables) == {a, b, c}
	assert network.parents(c) == [a]
	assert set(network.children(h)) == {a, b}
	assert network.family(a) == [h, a]
	assert network.contains_edge(h, a)
	assert not network.contains_edge(a, h)
	assert network.get_variable("b") is b
	assert network.is_dag()
	assert network.is_tree()

	order = network.topological_order()
	assert order.index(h) < order.index(a) < order.index(c)

	assert_raises(InvalidArgumentError, network.get_variable, "d")
	assert_raises(InvalidArgumentError, network.parents, Variable(2))


def test_add_edge_reshapes_table(network, variables):
	h, a, b, c = variables

	assert network.distributions[b].n_categories == (2, 3)
	assert network.distributions[c].n_categories == (2, 2)

	network.add_edge(b, c)
	assert network.parents(c) == [a, b]
	assert network.distributions[c].n_categories == (2, 3, 2)
	assert not network.is_tree()


def test_add_edge_raises(network, variables):
	h, a, b, c = variables

	assert_raises(StructuralError, network.add_edge, a, a)
	assert_raises(StructuralError, network.add_edge, h, a)
	assert_raises(StructuralError, network.add_edge, c, h)
	assert_raises(InvalidArgumentError, network.add_edge, h, Variable(2))

	assert network.n_edges == 3
	assert network.distributions[h].n_categories == (2,)


def test_remove_edge(network, variables):
	h, a, b, c = variables
	network.distributions[c] = ConditionalCategorical([[0.2, 0.8],
		[0.6, 0.4]])

	network.remove_edge(a, c)
	assert network.n_edges == 2
	assert_array_almost_equal(network.distributions[c].probs, [0.4, 0.6])
	assert not network.is_tree()

	assert_raises(StructuralError, network.remove_edge, a, c)


def test_remove_node(network, variables):
	h, a, b, c = variables
	network.remove_node(a)

	assert a not in network
	assert a not in network.distributions
	assert network.n_edges == 1
	assert network.distributions[c].n_categories == (2,)


def test_reverse_edge(network, variables):
	h, a, b, c = variables
	network.reverse_edge(a, c)

	assert network.contains_edge(c, a)
	assert not network.contains_edge(a, c)
	assert network.parents(a) == [h, c]
	assert network.distributions[a].n_categories == (2, 2, 2)
	assert network.is_dag()


def test_reverse_edge_raises(network, variables):
	h, a, b, c = variables
	network.add_edge(h, c)

	assert_raises(StructuralError, network.reverse_edge, h, c)
	assert network.contains_edge(h, c)
	assert network.parents(c) == [a, h]
	assert network.distributions[c].n_categories == (2, 2, 2)
	assert_raises(StructuralError, network.reverse_edge, c, a)


def test_dimension(network):
	assert network.dimension() == 1 + 2 + 4 + 2


def test_clone(network, variables):
	h, a, b, c = variables
	network.add_edge(b, c)
	clone = network.clone()

	assert type(clone) is DiscreteBayesNet
	assert clone.name == "toy"
	assert set(clone.variables) == set(network.variables)
	assert clone.parents(c) == [a, b]

	clone.distributions[h].probs[0] = 0.9
	assert network.distributions[h].probs[0] == 0.3

	clone.remove_edge(h, a)
	assert network.contains_edge(h, a)


def test_randomly_parameterize(network, variables):
	h, a, b, c = variables
	before = network.distributions[h].probs.clone()

	assert network.randomly_parameterize(0, [b]) is network
	assert_array_almost_equal(network.distributions[h].probs, before)
	assert_array_almost_equal(network.distributions[b].probs.sum(dim=-1),
		numpy.ones(2))


def test_increase_cardinality(network, variables):
	h, a, b, c = variables
	model = network.increase_cardinality(h, 2, random_state=0)

	h2 = model.get_variable("h")
	assert h2 is not h
	assert h2.cardinality == 4
	assert h2.is_latent
	assert model.distributions[h2].n_categories == (4,)
	assert model.distributions[a].n_categories == (4, 2)
	assert model.distributions[b].n_categories == (4, 3)
	assert model.parents(c) == [a]
	assert_array_almost_equal(model.distributions[c].probs,
		network.distributions[c].probs)

	assert network.get_variable("h") is h
	assert network.distributions[a].n_categories == (2, 2)


def test_decrease_cardinality(network, variables):
	h, a, b, c = variables
	model = network.increase_cardinality(h, 1, random_state=0)
	model = model.decrease_cardinality(model.get_variable("h"))

	assert model.get_variable("h").cardinality == 2
	assert_raises(InvalidArgumentError, model.decrease_cardinality,
		model.get_variable("h"))
	assert_raises(InvalidArgumentError, network.increase_cardinality, a)
