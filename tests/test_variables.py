# test_variables.py

import pytest

from joblib import Parallel
from joblib import delayed

from latentree.variables import Variable
from latentree.variables import VariableType
from latentree.variables import VariableRegistry
from latentree.errors import InvalidArgumentError

from .tools import assert_raises


@pytest.fixture
def registry():
	return VariableRegistry("x")


def test_registry_next(registry):
	assert registry.next() == (0, "x0")
	assert registry.next() == (1, "x1")
	assert len(registry) == 2


def test_registry_reserve(registry):
	registry.reserve("x10")
	assert registry.next() == (11, "x11")

	registry.reserve("x3")
	assert registry.next() == (12, "x12")


def test_registry_reserve_other_names(registry):
	registry.reserve("y10")
	registry.reserve("x")
	registry.reserve("x1a")
	assert registry.next() == (0, "x0")


def test_registry_threads(registry):
	indices = Parallel(n_jobs=4, backend='threading')(delayed(registry.next)()
		for i in range(200))

	assert len(set(indices)) == 200
	assert sorted(i for i, _ in indices) == list(range(200))


def test_variable_default_name(registry):
	a = Variable(3, registry=registry)
	b = Variable(2, registry=registry)

	assert a.name == "x0"
	assert b.name == "x1"
	assert a.index == 0
	assert b.index == 1
	assert a.cardinality == 3
	assert a.states == [0, 1, 2]
	assert a.is_manifest
	assert not a.is_latent


def test_variable_explicit_name(registry):
	a = Variable(2, name="x5", registry=registry)
	b = Variable(2, registry=registry)

	assert a.name == "x5"
	assert b.name == "x7"


def test_variable_latent():
	a = Variable(2, role=VariableType.LATENT)

	assert a.is_latent
	assert a.name.startswith("latent")
	assert a.registry is not Variable(2).registry


def test_variable_identity():
	a = Variable(2, name="a")
	b = Variable(2, name="a")

	assert a == a
	assert a != b
	assert len({a, b}) == 2


def test_variable_raises():
	assert_raises(InvalidArgumentError, Variable, 0)
	assert_raises(InvalidArgumentError, Variable, -2)
	assert_raises(InvalidArgumentError, Variable, 2, "latent")
