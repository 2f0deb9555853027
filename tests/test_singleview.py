# test_singleview.py

import numpy
import pytest

from latentree.variables import Variable
from latentree.bayesian_network import DiscreteBayesNet
from latentree.latent_tree import LatentTreeModel
from latentree.latent_tree import create_lcm
from latentree.distributions import ConditionalCategorical
from latentree.score import ScoreType
from latentree.score import compute_score
from latentree.callbacks import History
from latentree.em import EM
from latentree.execution import ExecutionResult
from latentree.hill_climbing import AddArc
from latentree.hill_climbing import RemoveArc
from latentree.hill_climbing import ReverseArc
from latentree.singleview import HiddenNaiveBayes
from latentree.singleview import HiddenKDB
from latentree.singleview import HiddenTAN
from latentree.errors import InvalidArgumentError

from ._utils import _sample
from .tools import assert_raises


@pytest.fixture
def manifest():
	return [Variable(2, name="x{}".format(i)) for i in range(4)]


@pytest.fixture
def data(manifest):
	truth = create_lcm(manifest, cardinality=3, random_state=0)
	truth.distributions[truth.root] = ConditionalCategorical([0.3, 0.3, 0.4])
	for variable in manifest:
		truth.distributions[variable] = ConditionalCategorical([[0.9, 0.1],
			[0.5, 0.5], [0.1, 0.9]])

	return _sample(truth, 300, manifest, random_state=0)


@pytest.fixture
def learner():
	return EM(n_restarts=2, max_iter=20, score_type=ScoreType.BIC,
		random_state=0)


def _latent(model):
	latent = model.latent_variables
	assert len(latent) == 1
	return latent[0]


###


def test_hidden_naive_bayes(manifest, data, learner):
	algorithm = HiddenNaiveBayes(learner, max_cardinality=3, max_iter=3,
		random_state=0)
	result = algorithm.learn_model(data)
	model = result.model

	assert isinstance(model, LatentTreeModel)
	assert model.is_tree()
	assert set(model.manifest_variables) == set(manifest)
	assert 2 <= model.root.cardinality <= 3
	assert result.score_type == ScoreType.BIC
	assert abs(result.score - compute_score(model, data, ScoreType.BIC)) < 1e-8


def test_hidden_naive_bayes_binary(manifest, data, learner):
	result = HiddenNaiveBayes(learner, max_cardinality=2,
		random_state=0).learn_model(data)

	assert result.model.root.cardinality == 2
	assert result.model.n_edges == 4


def test_hidden_naive_bayes_execute(data, learner):
	result = HiddenNaiveBayes(learner, max_cardinality=2).execute(data,
		index=1)

	assert isinstance(result, ExecutionResult)
	assert result.index == 1
	assert result.score_type == ScoreType.BIC


def test_hidden_kdb_operators(manifest, data, learner):
	algorithm = HiddenKDB(learner, max_cardinality=3, max_parents=2)
	seed = algorithm._seed(data)
	operators = algorithm._operators(seed)

	assert type(seed) is DiscreteBayesNet
	assert seed.n_edges == 4

	arcs = {type(operator): operator for operator in operators
		if isinstance(operator, (AddArc, RemoveArc, ReverseArc))}
	assert list(arcs[RemoveArc].candidates(seed)) == []
	assert list(arcs[ReverseArc].candidates(seed)) == []

	candidates = list(arcs[AddArc].candidates(seed))
	assert len(candidates) == 12
	for candidate in candidates:
		assert candidate.n_edges == 5
		assert all(len(candidate.parents(v)) <= 2 for v in manifest)


def test_hidden_kdb(manifest, data, learner):
	algorithm = HiddenKDB(learner, max_cardinality=3, max_parents=2,
		max_iter=2, random_state=0)
	result = algorithm.learn_model(data)
	model = result.model
	latent = _latent(model)

	assert isinstance(model, DiscreteBayesNet)
	assert model.is_dag()
	assert set(model.manifest_variables) == set(manifest)
	assert 2 <= latent.cardinality <= 3

	for variable in manifest:
		assert model.contains_edge(latent, variable)
		assert len(model.parents(variable)) <= 2

	assert abs(result.score - compute_score(model, data, ScoreType.BIC)) < 1e-8


def test_hidden_kdb_raises(learner):
	assert_raises(InvalidArgumentError, HiddenKDB, learner, max_parents=0)


def _check_tan(model, manifest):
	latent = _latent(model)

	assert isinstance(model, DiscreteBayesNet)
	assert model.is_dag()
	assert set(model.manifest_variables) == set(manifest)

	tree_edges = [(a, b) for a, b in model.edges if a is not latent]
	assert len(tree_edges) == len(manifest) - 1
	assert len([v for v in manifest if len(model.parents(v)) == 1]) == 1

	for variable in manifest:
		assert model.contains_edge(latent, variable)
		assert len(model.parents(variable)) <= 2

	return latent


def test_hidden_tan(manifest, data, learner):
	history = History()
	algorithm = HiddenTAN(learner, max_cardinality=3, callbacks=[history],
		random_state=0)
	result = algorithm.learn_model(data)

	latent = _check_tan(result.model, manifest)
	assert 2 <= latent.cardinality <= 3
	assert result.score_type == ScoreType.BIC
	assert abs(result.score - compute_score(result.model, data,
		ScoreType.BIC)) < 1e-8

	assert history.epochs[0] == 2
	assert 1 <= len(history.epochs) <= 2
	assert history.improvements[0] == float("inf")


def test_hidden_tan_best_root(manifest, data, learner):
	algorithm = HiddenTAN(learner, random_state=0)
	best = algorithm.learn_tan(2, data)
	_check_tan(best.model, manifest)

	random_root = HiddenTAN(learner, random_root=True, random_state=0)
	result = random_root.learn_tan(2, data)
	_check_tan(result.model, manifest)


def test_hidden_tan_stops_when_worse(manifest, data, learner):
	class Scripted(HiddenTAN):
		scores = {2: -10.0, 3: -5.0, 4: -8.0, 5: -1.0}

		def learn_tan(self, cardinality, data):
			result = super().learn_tan(2, data)
			return result._replace(score=self.scores[cardinality])

	result = Scripted(learner, max_cardinality=5, random_root=True,
		random_state=0).learn_model(data)
	assert result.score == -5.0

	result = Scripted(learner, max_cardinality=5, threshold=2.0,
		random_root=True, random_state=0).learn_model(data)
	assert result.score == -5.0


def test_hidden_tan_verbose(data, learner, capsys):
	HiddenTAN(learner, max_cardinality=2, random_root=True,
		verbose=True).learn_model(data)

	out = capsys.readouterr().out
	assert out.startswith("[2] Improvement: inf, Time: ")


def test_hidden_tan_raises(learner):
	assert_raises(InvalidArgumentError, HiddenTAN, learner, max_cardinality=1)
