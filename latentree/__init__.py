# __init__.py: latentree


"""
Structure learning of latent tree models and other discrete Bayesian
networks with latent variables.
"""

from .errors import *

from .variables import Variable
from .variables import VariableType
from .variables import VariableRegistry
from .data import DiscreteData
from .data import MISSING_VALUE
from .io import load_data

from .bayesian_network import DiscreteBayesNet
from .latent_tree import LatentTreeModel
from .latent_tree import create_lcm
from .latent_tree import create_flat_ltm
from .latent_tree import create_flat_ltm_random_root
from .latent_tree import chow_liu_tree
from .inference import VariableElimination

from .score import ScoreType
from .score import LearningResult
from .score import score
from .score import log_likelihood
from .score import compute_score
from .em import EM
from .em import ParallelEM
from .em import LocalEM
from .em import ChickeringHeckerman
from .em import MultipleRestarts

from .frequency import FrequencyCounter
from .frequency import ParallelFrequencyCounter
from .information import *
from .stattest import IndependenceTest
from .stattest import MutualInformationTest
from .stattest import NormalizedMutualInformationTest
from .stattest import FrequencyNMITest

from .execution import ExecutionResult
from .execution import ClusteringAlgorithm
from .execution import execute
from .hill_climbing import *
from .clustering import *
from .singleview import HiddenNaiveBayes
from .singleview import HiddenKDB
from .singleview import HiddenTAN

__version__ = '0.1.0'
