from .conditional_categorical import ConditionalCategorical
from .joint_categorical import JointCategorical
