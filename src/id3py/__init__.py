# id3py/__init__.py
"""
id3py: ID3 decision trees and random forests for categorical data.

Exports:
    - Dataset, Attribute, CategoricalAttribute, FloatAttribute
    - RuleGenerator, InformationGainRuleGenerator, GainRatioRuleGenerator
    - DecisionTreeNode, NodeType, induce_id3_tree, ID3DecisionTree
    - BaggedModel, RandomForest
    - ConfusionMatrix, get_confusion_matrix, get_accuracy
    - ContractViolationError, enable_logging
"""
from loguru import logger

from .base import Attribute, CategoricalAttribute, Dataset, FloatAttribute
from .ensemble import RandomForest
from .evaluation import ConfusionMatrix, get_accuracy, get_confusion_matrix
from .exceptions import ContractViolationError
from .logging import PACKAGE_NAME, enable_logging
from .meta import BaggedModel
from .rules import GainRatioRuleGenerator, InformationGainRuleGenerator, RuleGenerator
from .tree import DecisionTreeNode, ID3DecisionTree, NodeType, induce_id3_tree

logger.disable(PACKAGE_NAME)

__all__ = [
    "Attribute",
    "BaggedModel",
    "CategoricalAttribute",
    "ConfusionMatrix",
    "ContractViolationError",
    "Dataset",
    "DecisionTreeNode",
    "FloatAttribute",
    "GainRatioRuleGenerator",
    "ID3DecisionTree",
    "InformationGainRuleGenerator",
    "NodeType",
    "RandomForest",
    "RuleGenerator",
    "enable_logging",
    "get_accuracy",
    "get_confusion_matrix",
    "induce_id3_tree",
]
__version__ = "0.1.0"
