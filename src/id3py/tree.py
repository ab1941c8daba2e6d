# -*- coding: utf-8 -*-
"""
id3py.tree
==========

This module implements Quinlan's ID3 decision tree for categorical
predictors.  A tree is induced top‑down by asking a pluggable
:class:`~id3py.rules.RuleGenerator` for the attribute to split on, one branch
per observed value, until partitions are pure or no attribute is left.  An
optional reduced‑error pruning pass collapses subtrees that do not beat their
own majority label on held‑out rows.

Prediction walks from the root following the row's value at each split.  When
the split attribute is missing from the input schema, or the row carries a
value the node never saw during training, the walk stops and the current
node's majority label is returned.

The estimator wrapper :class:`ID3DecisionTree` follows scikit‑learn
conventions (``fit``/``predict``/``score``, ``get_params``) and adds rule
tracing, rule export, pretty printing and Graphviz export.
"""

from __future__ import annotations

from enum import Enum

import numpy as np
from loguru import logger
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.exceptions import NotFittedError
from sklearn.metrics import accuracy_score

from .base import Attribute, Dataset, check_dataset
from .evaluation import get_accuracy, get_confusion_matrix
from .exceptions import ContractViolationError
from .rules import InformationGainRuleGenerator, RuleGenerator

# Pruning ratios at or below this value disable the validation split.
_PRUNE_THRESHOLD = 0.001


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _majority_class(class_dist: dict[str, int]) -> str:
    """Most frequent label; ties go to the lexicographically smallest one."""
    return min(class_dist, key=lambda c: (-class_dist[c], c))


def _compute_accuracy(predictions: np.ndarray, truth: Dataset) -> float:
    return get_accuracy(get_confusion_matrix(truth, predictions))


# -----------------------------------------------------------------------------
# Node
# -----------------------------------------------------------------------------
class NodeType(Enum):
    """Whether a node is terminal or carries a split."""

    LEAF = 1
    RULE = 2


class DecisionTreeNode:
    """A node of an induced ID3 tree.

    Parameters
    ----------
    node_type : NodeType
        ``LEAF`` for terminal nodes, ``RULE`` for nodes created with the
        intention of splitting.
    class_dist : dict[str, int]
        Class histogram over the training rows that reached this node.
    class_value : str
        Majority label of ``class_dist``.
    class_attr : Attribute
        The class attribute of the training data.
    split_attr : Attribute or None
        Attribute tested at this node.
    children : dict[str, DecisionTreeNode] or None
        One child per value of ``split_attr`` observed in training.

    Notes
    -----
    A ``RULE`` node whose ``children`` is ``None`` (the rule generator found
    nothing worth splitting on, or pruning collapsed it) behaves exactly like
    a leaf.
    """

    def __init__(self, node_type: NodeType, class_dist: dict[str, int], class_value: str,
                 class_attr: Attribute, split_attr: Attribute | None = None,
                 children: dict[str, "DecisionTreeNode"] | None = None):
        self.node_type = node_type
        self.class_dist = class_dist
        self.class_value = class_value
        self.class_attr = class_attr
        self.split_attr = split_attr
        self.children = children

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    def n_leaves(self) -> int:
        if self.children is None:
            return 1
        return sum(ch.n_leaves() for ch in self.children.values())

    def depth(self) -> int:
        if self.children is None:
            return 0
        return 1 + max(ch.depth() for ch in self.children.values())

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def _walk(self, dataset: Dataset, row: int, trail: list | None = None) -> "DecisionTreeNode":
        """Return the node where traversal of ``row`` stops."""
        cur = self
        while cur.children is not None:
            at = cur.split_attr
            col = dataset.attribute_index(at)
            if col is None:
                break
            value = at.get_string_from_sys_val(dataset.get(row, col))
            nxt = cur.children.get(value)
            if nxt is None:
                break
            if trail is not None:
                trail.append((at, value))
            cur = nxt
        return cur

    def predict(self, dataset: Dataset) -> np.ndarray:
        """
        Label every row of ``dataset``.

        Parameters
        ----------
        dataset : Dataset
            Rows to classify.  Split attributes are looked up by identity;
            extra or missing columns are fine.

        Returns
        -------
        ndarray of shape (n_rows,)
            Predicted labels (``object`` dtype), in row order.
        """
        return np.array([self._walk(dataset, i).class_value for i in range(dataset.rows)],
                        dtype=object)

    # ------------------------------------------------------------------
    # Reduced-error pruning
    # ------------------------------------------------------------------
    def prune(self, using: Dataset) -> None:
        """
        Collapse subtrees that do not help on held‑out rows.

        ``using`` must be congruent with the rows that built this node, i.e.
        routed through the same splits at every ancestor.  Children are pruned
        first with the rows routed to them; children no validation row reaches
        are left alone.  The node is then turned into a leaf unless that makes
        accuracy on ``using`` strictly worse.

        Parameters
        ----------
        using : Dataset
            Validation rows reaching this node.
        """
        if self.children is None or self.split_attr is None or using.rows == 0:
            return

        if using.attribute_index(self.split_attr) is not None:
            sub = using.decompose_on_attribute_values(self.split_attr)
        else:
            sub = {}
        for key, child in self.children.items():
            rows = sub.get(key)
            if rows is None:
                continue
            child.prune(rows)

        baseline = _compute_accuracy(self.predict(using), using)

        children = self.children
        self.children = None
        collapsed = _compute_accuracy(self.predict(using), using)

        if collapsed < baseline:
            self.children = children
            return
        logger.debug(
            "pruned Rule({}) into Leaf({}): accuracy {:.4f} -> {:.4f} on {} rows",
            self.split_attr.name, self.class_value, baseline, collapsed, using.rows,
        )
        self.node_type = NodeType.LEAF
        self.split_attr = None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _nested_string(self, level: int) -> str:
        tabs = "\t" * level
        if self.children is None:
            return f"{tabs}Leaf({self.class_value})"
        parts = [f"{tabs}Rule({self.split_attr.name})"]
        for k in sorted(self.children):
            parts.append(f"\n{tabs}\t{k}\n")
            parts.append(self.children[k]._nested_string(level + 1))
        return "".join(parts)

    def __str__(self) -> str:
        return self._nested_string(0)

    def __repr__(self) -> str:
        if self.children is None:
            return f"DecisionTreeNode(Leaf({self.class_value}), dist={self.class_dist})"
        return (f"DecisionTreeNode(Rule({self.split_attr.name}), "
                f"branches={sorted(self.children)}, dist={self.class_dist})")


# -----------------------------------------------------------------------------
# Induction
# -----------------------------------------------------------------------------
def induce_id3_tree(dataset: Dataset, rule_generator: RuleGenerator) -> DecisionTreeNode:
    """
    Recursively build an ID3 tree over ``dataset``.

    Parameters
    ----------
    dataset : Dataset
        Training partition.  Not modified.
    rule_generator : RuleGenerator
        Chooses the split attribute at each node.

    Returns
    -------
    DecisionTreeNode
        Root of the induced subtree.

    Raises
    ------
    ValueError
        If ``dataset`` has no rows.
    ContractViolationError
        If ``rule_generator`` returns an attribute that is not a non‑class
        column of the partition it was given.
    """
    classes = dataset.count_class_values()
    if not classes:
        raise ValueError("cannot induce a tree from an empty partition")
    class_attr = dataset.class_attribute

    if len(classes) == 1:
        (only,) = classes
        logger.trace("Leaf({}) from pure partition of {} rows", only, dataset.rows)
        return DecisionTreeNode(NodeType.LEAF, classes, only, class_attr)

    max_class = _majority_class(classes)

    if not dataset.non_class_attributes():
        logger.trace("Leaf({}): no attributes left, dist={}", max_class, classes)
        return DecisionTreeNode(NodeType.LEAF, classes, max_class, class_attr)

    ret = DecisionTreeNode(NodeType.RULE, classes, max_class, class_attr)

    split_on = rule_generator.generate_split_attribute(dataset)
    if split_on is None:
        logger.trace("Rule without split, majority {}, dist={}", max_class, classes)
        return ret
    if split_on is class_attr or dataset.attribute_index(split_on) is None:
        name = getattr(split_on, "name", repr(split_on))
        raise ContractViolationError(
            f"{type(rule_generator).__name__} returned attribute {name!r}, "
            "which is not a splittable column of the partition",
            attribute_name=name,
        )

    split_instances = dataset.decompose_on_attribute_values(split_on)
    logger.trace("Rule({}) over {} rows, branches={}", split_on.name, dataset.rows,
                 sorted(split_instances))
    ret.children = {
        k: induce_id3_tree(split_instances[k], rule_generator) for k in sorted(split_instances)
    }
    ret.split_attr = split_on
    return ret


# -----------------------------------------------------------------------------
# Estimator
# -----------------------------------------------------------------------------
class ID3DecisionTree(BaseEstimator, ClassifierMixin):
    """
    ID3 decision tree classifier with optional reduced‑error pruning.

    Parameters
    ----------
    prune_split : float, default=0.0
        Fraction of the training rows held out to prune the tree.  Values at
        or below ``0.001`` disable pruning and use every row for induction.
        Must lie in ``[0, 1)``.
    rule_generator : RuleGenerator or None, default=None
        Split selection strategy.  ``None`` means
        :class:`~id3py.rules.InformationGainRuleGenerator`.
    random_state : int, RandomState or None, default=None
        Seed for the training/validation shuffle.  Ignored without pruning.

    Attributes
    ----------
    root_ : DecisionTreeNode
        Root of the fitted tree.
    classes_ : ndarray
        Sorted class labels seen during ``fit``.
    attributes_ : list[Attribute]
        Feature attributes of the training data, in column order.
    class_attribute_ : Attribute
        Class attribute of the training data.
    n_features_in_ : int
        Number of feature attributes seen during ``fit``.

    Notes
    -----
    ``fit``, ``predict`` and ``score`` accept either a
    :class:`~id3py.base.Dataset` or array‑likes.  Labels are handled as
    strings, so predictions come back as strings as well.
    """

    def __init__(self, prune_split: float = 0.0, *, rule_generator: RuleGenerator | None = None,
                 random_state=None):
        self.prune_split = prune_split
        self.rule_generator = rule_generator
        self.random_state = random_state

    def _check_fitted(self):
        if getattr(self, "root_", None) is None:
            raise NotFittedError("Estimator not fitted. Call fit(...) first.")

    def fit(self, X, y=None):
        """
        Induce (and optionally prune) the tree.

        Parameters
        ----------
        X : Dataset or array-like of shape (n_samples, n_features)
            Training data.
        y : array-like of shape (n_samples,), optional
            Labels, required when ``X`` is not a :class:`Dataset`.

        Returns
        -------
        self
        """
        prune_split = float(self.prune_split)
        if not 0.0 <= prune_split < 1.0:
            raise ValueError(f"prune_split must be in [0, 1), got {self.prune_split}")
        if not isinstance(X, Dataset) and y is None:
            raise ValueError("y is required when X is not a Dataset")
        data = check_dataset(X, y)
        if data.rows == 0:
            raise ValueError("cannot fit on an empty dataset")
        rule = self.rule_generator if self.rule_generator is not None else InformationGainRuleGenerator()

        if prune_split > _PRUNE_THRESHOLD:
            train, validation = data.train_test_split(prune_split, random_state=self.random_state)
            root = induce_id3_tree(train, rule)
            leaves_before = root.n_leaves()
            root.prune(validation)
            logger.info("ID3 tree induced on {} rows, pruned on {}: {} -> {} leaves",
                        train.rows, validation.rows, leaves_before, root.n_leaves())
        else:
            root = induce_id3_tree(data, rule)
            logger.info("ID3 tree induced on {} rows: {} leaves, depth {}",
                        data.rows, root.n_leaves(), root.depth())

        self.root_ = root
        self.attributes_ = data.non_class_attributes()
        self.class_attribute_ = data.class_attribute
        self.n_features_in_ = len(self.attributes_)
        self.classes_ = np.array(sorted(data.count_class_values()), dtype=object)
        return self

    def _input(self, X) -> Dataset:
        return check_dataset(X, attributes=self.attributes_, class_attribute=self.class_attribute_)

    def predict(self, X):
        """
        Predict class labels.

        Parameters
        ----------
        X : Dataset or array-like of shape (n_samples, n_features)
            Rows to classify.  Array‑likes must have the training columns in
            training order.

        Returns
        -------
        ndarray of shape (n_samples,)
            Predicted labels.

        Raises
        ------
        NotFittedError
            If the estimator has not been fitted.
        """
        self._check_fitted()
        return self.root_.predict(self._input(X))

    def score(self, X, y=None, sample_weight=None):
        """Accuracy of ``predict(X)`` against ``y`` or the class column of ``X``."""
        if y is None:
            if not isinstance(X, Dataset):
                raise ValueError("y is required when X is not a Dataset")
            y = X.class_values()
        truth = np.array([str(v) for v in y], dtype=object)
        return float(accuracy_score(truth, self.predict(X), sample_weight=sample_weight))

    # ------------------------------------------------------------------
    # Rule tracing / export / printing
    # ------------------------------------------------------------------
    def get_n_leaves(self) -> int:
        self._check_fitted()
        return self.root_.n_leaves()

    def get_depth(self) -> int:
        self._check_fitted()
        return self.root_.depth()

    def predict_rule(self, X) -> list[str]:
        """
        Return the conditions each row satisfied on its way down the tree.

        Parameters
        ----------
        X : Dataset or array-like
            Input rows.

        Returns
        -------
        list[str]
            One ``"A == x AND B == y"`` string per row; ``"<root>"`` when the
            walk stops at the root.
        """
        self._check_fitted()
        data = self._input(X)
        out = []
        for i in range(data.rows):
            trail: list = []
            self.root_._walk(data, i, trail)
            out.append(" AND ".join(f"{a.name} == {v}" for a, v in trail) if trail else "<root>")
        return out

    def export_rules(self) -> list[str]:
        """
        Export one ``<antecedent> => <label>`` string per leaf.

        Branches are visited in lexicographic order of their values.
        """
        self._check_fitted()
        rules: list[str] = []
        self._collect_rules(self.root_, [], rules)
        return rules

    def _collect_rules(self, node: DecisionTreeNode, parts: list[str], rules: list[str]):
        if node.children is None:
            body = " AND ".join(parts) if parts else "<root>"
            rules.append(f"{body} => {node.class_value}")
            return
        for k in sorted(node.children):
            self._collect_rules(node.children[k], parts + [f"{node.split_attr.name} == {k}"], rules)

    def print_tree(self):
        """Pretty‑print the fitted tree to ``stdout``."""
        self._check_fitted()
        print(self.root_)

    def export_graphviz(self, filename: str | None = None, *, format: str = "dot") -> str:
        """
        Export the tree structure in Graphviz format.

        Parameters
        ----------
        filename : str or None, default=None
            Basename of the output file.  If None, the DOT source is returned
            and nothing is written.
        format : str, default="dot"
            ``'dot'`` writes the DOT source directly; other values (``'png'``,
            ``'pdf'``, ``'svg'``) call the external ``dot`` binary.

        Returns
        -------
        str
            Path to the written file, or the DOT source if ``filename`` is None.

        Raises
        ------
        RuntimeError
            If the ``graphviz`` package is not installed.
        """
        self._check_fitted()
        try:
            import graphviz
        except ImportError:
            raise RuntimeError("Graphviz is required for export_graphviz but not installed.")
        dot = graphviz.Digraph(format=format)
        self._add_graph_nodes(dot, self.root_, "0")

        if filename is None:
            return dot.source
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        return dot.render(filename, cleanup=True)

    def _add_graph_nodes(self, dot, node: DecisionTreeNode, name: str):
        if node.children is None:
            dot.node(name, f"{node.class_value}\n{dict(sorted(node.class_dist.items()))}",
                     shape="box", style="filled", color="lightgrey")
            return
        dot.node(name, node.split_attr.name, shape="ellipse", style="filled", color="lightblue")
        for i, k in enumerate(sorted(node.children)):
            child_id = f"{name}_{i}"
            self._add_graph_nodes(dot, node.children[k], child_id)
            dot.edge(name, child_id, label=k)

    def __str__(self) -> str:
        if getattr(self, "root_", None) is None:
            return repr(self)
        return f"ID3DecisionTree({self.root_}\n)"
