# -*- coding: utf-8 -*-
"""
id3py.rules
===========

Split selection strategies.  Induction asks a :class:`RuleGenerator` which
attribute to split a partition on and never looks at how the choice is made.
Two entropy based strategies are supplied: plain information gain (ID3) and
Quinlan's gain ratio (C4.5).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from .base import Attribute, Dataset


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _entropy(dist_vec: np.ndarray) -> float:
    tot = dist_vec.sum()
    if tot <= 0:
        return 0.0
    p = dist_vec / tot
    p = p[p > 0]
    return float(-np.sum(p * np.log2(p)))


def _split_info(children: list[np.ndarray]) -> float:
    tot = sum(d.sum() for d in children)
    if tot <= 0:
        return 0.0
    w = [d.sum() / tot for d in children if d.sum() > 0]
    return float(-sum(wi * np.log2(wi) for wi in w))


def _information_gain(parent: np.ndarray, children: list[np.ndarray]) -> float:
    n = max(parent.sum(), 1e-12)
    return _entropy(parent) - sum(d.sum() / n * _entropy(d) for d in children)


def _class_matrix(dataset: Dataset, attribute: Attribute, labels: list[str]) -> tuple[np.ndarray, list[np.ndarray]]:
    """Class-count vector of the whole dataset and of each value of ``attribute``."""
    col = dataset.attribute_index(attribute)
    idx = {c: i for i, c in enumerate(labels)}
    class_values = dataset.class_values()
    per_value: dict[str, np.ndarray] = {}
    for i in range(dataset.rows):
        key = attribute.get_string_from_sys_val(dataset.get(i, col))
        vec = per_value.setdefault(key, np.zeros(len(labels), dtype=float))
        vec[idx[class_values[i]]] += 1.0
    parent = np.zeros(len(labels), dtype=float)
    for vec in per_value.values():
        parent += vec
    return parent, list(per_value.values())


# -----------------------------------------------------------------------------
# Strategies
# -----------------------------------------------------------------------------
class RuleGenerator(ABC):
    """Chooses the attribute a partition should be split on."""

    @abstractmethod
    def generate_split_attribute(self, dataset: Dataset) -> Attribute | None:
        """Return the best non-class attribute of ``dataset``, or ``None``
        when no attribute is worth splitting on."""


class InformationGainRuleGenerator(RuleGenerator):
    """ID3 split selection: maximise the entropy drop of the class histogram.

    Attributes with a gain of zero are never chosen.  When several attributes
    share the best gain the one that comes first in the dataset wins.
    """

    def _score(self, parent: np.ndarray, children: list[np.ndarray]) -> float:
        return _information_gain(parent, children)

    def generate_split_attribute(self, dataset: Dataset) -> Attribute | None:
        candidates = dataset.non_class_attributes()
        if not candidates or dataset.rows == 0:
            return None
        labels = sorted(dataset.count_class_values())
        best_attr, best_score = None, 0.0
        for attr in candidates:
            parent, children = _class_matrix(dataset, attr, labels)
            score = self._score(parent, children)
            # strict comparison keeps the earliest attribute on ties
            if score > best_score + 1e-12:
                best_attr, best_score = attr, score
        return best_attr

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class GainRatioRuleGenerator(InformationGainRuleGenerator):
    """C4.5 style selection: information gain divided by split information.

    Attributes that shatter the partition into many small groups (ids,
    timestamps) are penalised by their high split information.
    """

    def _score(self, parent: np.ndarray, children: list[np.ndarray]) -> float:
        s = _split_info(children)
        if s <= 0:
            return 0.0
        return _information_gain(parent, children) / s
