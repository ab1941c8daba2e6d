# -*- coding: utf-8 -*-
"""
id3py.evaluation
================

Confusion matrices and the scores derived from them.  Pruning uses
:func:`get_accuracy` to compare a subtree with its collapsed form.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from sklearn.metrics import confusion_matrix

from .base import Dataset


def _labels_of(obj) -> np.ndarray:
    if isinstance(obj, Dataset):
        return obj.class_values()
    return np.array([str(v) for v in obj], dtype=object)


@dataclass
class ConfusionMatrix:
    """Counts of (true label, predicted label) pairs.

    ``matrix[i, j]`` is the number of rows whose true label is ``labels[i]``
    and whose predicted label is ``labels[j]``.
    """

    labels: list[str]
    matrix: np.ndarray

    @property
    def total(self) -> int:
        return int(self.matrix.sum())

    @property
    def correct(self) -> int:
        return int(np.trace(self.matrix))

    def count(self, true_label: str, predicted_label: str) -> int:
        if true_label not in self.labels or predicted_label not in self.labels:
            return 0
        return int(self.matrix[self.labels.index(true_label), self.labels.index(predicted_label)])

    def precision(self, label: str) -> float:
        """Fraction of rows predicted as ``label`` that really are ``label``."""
        if label not in self.labels:
            return 0.0
        j = self.labels.index(label)
        predicted = self.matrix[:, j].sum()
        return float(self.matrix[j, j] / predicted) if predicted else 0.0

    def recall(self, label: str) -> float:
        """Fraction of rows labelled ``label`` that were predicted as ``label``."""
        if label not in self.labels:
            return 0.0
        i = self.labels.index(label)
        actual = self.matrix[i, :].sum()
        return float(self.matrix[i, i] / actual) if actual else 0.0

    def __str__(self) -> str:
        width = max([len(lbl) for lbl in self.labels] + [len("true\\pred")])
        head = "true\\pred".ljust(width) + " " + " ".join(lbl.rjust(width) for lbl in self.labels)
        lines = [head]
        for i, lbl in enumerate(self.labels):
            cells = " ".join(str(int(c)).rjust(width) for c in self.matrix[i])
            lines.append(lbl.ljust(width) + " " + cells)
        return "\n".join(lines)


def get_confusion_matrix(y_true, y_pred) -> ConfusionMatrix:
    """
    Build a confusion matrix from ground truth and predictions.

    Parameters
    ----------
    y_true : Dataset or array-like
        Ground truth.  For a :class:`Dataset` the class column is used.
    y_pred : Dataset or array-like
        Predictions, aligned row by row with ``y_true``.

    Returns
    -------
    ConfusionMatrix
        Matrix over the sorted union of labels seen on either side.

    Raises
    ------
    ValueError
        If the two sides have different lengths.
    """
    t = _labels_of(y_true)
    p = _labels_of(y_pred)
    if len(t) != len(p):
        raise ValueError(f"y_true has {len(t)} rows but y_pred has {len(p)}")
    labels = sorted(set(t) | set(p))
    if not labels:
        return ConfusionMatrix(labels=[], matrix=np.zeros((0, 0), dtype=int))
    return ConfusionMatrix(labels=labels, matrix=confusion_matrix(t, p, labels=labels))


def get_accuracy(cm: ConfusionMatrix) -> float:
    """Correct predictions over total predictions; ``0.0`` for an empty matrix."""
    total = cm.total
    if total == 0:
        return 0.0
    return cm.correct / total
