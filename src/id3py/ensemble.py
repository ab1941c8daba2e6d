# -*- coding: utf-8 -*-
"""
id3py.ensemble
==============

Random forest of unpruned ID3 trees.  All sampling and voting is delegated to
:class:`~id3py.meta.BaggedModel`.
"""

from __future__ import annotations

from loguru import logger
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.exceptions import NotFittedError

from .meta import BaggedModel
from .tree import ID3DecisionTree


class RandomForest(BaseEstimator, ClassifierMixin):
    """
    Bagged ensemble of ID3 trees.

    Parameters
    ----------
    forest_size : int, default=10
        Number of trees.
    features : int or None, default=None
        Number of feature attributes each tree is trained on.  ``None`` uses
        every feature.
    bootstrap : bool, default=True
        Train each tree on a bootstrap sample of the rows.
    random_state : int, RandomState or None, default=None
        Seed for the bootstrap and feature draws.
    n_jobs : int or None, default=None
        Trees fitted in parallel.

    Attributes
    ----------
    model_ : BaggedModel
        The fitted aggregator holding every tree.
    classes_ : ndarray
        Sorted class labels seen during ``fit``.
    """

    def __init__(self, forest_size: int = 10, features: int | None = None, *,
                 bootstrap: bool = True, random_state=None, n_jobs: int | None = None):
        self.forest_size = forest_size
        self.features = features
        self.bootstrap = bootstrap
        self.random_state = random_state
        self.n_jobs = n_jobs

    def fit(self, X, y=None):
        """Build ``forest_size`` unpruned trees and fit them through bagging."""
        if int(self.forest_size) < 1:
            raise ValueError(f"forest_size must be at least 1, got {self.forest_size}")
        model = BaggedModel(random_features=self.features, bootstrap=self.bootstrap,
                            random_state=self.random_state, n_jobs=self.n_jobs)
        for _ in range(int(self.forest_size)):
            model.add_model(ID3DecisionTree(prune_split=0.0))
        logger.debug("fitting forest of {} trees", self.forest_size)
        model.fit(X, y)
        self.model_ = model
        self.classes_ = model.classes_
        self.n_features_in_ = model.n_features_in_
        return self

    def _check_fitted(self):
        if getattr(self, "model_", None) is None:
            raise NotFittedError("Estimator not fitted. Call fit(...) first.")

    def predict(self, X):
        """Majority vote of the trees."""
        self._check_fitted()
        return self.model_.predict(X)

    def score(self, X, y=None, sample_weight=None):
        """Accuracy of ``predict(X)`` against ``y`` or the class column of ``X``."""
        self._check_fitted()
        return self.model_.score(X, y, sample_weight=sample_weight)

    @property
    def estimators_(self) -> list[ID3DecisionTree]:
        self._check_fitted()
        return self.model_.estimators_

    def __str__(self) -> str:
        body = str(self.model_) if getattr(self, "model_", None) is not None else ""
        return f"RandomForest(ForestSize: {self.forest_size}, Features: {self.features}, {body}\n)"
