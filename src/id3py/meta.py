# -*- coding: utf-8 -*-
"""
id3py.meta
==========

Bootstrap aggregation over independently trainable classifiers.

:class:`BaggedModel` knows nothing about trees.  Every member only needs
``fit(dataset)`` and ``predict(dataset)``; the aggregator draws a bootstrap
row sample and a random feature subset per member, fits the members on their
own views of the data and combines their predictions by majority vote.
"""

from __future__ import annotations

from collections import Counter

import numpy as np
from joblib import Parallel, delayed
from loguru import logger
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.exceptions import NotFittedError
from sklearn.metrics import accuracy_score
from sklearn.utils import check_random_state

from .base import Dataset, check_dataset


def _majority_vote(votes) -> str:
    """Most common label; ties go to the lexicographically smallest label."""
    counts = Counter(votes)
    return min(counts, key=lambda c: (-counts[c], c))


def _fit_member(model, data: Dataset):
    return model.fit(data)


class BaggedModel(BaseEstimator, ClassifierMixin):
    """
    Majority-vote ensemble of models trained on bootstrapped, feature
    subsampled views of the data.

    Parameters
    ----------
    models : list or None, default=None
        Member models.  More can be registered with :meth:`add_model`.
    random_features : int or None, default=None
        Number of feature attributes each member sees, drawn without
        replacement.  ``None`` gives every member all features.
    bootstrap : bool, default=True
        Draw rows with replacement for each member.  When ``False`` every
        member is trained on all rows in their original order.
    random_state : int, RandomState or None, default=None
        Seed for the row and feature draws.
    n_jobs : int or None, default=None
        Number of members fitted in parallel through ``joblib``.  Draws are
        made up front from a single random state, so results do not depend
        on this value.

    Attributes
    ----------
    estimators_ : list
        Fitted members.
    estimators_features_ : list[list[Attribute]]
        Feature attributes each member was trained on.
    classes_ : ndarray
        Sorted class labels seen during ``fit``.
    """

    def __init__(self, models=None, *, random_features: int | None = None, bootstrap: bool = True,
                 random_state=None, n_jobs: int | None = None):
        self.models = models
        self.random_features = random_features
        self.bootstrap = bootstrap
        self.random_state = random_state
        self.n_jobs = n_jobs

    def add_model(self, model) -> "BaggedModel":
        """Register another member model."""
        self.models = list(self.models or []) + [model]
        return self

    def _check_fitted(self):
        if not getattr(self, "estimators_", None):
            raise NotFittedError("Estimator not fitted. Call fit(...) first.")

    def fit(self, X, y=None):
        """
        Fit every member on its own bootstrap sample and feature subset.

        Parameters
        ----------
        X : Dataset or array-like of shape (n_samples, n_features)
            Training data.
        y : array-like, optional
            Labels, required when ``X`` is not a :class:`Dataset`.

        Returns
        -------
        self

        Raises
        ------
        ValueError
            If no members are registered, the data is empty or
            ``random_features`` is not between 1 and the number of features.
        """
        members = list(self.models or [])
        if not members:
            raise ValueError("BaggedModel has no members; register some with add_model")
        if not isinstance(X, Dataset) and y is None:
            raise ValueError("y is required when X is not a Dataset")
        data = check_dataset(X, y)
        if data.rows == 0:
            raise ValueError("cannot fit on an empty dataset")
        features = data.non_class_attributes()
        k = len(features) if self.random_features is None else int(self.random_features)
        if not 1 <= k <= len(features):
            raise ValueError(
                f"random_features must be between 1 and {len(features)}, got {self.random_features}"
            )

        rng = check_random_state(self.random_state)
        views, chosen_features = [], []
        for m in range(len(members)):
            if self.bootstrap:
                rows = rng.randint(data.rows, size=data.rows)
            else:
                rows = np.arange(data.rows)
            cols = np.sort(rng.choice(len(features), size=k, replace=False))
            chosen = [features[j] for j in cols]
            logger.debug("member {}: {} rows ({} distinct), features {}",
                         m, len(rows), len(np.unique(rows)), [a.name for a in chosen])
            views.append(data.take(rows).select_attributes(chosen))
            chosen_features.append(chosen)

        self.estimators_ = Parallel(n_jobs=self.n_jobs, prefer="threads")(
            delayed(_fit_member)(model, view) for model, view in zip(members, views)
        )
        self.estimators_features_ = chosen_features
        self.attributes_ = features
        self.class_attribute_ = data.class_attribute
        self.n_features_in_ = len(features)
        self.classes_ = np.array(sorted(data.count_class_values()), dtype=object)
        logger.info("bagged {} members on {} rows, {} of {} features each",
                    len(members), data.rows, k, len(features))
        return self

    def _input(self, X) -> Dataset:
        return check_dataset(X, attributes=self.attributes_, class_attribute=self.class_attribute_)

    def predict(self, X):
        """
        Majority vote of the members' predictions.

        Parameters
        ----------
        X : Dataset or array-like of shape (n_samples, n_features)
            Rows to classify.

        Returns
        -------
        ndarray of shape (n_samples,)
            Winning label per row; vote ties go to the lexicographically
            smallest label.
        """
        self._check_fitted()
        data = self._input(X)
        votes = [est.predict(data) for est in self.estimators_]
        return np.array([_majority_vote([v[i] for v in votes]) for i in range(data.rows)],
                        dtype=object)

    def score(self, X, y=None, sample_weight=None):
        """Accuracy of ``predict(X)`` against ``y`` or the class column of ``X``."""
        if y is None:
            if not isinstance(X, Dataset):
                raise ValueError("y is required when X is not a Dataset")
            y = X.class_values()
        truth = np.array([str(v) for v in y], dtype=object)
        return float(accuracy_score(truth, self.predict(X), sample_weight=sample_weight))

    def __str__(self) -> str:
        members = getattr(self, "estimators_", None) or list(self.models or [])
        body = "\n".join(str(m) for m in members)
        return f"BaggedModel(\n{body}\n)"
