# -*- coding: utf-8 -*-
"""
id3py.base
==========

Row/attribute containers used by every learner in the package.

A :class:`Dataset` is an ordered list of :class:`Attribute` objects plus a
2‑D ``numpy`` object array of stored values, one row per instance.  One
attribute is distinguished as the class attribute.  Trees remember the
attribute *objects* they split on and resolve them against other datasets by
identity, so column subsets produced by :meth:`Dataset.select_attributes` or
:meth:`Dataset.decompose_on_attribute_values` always share attribute objects
with their parent rather than copying them.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

import numpy as np
from sklearn.model_selection import train_test_split as _sk_train_test_split


# -----------------------------------------------------------------------------
# Attributes
# -----------------------------------------------------------------------------
class Attribute(ABC):
    """A named column of a :class:`Dataset`.

    Equality and hashing are inherited from ``object``: two attributes with
    the same name are still different columns.

    Parameters
    ----------
    name : str
        Human readable column name.
    """

    kind: str = "abstract"

    def __init__(self, name: str):
        self.name = str(name)

    @abstractmethod
    def get_string_from_sys_val(self, value) -> str:
        """Convert a stored value to its canonical string category."""

    @abstractmethod
    def get_sys_val_from_string(self, text: str):
        """Convert a category string back to a stored value."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CategoricalAttribute(Attribute):
    """Attribute whose values are discrete labels, stored as strings."""

    kind = "categorical"

    def get_string_from_sys_val(self, value) -> str:
        return str(value)

    def get_sys_val_from_string(self, text: str):
        return str(text)


class FloatAttribute(Attribute):
    """Attribute holding floating point values.

    The canonical string is the value rounded to ``precision`` decimals.  Trees
    still branch once per distinct string; there are no thresholds.
    """

    kind = "float"

    def __init__(self, name: str, precision: int = 2):
        super().__init__(name)
        self.precision = int(precision)

    def get_string_from_sys_val(self, value) -> str:
        return f"{float(value):.{self.precision}f}"

    def get_sys_val_from_string(self, text: str):
        return float(text)


# -----------------------------------------------------------------------------
# Dataset
# -----------------------------------------------------------------------------
class Dataset:
    """Ordered rows over a fixed list of attributes.

    Parameters
    ----------
    attributes : list[Attribute]
        Column descriptors, in column order.
    values : array-like of shape (n_rows, n_attributes)
        Stored values.  Converted to a ``numpy`` object array.
    class_attribute : Attribute, optional
        Which of ``attributes`` holds the label.  Defaults to the last one.

    Raises
    ------
    ValueError
        If the attribute list is empty, the value matrix has the wrong width
        or ``class_attribute`` is not one of ``attributes``.
    """

    def __init__(self, attributes, values, class_attribute: Attribute | None = None):
        attributes = list(attributes)
        if not attributes:
            raise ValueError("a Dataset needs at least one attribute")
        values = np.asarray(values, dtype=object)
        if values.size == 0:
            values = values.reshape(0, len(attributes))
        if values.ndim != 2 or values.shape[1] != len(attributes):
            raise ValueError(
                f"values must have shape (n_rows, {len(attributes)}), got {values.shape}"
            )
        if class_attribute is None:
            class_attribute = attributes[-1]
        if not any(a is class_attribute for a in attributes):
            raise ValueError(f"class attribute {class_attribute.name!r} is not in the attribute list")
        self._attributes = attributes
        self._values = values
        self._class_attribute = class_attribute

    # -- construction ---------------------------------------------------------
    @classmethod
    def from_arrays(cls, X, y=None, *, feature_names=None, class_name: str = "class",
                    float_features=None, precision: int = 2,
                    attributes=None, class_attribute: Attribute | None = None) -> "Dataset":
        """Build a dataset from a feature matrix and an optional label vector.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Feature values.  When ``X`` has a ``columns`` attribute (for
            example a DataFrame) those names are used as feature names.
        y : array-like of shape (n_samples,), optional
            Labels.  When omitted the class column is filled with empty
            strings, which is what prediction inputs look like.
        feature_names : list[str], optional
            Column names.  Defaults to ``X.columns`` or ``f0, f1, ...``.
        class_name : str, default="class"
            Name given to the class attribute.
        float_features : list[int | str], optional
            Indices or names of features to wrap in :class:`FloatAttribute`.
            Every other feature becomes a :class:`CategoricalAttribute`.
        precision : int, default=2
            Decimals used by the created float attributes.
        attributes : list[Attribute], optional
            Reuse existing feature attribute objects instead of creating new
            ones, so that a fitted tree can resolve them by identity.
        class_attribute : Attribute, optional
            Reuse an existing class attribute object.

        Returns
        -------
        Dataset
        """
        if feature_names is None and hasattr(X, "columns"):
            feature_names = [str(c) for c in X.columns]
        X = np.array(X, dtype=object)
        if attributes is not None:
            attributes = list(attributes)
        if X.size == 0 and attributes is not None:
            X = X.reshape(0, len(attributes))
        elif X.ndim == 1:
            X = X.reshape(-1, 1)
        n_rows, n_features = X.shape

        if attributes is not None:
            if len(attributes) != n_features:
                raise ValueError(
                    f"X has {n_features} features but {len(attributes)} attributes were given"
                )
        else:
            if feature_names is None:
                feature_names = [f"f{i}" for i in range(n_features)]
            feature_names = list(feature_names)
            if len(feature_names) != n_features:
                raise ValueError("feature_names length must match X.shape[1]")
            floats = set()
            for f in float_features or []:
                floats.add(feature_names.index(f) if isinstance(f, str) else int(f))
            attributes = [
                FloatAttribute(name, precision) if j in floats else CategoricalAttribute(name)
                for j, name in enumerate(feature_names)
            ]

        if class_attribute is None:
            class_attribute = CategoricalAttribute(class_name)
        if y is None:
            labels = np.full(n_rows, "", dtype=object)
        else:
            labels = np.asarray(y, dtype=object)
            if labels.shape[0] != n_rows:
                raise ValueError(f"X has {n_rows} rows but y has {labels.shape[0]}")
            labels = np.array([class_attribute.get_sys_val_from_string(str(v)) for v in labels],
                              dtype=object)

        for j, attr in enumerate(attributes):
            if isinstance(attr, CategoricalAttribute):
                X[:, j] = [attr.get_sys_val_from_string(v) for v in X[:, j]]

        values = np.empty((n_rows, n_features + 1), dtype=object)
        values[:, :n_features] = X
        values[:, n_features] = labels
        return cls(attributes + [class_attribute], values, class_attribute)

    # -- shape ----------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self._values.shape[0]

    def __len__(self) -> int:
        return self.rows

    @property
    def attribute_count(self) -> int:
        return len(self._attributes)

    @property
    def attributes(self) -> list[Attribute]:
        return list(self._attributes)

    @property
    def class_attribute(self) -> Attribute:
        return self._class_attribute

    @property
    def values(self) -> np.ndarray:
        return self._values

    def non_class_attributes(self) -> list[Attribute]:
        return [a for a in self._attributes if a is not self._class_attribute]

    def attribute_index(self, attribute: Attribute) -> int | None:
        """Return the column of ``attribute`` (matched by identity) or ``None``."""
        for j, a in enumerate(self._attributes):
            if a is attribute:
                return j
        return None

    def _class_index(self) -> int:
        return self.attribute_index(self._class_attribute)

    # -- access ---------------------------------------------------------------
    def get(self, row: int, col: int):
        return self._values[row, col]

    def get_string(self, row: int, attribute: Attribute) -> str:
        col = self.attribute_index(attribute)
        if col is None:
            raise KeyError(attribute.name)
        return attribute.get_string_from_sys_val(self._values[row, col])

    def get_class_value(self, row: int) -> str:
        return self._class_attribute.get_string_from_sys_val(self._values[row, self._class_index()])

    def set_class_value(self, row: int, label: str) -> None:
        self._values[row, self._class_index()] = self._class_attribute.get_sys_val_from_string(label)

    def class_values(self) -> np.ndarray:
        """Class labels of every row as a 1‑D object array of strings."""
        return np.array([self.get_class_value(i) for i in range(self.rows)], dtype=object)

    def count_class_values(self) -> dict[str, int]:
        """Histogram of class labels over the rows of this dataset."""
        counts: dict[str, int] = {}
        for label in self.class_values():
            counts[label] = counts.get(label, 0) + 1
        return counts

    # -- derived datasets -----------------------------------------------------
    def take(self, indices) -> "Dataset":
        """Row subset in the given order; repeated indices are allowed."""
        idx = np.asarray(indices, dtype=int)
        return Dataset(self._attributes, self._values[idx], self._class_attribute)

    def select_attributes(self, attributes) -> "Dataset":
        """Column subset keeping ``attributes`` plus the class attribute.

        The attribute objects are shared with this dataset.
        """
        wanted = [a for a in attributes if a is not self._class_attribute]
        cols = []
        for a in wanted:
            j = self.attribute_index(a)
            if j is None:
                raise KeyError(a.name)
            cols.append(j)
        cols.append(self._class_index())
        kept = [self._attributes[j] for j in cols]
        return Dataset(kept, self._values[:, cols], self._class_attribute)

    def decompose_on_attribute_values(self, attribute: Attribute) -> dict[str, "Dataset"]:
        """Partition rows by the string value of ``attribute``.

        Every row lands in exactly one group, groups preserve row order, only
        observed values get a group, and ``attribute`` is dropped from each
        group's attribute list.

        Raises
        ------
        KeyError
            If ``attribute`` is not a column of this dataset.
        """
        col = self.attribute_index(attribute)
        if col is None:
            raise KeyError(attribute.name)
        groups: dict[str, list[int]] = {}
        for i in range(self.rows):
            key = attribute.get_string_from_sys_val(self._values[i, col])
            groups.setdefault(key, []).append(i)
        keep = [j for j in range(self.attribute_count) if j != col]
        kept_attrs = [self._attributes[j] for j in keep]
        return {
            key: Dataset(kept_attrs, self._values[np.ix_(idx, keep)], self._class_attribute)
            for key, idx in groups.items()
        }

    def train_test_split(self, test_size: float, random_state=None) -> tuple["Dataset", "Dataset"]:
        """Shuffle rows and split them into training and held-out parts.

        ``test_size`` is the held-out fraction.  The held-out count is rounded
        up but always leaves at least one training row.
        """
        if not 0.0 < test_size < 1.0:
            raise ValueError(f"test_size must be in (0, 1), got {test_size}")
        if self.rows < 2:
            return self.take(np.arange(self.rows)), self.take(np.arange(0))
        n_test = min(math.ceil(test_size * self.rows), self.rows - 1)
        train_idx, test_idx = _sk_train_test_split(
            np.arange(self.rows), test_size=n_test, random_state=random_state, shuffle=True
        )
        return self.take(train_idx), self.take(test_idx)

    def with_class_values(self, labels) -> "Dataset":
        """Copy of this dataset whose class column holds ``labels``."""
        labels = list(labels)
        if len(labels) != self.rows:
            raise ValueError(f"expected {self.rows} labels, got {len(labels)}")
        out = Dataset(self._attributes, self._values.copy(), self._class_attribute)
        for i, label in enumerate(labels):
            out.set_class_value(i, label)
        return out

    def __repr__(self) -> str:
        names = ", ".join(a.name for a in self._attributes)
        return f"Dataset(rows={self.rows}, attributes=[{names}], class={self._class_attribute.name!r})"


def check_dataset(X, y=None, *, attributes=None, class_attribute: Attribute | None = None) -> Dataset:
    """Return ``X`` unchanged if it is a :class:`Dataset`, else wrap it.

    Array-like input goes through :meth:`Dataset.from_arrays`; pass the
    attribute objects of a fitted model so that its splits resolve against
    the new columns.
    """
    if isinstance(X, Dataset):
        return X
    return Dataset.from_arrays(X, y, attributes=attributes, class_attribute=class_attribute)
