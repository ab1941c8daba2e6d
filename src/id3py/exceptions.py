"""Errors raised by id3py.

Degenerate data (nothing left to split on, unseen values at prediction time)
is never an error; it resolves to majority-class labels.  The classes here
cover broken collaborator contracts only.
"""

from __future__ import annotations


class ContractViolationError(ValueError):
    """Raised when a pluggable collaborator breaks its contract.

    The typical case is a rule generator returning a split attribute that is
    not a non-class column of the partition it was asked about.

    Attributes
    ----------
    attribute_name : str or None
        Name of the offending attribute, if any.
    """

    attribute_name: str | None

    def __init__(self, message: str, attribute_name: str | None = None) -> None:
        super().__init__(message)
        self.attribute_name = attribute_name
