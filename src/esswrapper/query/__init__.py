"""Query construction helpers."""

from esswrapper.query.filters import Condition, ExactMatch, InSet, coerce_condition, must_filter

__all__ = ["Condition", "ExactMatch", "InSet", "coerce_condition", "must_filter"]
