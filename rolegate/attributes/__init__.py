"""Attribute globs and the field filter built on them."""

from rolegate.attributes.filter import filter_data
from rolegate.attributes.glob import Glob, is_allowed, normalize, union, union_all

__all__ = [
    "Glob",
    "filter_data",
    "is_allowed",
    "normalize",
    "union",
    "union_all",
]
