"""Fluent builders for parameterized SELECT, INSERT, UPDATE and DELETE statements."""

from querychain.builder._base import Statement
from querychain.builder._condition import Condition, ConditionOwner, Operator, Ref, ref
from querychain.builder._delete import Delete
from querychain.builder._insert import Insert
from querychain.builder._select import PageInfo, Pagination, Select, SortOrder, TotalInfo
from querychain.builder._update import Update

__all__ = (
    "Condition",
    "ConditionOwner",
    "Delete",
    "Insert",
    "Operator",
    "PageInfo",
    "Pagination",
    "Ref",
    "Select",
    "SortOrder",
    "Statement",
    "TotalInfo",
    "Update",
    "ref",
)
