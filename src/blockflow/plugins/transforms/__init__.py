"""Built-in transform executors."""

from blockflow.plugins.transforms.filter import FilterExecutor
from blockflow.plugins.transforms.group import GroupExecutor
from blockflow.plugins.transforms.sort import SortExecutor

__all__ = ["FilterExecutor", "GroupExecutor", "SortExecutor"]
