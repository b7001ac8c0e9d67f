# src/blockflow/plugins/builtin.py
"""Hook implementation contributing the built-in executors."""

from blockflow.plugins.base import NodeExecutor
from blockflow.plugins.hookspecs import hookimpl
from blockflow.plugins.sources import ExampleDataExecutor, FileInputExecutor, HttpRequestExecutor, PasteInputExecutor
from blockflow.plugins.transforms import FilterExecutor, GroupExecutor, SortExecutor


class BuiltinExecutors:
    @hookimpl
    def blockflow_get_executors(self) -> list[type[NodeExecutor]]:
        return [
            ExampleDataExecutor,
            PasteInputExecutor,
            FileInputExecutor,
            HttpRequestExecutor,
            FilterExecutor,
            SortExecutor,
            GroupExecutor,
        ]
