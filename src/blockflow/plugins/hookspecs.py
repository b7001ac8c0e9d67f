# src/blockflow/plugins/hookspecs.py
"""pluggy hook specifications for blockflow executor plugins.

Usage (implementing a plugin):
    from blockflow.plugins.hookspecs import hookimpl

    class MyPlugin:
        @hookimpl
        def blockflow_get_executors(self):
            return [MyExecutor]

Third-party packages expose such a plugin object under the ``blockflow``
entry point group.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from blockflow.plugins.base import NodeExecutor

PROJECT_NAME = "blockflow"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class BlockflowExecutorSpec:
    @hookspec
    def blockflow_get_executors(self) -> list[type["NodeExecutor"]]:  # type: ignore[empty-body]
        """Return executor classes (not instances); each must be constructible without arguments."""
