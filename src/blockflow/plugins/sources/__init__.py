"""Built-in source executors: nodes that produce a dataset without inputs."""

from blockflow.plugins.sources.example_data import ExampleDataExecutor
from blockflow.plugins.sources.file_input import FileInputExecutor
from blockflow.plugins.sources.http_request import HttpRequestExecutor
from blockflow.plugins.sources.paste_input import PasteInputExecutor

__all__ = ["ExampleDataExecutor", "FileInputExecutor", "HttpRequestExecutor", "PasteInputExecutor"]
