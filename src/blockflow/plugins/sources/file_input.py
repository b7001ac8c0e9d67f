# src/blockflow/plugins/sources/file_input.py
"""File input executor: load a local CSV, TSV, or JSON file.

Config options:
    path: Path to the file (required)
    hasHeader: First row holds column names (default: true)
    delimiter: Override the delimiter implied by the extension
    maxRows: Keep at most this many data rows
    encoding: File encoding (default: "utf-8")
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from blockflow.contracts.config_base import OperationConfig
from blockflow.contracts.dataset import Dataset
from blockflow.contracts.errors import DatasetParseError
from blockflow.contracts.results import ExecutionContext, ExecutionResult, ValidationIssue, ValidationResult, ValidationWarning
from blockflow.core.ingestion.formats import TextFormat, parse_text
from blockflow.plugins.base import NodeExecutor

MAX_FILE_BYTES = 50 * 1024 * 1024
LARGE_ROW_LIMIT = 1_000_000

FORMATS_BY_SUFFIX: dict[str, TextFormat] = {
    ".csv": TextFormat.CSV,
    ".txt": TextFormat.CSV,
    ".tsv": TextFormat.TSV,
    ".tab": TextFormat.TSV,
    ".json": TextFormat.JSON,
}


class FileInputConfig(OperationConfig):
    path: Path
    has_header: bool = True
    delimiter: str | None = Field(default=None, min_length=1, max_length=1)
    max_rows: int | None = Field(default=None, gt=0)
    encoding: str = "utf-8"
    dynamic_typing: bool = True


class FileInputExecutor(NodeExecutor):
    node_type = "file-input"
    description = "Dataset loaded from a CSV, TSV, or JSON file"

    def validate(self, context: ExecutionContext) -> ValidationResult:
        config = context.config
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []

        raw_path = config.get("path")
        if not raw_path:
            errors.append(ValidationIssue("path", "File path is required", "REQUIRED_FIELD"))
        else:
            path = Path(str(raw_path))
            if path.suffix.lower() not in FORMATS_BY_SUFFIX:
                errors.append(
                    ValidationIssue("path", f"Unsupported file format: '{path.suffix or path.name}'", "UNSUPPORTED_FORMAT")
                )
            elif not path.is_file():
                errors.append(ValidationIssue("path", f"File not found: {path}", "FILE_NOT_FOUND"))
            elif path.stat().st_size > MAX_FILE_BYTES:
                errors.append(ValidationIssue("path", "File exceeds the 50 MB limit", "FILE_TOO_LARGE"))

        max_rows = config.get("maxRows")
        if max_rows is not None:
            if not isinstance(max_rows, int) or isinstance(max_rows, bool) or max_rows <= 0:
                errors.append(ValidationIssue("maxRows", "Max rows must be a positive number", "INVALID_VALUE"))
            elif max_rows > LARGE_ROW_LIMIT:
                warnings.append(ValidationWarning("maxRows", "Large row limits may impact performance", "PERFORMANCE_WARNING"))

        delimiter = config.get("delimiter")
        if delimiter is not None and (not isinstance(delimiter, str) or len(delimiter) != 1):
            errors.append(ValidationIssue("delimiter", "Delimiter must be a single character", "INVALID_TYPE"))
        return ValidationResult.of(errors, warnings)

    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        return await self.safe_execute(context, lambda: self._run(context))

    def _run(self, context: ExecutionContext) -> Dataset:
        config = FileInputConfig.from_dict(context.config)
        text_format = FORMATS_BY_SUFFIX.get(config.path.suffix.lower())
        if text_format is None:
            raise DatasetParseError(f"Unsupported file format: '{config.path.suffix}'")
        size = config.path.stat().st_size
        if size > MAX_FILE_BYTES:
            raise DatasetParseError("File exceeds the 50 MB limit")

        # newline='' keeps quoted embedded newlines intact for csv.reader.
        with open(config.path, encoding=config.encoding, newline="") as f:
            text = f.read()

        source = {"type": "file", "name": config.path.name, "size": size, "format": str(text_format)}
        return parse_text(
            text,
            text_format,
            has_header=config.has_header,
            dynamic_typing=config.dynamic_typing,
            delimiter=config.delimiter,
            max_rows=config.max_rows,
            source=source,
        )
