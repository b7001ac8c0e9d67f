# src/blockflow/plugins/sources/paste_input.py
"""Paste input executor: a dataset typed or pasted straight into the node config.

Config options:
    data: The pasted text (required)
    dataType: "table" (tab-separated, default), "csv", or "json"
    hasHeader: First row holds column names (default: true)
    dynamicTyping: Convert numeric/boolean-looking cells (default: false)
"""

from __future__ import annotations

from pydantic import Field

from blockflow.contracts.config_base import OperationConfig
from blockflow.contracts.dataset import Dataset
from blockflow.contracts.errors import DatasetParseError
from blockflow.contracts.results import ExecutionContext, ExecutionResult, ValidationIssue, ValidationResult, ValidationWarning
from blockflow.core.ingestion.formats import TextFormat, parse_text
from blockflow.core.ingestion.records import dataset_from_json_records, loads_strict
from blockflow.plugins.base import NodeExecutor

PASTE_SIZE_WARNING_CHARS = 1024 * 1024
_PASTE_FORMATS = frozenset({TextFormat.TABLE.value, TextFormat.CSV.value, TextFormat.JSON.value})


class PasteInputConfig(OperationConfig):
    data: str = Field(min_length=1)
    data_type: TextFormat = TextFormat.TABLE
    has_header: bool = True
    dynamic_typing: bool = False


class PasteInputExecutor(NodeExecutor):
    node_type = "paste-input"
    description = "Dataset from pasted table, CSV, or JSON text"

    def validate(self, context: ExecutionContext) -> ValidationResult:
        config = context.config
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []

        data = config.get("data")
        if not isinstance(data, str) or not data.strip():
            errors.append(ValidationIssue("data", "Data content is required", "REQUIRED_FIELD"))
            return ValidationResult.of(errors)

        data_type = config.get("dataType", TextFormat.TABLE.value)
        if not isinstance(data_type, str) or data_type not in _PASTE_FORMATS:
            errors.append(ValidationIssue("dataType", f"Unsupported data type: {data_type}", "INVALID_VALUE"))
        elif data_type == TextFormat.JSON:
            try:
                dataset_from_json_records(loads_strict(data))
            except DatasetParseError as e:
                code = "INVALID_JSON" if str(e).startswith("Invalid JSON") else "INVALID_DATA"
                errors.append(ValidationIssue("data", str(e), code))
        elif not any(line.strip() for line in data.splitlines()):
            errors.append(ValidationIssue("data", "Data must contain at least one row", "INVALID_DATA"))

        if len(data) > PASTE_SIZE_WARNING_CHARS:
            warnings.append(ValidationWarning("data", "Large data size may impact performance", "PERFORMANCE_WARNING"))
        return ValidationResult.of(errors, warnings)

    async def execute(self, context: ExecutionContext) -> ExecutionResult:
        return await self.safe_execute(context, lambda: self._run(context))

    def _run(self, context: ExecutionContext) -> Dataset:
        if not str(context.config.get("data") or "").strip():
            raise DatasetParseError("No data provided")
        config = PasteInputConfig.from_dict(context.config)
        source = {
            "type": "paste",
            "dataType": str(config.data_type),
            "hasHeader": config.has_header,
            "originalLength": len(config.data),
        }
        return parse_text(
            config.data,
            config.data_type,
            has_header=config.has_header,
            dynamic_typing=config.dynamic_typing,
            source=source,
        )
