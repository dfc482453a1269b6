"""Structured build logging.

Records are kept in memory for reports and forwarded to loguru.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger


@dataclass(slots=True)
class BuildLog:
    build: str | None = None
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        step: str | None,
        message: str,
        level: str = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "build": self.build,
            "step": step,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)
        logger.bind(build=self.build, step=step, operation=operation).log(level.upper(), message)

    def info(self, message: str, *, operation: str, step: str | None = None, **extra: Any) -> None:
        self.log(operation=operation, step=step, message=message, extra=extra or None)

    def warning(
        self, message: str, *, operation: str, step: str | None = None, **extra: Any
    ) -> None:
        self.log(
            operation=operation, step=step, message=message, level="warning", extra=extra or None
        )

    def records_for_step(self, step: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("step") == step]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True, default=str) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path
