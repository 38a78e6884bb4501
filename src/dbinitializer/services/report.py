"""Run report generation service."""

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from dbinitializer.models import ExecutionOutcome


class ReportService:
    """Collects run metadata and writes the run report JSON."""

    def __init__(self, report_file: str, logger):
        self.report_file = report_file
        self.logger = logger
        self.report: Dict[str, Any] = {}
        self.reset()

    def reset(self):
        self.report = {
            "run_id": None,
            "status": "running",
            "started_at": None,
            "finished_at": None,
            "duration_seconds": None,
            "settings": {},
            "phases": {},
            "statements_executed": 0,
            "failures": [],
            "error": None,
        }

    def start_run(self, run_id: str, settings: Dict[str, Any]):
        self.reset()
        self.report["run_id"] = run_id
        self.report["started_at"] = self._now()
        self.report["settings"] = settings
        self.write()

    def script_started(self, phase: str, script: str, statement_count: int):
        self.report["phases"].setdefault(phase, []).append(
            {"script": script, "statements": statement_count, "failed": 0}
        )

    def record_failure(self, phase: str, outcome: ExecutionOutcome):
        statement = outcome.statement
        for entry in reversed(self.report["phases"].get(phase, [])):
            if entry["script"] == statement.source_name:
                entry["failed"] += 1
                break
        self.report["failures"].append(
            {
                "phase": phase,
                "script": statement.source_name,
                "index": statement.index,
                "line": statement.line,
                "statement": statement.excerpt,
                "error": outcome.error,
            }
        )

    def finalize(self, status: str, statements_executed: int, error: Optional[str] = None):
        self.report["status"] = status
        self.report["statements_executed"] = statements_executed
        self.report["finished_at"] = self._now()
        if self.report.get("started_at"):
            started_at = datetime.fromisoformat(self.report["started_at"])
            finished_at = datetime.fromisoformat(self.report["finished_at"])
            self.report["duration_seconds"] = (finished_at - started_at).total_seconds()
        self.report["error"] = error
        self.write()

    def write(self):
        os.makedirs(os.path.dirname(self.report_file) or ".", exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            prefix="run-report-", suffix=".json", dir=os.path.dirname(self.report_file) or "."
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            try:
                os.remove(temp_path)
            except OSError:
                pass

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
