"""JSON report sink."""

import json
from pathlib import Path

from ..model.result import MitigationReport
from ..utils.logger import get_logger
from .base import ReportSink

logger = get_logger(__name__)


class JsonReportSink(ReportSink):
    """Write the report as a JSON document with a summary block."""

    def write(self, report: MitigationReport) -> Path:
        document = {"summary": report.summary(), "results": self.rows(report)}

        with open(self.path, "w") as f:
            json.dump(document, f, indent=2)

        logger.info(f"Exported {len(report.results)} result(s) to {self.path}")
        return self.path
