"""CSV report sink."""

import csv
from pathlib import Path

from ..model.result import REPORT_COLUMNS, MitigationReport, NodeResult
from ..utils.logger import get_logger
from .base import ReportSink

logger = get_logger(__name__)


class CsvReportSink(ReportSink):
    """Writes ClusterName, NodeName, Status, Message, ComponentVersion rows."""

    def write(self, report: MitigationReport) -> Path:
        with open(self.path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=list(REPORT_COLUMNS), quoting=csv.QUOTE_ALL)
            writer.writeheader()
            writer.writerows(self.rows(report))

        logger.info(f"Exported {len(report.results)} result(s) to {self.path}")
        return self.path

    def read(self) -> MitigationReport:
        """Load a report previously written by this sink."""
        with open(self.path, "r", newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            missing = [column for column in REPORT_COLUMNS if column not in (reader.fieldnames or [])]
            if missing:
                raise ValueError(f"{self.path} is missing column(s): {', '.join(missing)}")
            report = MitigationReport()
            report.extend(NodeResult.from_row(row) for row in reader)

        return report
