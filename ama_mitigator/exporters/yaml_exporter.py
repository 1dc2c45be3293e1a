"""YAML report sink."""

from pathlib import Path

import yaml

from ..model.result import MitigationReport
from ..utils.logger import get_logger
from .base import ReportSink

logger = get_logger(__name__)


class YamlReportSink(ReportSink):
    """Write the report as YAML, one document."""

    def write(self, report: MitigationReport) -> Path:
        document = {"summary": report.summary(), "results": self.rows(report)}

        with open(self.path, "w") as f:
            yaml.dump(document, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Exported {len(report.results)} result(s) to {self.path}")
        return self.path
