"""Report sinks."""

from pathlib import Path

from ..model.export import ReportFormat
from .base import ReportSink
from .csv_exporter import CsvReportSink
from .json_exporter import JsonReportSink
from .yaml_exporter import YamlReportSink

SINKS = {
    ReportFormat.CSV: CsvReportSink,
    ReportFormat.JSON: JsonReportSink,
    ReportFormat.YAML: YamlReportSink,
}


def sink_for(report_format: ReportFormat, path: Path) -> ReportSink:
    """Pick the sink for a report format."""
    return SINKS[ReportFormat(report_format)](path)


__all__ = ["ReportSink", "sink_for", "CsvReportSink", "JsonReportSink", "YamlReportSink"]
