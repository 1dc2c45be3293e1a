"""Base report sink class."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List

from ..model.result import MitigationReport


class ReportSink(ABC):
    """Base class for report sinks."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    @abstractmethod
    def write(self, report: MitigationReport) -> Path:
        """Persist the finalized report and return the written path."""

    def rows(self, report: MitigationReport) -> List[Dict[str, str]]:
        """Report rows keyed by column name, in report order."""
        return [result.as_row() for result in report.finalize()]
