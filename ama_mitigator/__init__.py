"""Fleet-wide mitigation for the AMA extension MetricsExtension defect."""

__version__ = "0.1.0"
