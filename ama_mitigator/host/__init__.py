"""Local OS facilities the decision engine runs against."""

from .base import NodeHost
from .local import PsutilHost

__all__ = ["NodeHost", "PsutilHost"]
