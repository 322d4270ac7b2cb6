"""Runtime services: settings and telemetry."""

from . import telemetry
from .settings import EngineSettings

__all__ = ["EngineSettings", "telemetry"]
