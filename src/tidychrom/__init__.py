"""Baseline estimation, peak detection and EGH peak integration of chromatographic traces."""

from .core.config import BaselineConfiguration, FitterConfiguration, PeakLocatorConfiguration, SmoothingConfiguration
from .core.models import Chromatogram, FittedPeak, PeakCandidate, SideCandidate
from .core.operators import Pipeline
from .processing import create_integration_pipeline, estimate_baseline, fit_peaks, integrate, locate_peaks, smooth

__all__ = [
    "BaselineConfiguration",
    "Chromatogram",
    "create_integration_pipeline",
    "estimate_baseline",
    "fit_peaks",
    "FittedPeak",
    "FitterConfiguration",
    "integrate",
    "locate_peaks",
    "PeakCandidate",
    "PeakLocatorConfiguration",
    "Pipeline",
    "SideCandidate",
    "smooth",
    "SmoothingConfiguration",
]
