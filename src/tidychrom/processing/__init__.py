"""Baseline correction, peak detection and peak quantification of chromatographic traces."""

from .baseline import asls, estimate_baseline
from .fitting import egh, egh_area, egh_decay, egh_width, fit_peaks
from .operators import (
    BaselineCorrector,
    PeakFitter,
    PeakLocator,
    TraceSmoother,
    create_integration_pipeline,
    integrate,
)
from .peaks import find_local_maxima, locate_peaks
from .smoothing import smooth

__all__ = [
    "asls",
    "BaselineCorrector",
    "create_integration_pipeline",
    "egh",
    "egh_area",
    "egh_decay",
    "egh_width",
    "estimate_baseline",
    "find_local_maxima",
    "fit_peaks",
    "integrate",
    "locate_peaks",
    "PeakFitter",
    "PeakLocator",
    "smooth",
    "TraceSmoother",
]
