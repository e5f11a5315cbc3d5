"""Utilities to simulate chromatographic data."""

from .traces import EGHPeakSpec, LinearBaselineSpec, NoiseSpec, SimulatedTraceFactory, TimeGridSpec

__all__ = ["EGHPeakSpec", "LinearBaselineSpec", "NoiseSpec", "SimulatedTraceFactory", "TimeGridSpec"]
