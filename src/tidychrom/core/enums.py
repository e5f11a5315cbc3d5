"""tidychrom constants."""

import enum


class OperatorType(str, enum.Enum):
    """Available operators types."""

    TRACE = "trace"
    """Transform the intensity of a chromatogram."""

    PEAK = "peak"
    """Detect or quantify peaks in a chromatogram."""


class Side(str, enum.Enum):
    """Side of the peak apex where a peak boundary was measured."""

    LEFT = "left"
    """Boundary found on the leading edge of the peak."""

    RIGHT = "right"
    """Boundary found on the trailing edge of the peak."""
