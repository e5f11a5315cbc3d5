"""Chromatogram processing status and status checks used to validate operator order."""

from __future__ import annotations

import pydantic

from .exceptions import ProcessStatusError


class ProcessStatus(pydantic.BaseModel):
    """Report the processing steps applied to a chromatogram."""

    baseline_estimated: bool = False
    """A baseline was estimated for each channel."""

    baseline_subtracted: bool = False
    """The estimated baseline was subtracted from the intensity."""

    smoothed: bool = False
    """The intensity was smoothed."""

    peaks_located: bool = False
    """Peak candidates were located in each channel."""

    peaks_fitted: bool = False
    """Peak candidates were fitted."""


def check_process_status(actual: ProcessStatus, expected: ProcessStatus) -> None:
    """Check that every step required by `expected` was applied according to `actual`.

    :param actual: the chromatogram status
    :param expected: the status required by an operator
    :raises ProcessStatusError: if a required step is missing

    """
    for field in ProcessStatus.model_fields:
        if getattr(expected, field) and not getattr(actual, field):
            raise ProcessStatusError(f"Expected status `{field}` to be set before applying the operator.")


def update_process_status(status: ProcessStatus, reference: ProcessStatus) -> None:
    """Set in `status` all steps applied in `reference` inplace."""
    for field in ProcessStatus.model_fields:
        if getattr(reference, field):
            setattr(status, field, True)
