"""Serializable numpy array types and trace normalization utilities."""

from __future__ import annotations

import base64
import json
from typing import Literal, Sequence, TypeVar

import numpy
from numpy import floating, frombuffer, integer
from numpy.typing import ArrayLike, NDArray
from pydantic.functional_serializers import PlainSerializer
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated

from ..core.exceptions import InvalidTraceError


def array_to_json_str(arr: NDArray) -> str:
    """Serialize a numpy array as a JSON string.

    :param arr: The numpy array to serialize
    :return: JSON string with the following three fields. `dtype` store the array dtype, `shape` contains the array
        shape and `base64_bytes` stores the array data in base64 format.

    """
    d = {
        "dtype": str(arr.dtype),
        "shape": arr.shape,
        "base64_bytes": base64.b64encode(arr.tobytes()).decode("utf8"),
    }
    return json.dumps(d)


def json_str_to_array(s: str):
    """Decode a string generated with array_to_json_str into a numpy array.

    :param s: A string serialized numpy array
    :return: a new numpy instance

    """
    d = json.loads(s)
    dtype = d["dtype"]
    shape = d["shape"]
    data = base64.b64decode(bytes(d["base64_bytes"], "utf8"))
    return frombuffer(data, dtype=dtype).reshape(shape).copy()


def validate_serializable_array(arr: NDArray) -> NDArray:
    """Create an array if a serialized string is provided."""
    if isinstance(arr, str):
        arr = json_str_to_array(arr)
    return arr


def as_time_array(x: ArrayLike) -> FloatArray1D:
    """Convert a time axis into a 1D float64 array.

    :param x: the time values. Row or column vectors are flattened.
    :raises InvalidTraceError: if `x` is not a vector or is empty.

    """
    x = numpy.asarray(x, dtype=float)
    if x.ndim == 2 and 1 in x.shape:
        x = x.ravel()
    if x.ndim != 1 or not x.size:
        raise InvalidTraceError("time must be a non-empty 1D array.")
    return x


def as_intensity_matrix(y: ArrayLike, n_samples: int | None = None) -> FloatArray:
    """Convert intensity values into a 2D float64 array with one column per channel.

    :param y: 1D array with a single channel or 2D array where each column is a channel.
    :param n_samples: If provided, the expected number of rows. A 2D array with `n_samples`
        columns but a different number of rows is transposed.
    :raises InvalidTraceError: if `y` is not 1D or 2D, or if its size does not match `n_samples`.

    """
    y = numpy.asarray(y)
    if y.dtype.kind not in "fiub":
        raise InvalidTraceError(f"intensity must be numeric, got dtype {y.dtype}.")
    y = y.astype(float)

    if y.ndim == 1:
        y = y.reshape((y.size, 1))
    elif y.ndim != 2:
        raise InvalidTraceError("intensity must be a 1D or 2D array.")

    if n_samples is not None:
        n_rows, n_cols = y.shape
        if n_rows != n_samples and n_cols == n_samples:
            y = y.T
        if y.shape[0] != n_samples:
            msg = f"The number of time points ({n_samples}) does not match the intensity rows ({y.shape[0]})."
            raise InvalidTraceError(msg)
    return y


def broadcast_channel_values(values: float | Sequence[float] | NDArray, n_channels: int) -> list[float]:
    """Create a value for each channel from a scalar or a per-channel sequence.

    If the sequence size does not match the number of channels, its first element is used
    for all channels.

    """
    arr = numpy.atleast_1d(numpy.asarray(values, dtype=float)).ravel()
    if arr.size == n_channels:
        return arr.tolist()
    return [arr[0].item()] * n_channels


FloatDtype = TypeVar("FloatDtype", bound=floating)
IntDtype = TypeVar("IntDtype", bound=integer)


FloatArray = Annotated[
    NDArray[FloatDtype],
    BeforeValidator(validate_serializable_array),
    PlainSerializer(array_to_json_str, return_type=str),
]

FloatArray1D = Annotated[
    NDArray[FloatDtype],
    Literal["N"],
    BeforeValidator(validate_serializable_array),
    PlainSerializer(array_to_json_str, return_type=str),
]

IntArray1D = Annotated[
    NDArray[IntDtype],
    Literal["N"],
    BeforeValidator(validate_serializable_array),
    PlainSerializer(array_to_json_str, return_type=str),
]
