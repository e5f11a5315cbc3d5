"""tidychrom core operators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from logging import getLogger
from typing import Any, Literal

import pydantic

from .dataflow import ProcessStatus, check_process_status, update_process_status
from .enums import OperatorType
from .exceptions import PipelineConfigurationError, ProcessStatusError, RepeatedIdError
from .executors import ChannelExecutor, create_executor
from .models import Chromatogram
from .registry import operator_registry

logger = getLogger(__name__)


class BaseOperator(ABC, pydantic.BaseModel):
    """tidychrom base operator which all other operators inherit from.

    Operators are pydantic models: their fields are the operator parameters, which are
    validated on assignment and serialized when a pipeline is serialized.

    """

    id: str = ""
    """The Operator id."""

    max_workers: pydantic.PositiveInt | None = 1
    """The number of threads used to process channels. If set to ``1``, channels are processed sequentially."""

    model_config = pydantic.ConfigDict(validate_assignment=True)

    @abstractmethod
    def get_expected_status_in(self) -> ProcessStatus:
        """Get the expected chromatogram status before applying the operator."""
        ...

    @abstractmethod
    def get_expected_status_out(self) -> ProcessStatus:
        """Get the expected chromatogram status after applying the operator."""
        ...

    def check_status(self, status: ProcessStatus) -> None:
        """Raise an exception if data status is not compatible with operator required status."""
        check_process_status(status, self.get_expected_status_in())

    def update_status(self, status_in: ProcessStatus) -> None:
        """Update the chromatogram process status to the status after applying the operator."""
        update_process_status(status_in, self.get_expected_status_out())

    def create_executor(self) -> ChannelExecutor:
        """Create the executor used to process chromatogram channels."""
        return create_executor(self.max_workers)

    def apply(self, data: Chromatogram) -> None:
        """Apply the operator function to the data."""
        self.check_status(data.status)

        if hasattr(self, "pre_apply"):
            self.pre_apply()  # type: ignore

        logger.info(f"Applying `{self.id or self.__class__.__name__}` to chromatogram `{data.id}`.")
        self._apply_operator(data)

        if hasattr(self, "post_apply"):
            self.post_apply()  # type: ignore

        self.update_status(data.status)

    @abstractmethod
    def _apply_operator(self, data: Chromatogram) -> None: ...


class TraceOperator(BaseOperator):
    """Base operator for intensity transformations.

    Must implement the `transform_intensity` method, which takes the chromatogram and
    creates a new intensity array with the same shape.

    """

    type: Literal[OperatorType.TRACE] = OperatorType.TRACE

    def _apply_operator(self, data: Chromatogram) -> None:
        data.intensity = self.transform_intensity(data)

    @abstractmethod
    def transform_intensity(self, data: Chromatogram) -> Any: ...  # noqa


class PeakOperator(BaseOperator):
    """Base operator for peak detection and quantification."""

    type: Literal[OperatorType.PEAK] = OperatorType.PEAK


class Pipeline:
    """Compose multiple operators into a single unit."""

    def __init__(self, id: str) -> None:
        self.id = id
        self.operators: list[BaseOperator | Pipeline] = list()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Pipeline):
            return NotImplemented
        equal_ids = self.id == other.id
        equal_operators = self.operators == other.operators
        return equal_ids and equal_operators

    def add_operator(self, operator: BaseOperator | Pipeline) -> None:
        """Add a new operator to the pipeline.

        :param operator: the operator to add
        :raises PipelineConfigurationError: if an empty pipeline is added.
        :raises RepeatedIdError: if the pipeline already contains an operator with the same id.

        """
        if isinstance(operator, Pipeline) and not operator.operators:
            raise PipelineConfigurationError("Nested pipelines cannot be empty")

        if any(x.id == operator.id for x in self.operators):
            msg = f"Pipeline {self.id} already contains an operator with id {operator.id}."
            raise RepeatedIdError(msg)

        self.operators.append(operator)

    def apply(self, data: Chromatogram) -> None:
        """Apply pipeline to the data."""
        for op in self.operators:
            op.apply(data)

    def copy(self) -> Pipeline:
        """Create an independent copy of the pipeline."""
        return Pipeline.deserialize(self.serialize())

    @classmethod
    def deserialize(cls, d: dict[str, Any]) -> Pipeline:
        """Deserialize a dictionary into a pipeline."""
        id_ = d.get("id")
        if not isinstance(id_, str):
            raise ValueError("`id` is a mandatory field and must be a string.")

        operators = d.get("operators")
        if not isinstance(operators, list):
            raise ValueError("`operators` is a mandatory field and must be a list of dictionaries.")

        pipe = Pipeline(id_)

        for op_dict in operators:
            if not isinstance(op_dict, dict):
                raise ValueError("`operators` element is not a dictionary.")
            if "operators" in op_dict:
                op = Pipeline.deserialize(op_dict)
            else:
                op = operator_registry.load(op_dict)
            pipe.add_operator(op)
        return pipe

    def serialize(self) -> dict:
        """Serialize pipeline into a JSON serializable dictionary."""
        operators = list()
        serialized = {"id": self.id, "operators": operators}
        for op in self.operators:
            if isinstance(op, Pipeline):
                d = op.serialize()
            else:
                d = operator_registry.dump(op)
            operators.append(d)
        return serialized

    def validate_dataflow(self) -> None:
        """Check if the data status throughout the pipeline is valid.

        :raises PipelineConfigurationError: if an operator is applied before the steps it requires.

        """
        try:
            self._validate_dataflow_recursion(ProcessStatus())
        except ProcessStatusError as e:
            msg = "Check that the order of operators in the pipeline is valid."
            raise PipelineConfigurationError(msg) from e

    def _validate_dataflow_recursion(self, status: ProcessStatus):
        for op in self.operators:
            if isinstance(op, Pipeline):
                op._validate_dataflow_recursion(status)
            else:
                op.check_status(status)
                op.update_status(status)
