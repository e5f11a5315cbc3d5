"""tidychrom core exceptions."""


class InvalidTraceError(ValueError):
    """Exception raised when time and intensity arrays do not describe a valid trace."""


class PipelineConfigurationError(ValueError):
    """Exception raised when an invalid configuration is set in a pipeline."""


class ProcessStatusError(ValueError):
    """Exception raised when an action cannot be performed on a chromatogram due to incorrect processing status."""


class RegistryError(ValueError):
    """Exception raised when an entry is not found in a registry."""


class RepeatedIdError(ValueError):
    """Exception raised when trying to add a resource with an existing id."""
