"""Fatal pipeline errors. Anything raised from here aborts the whole run."""


class PipelineError(Exception):
    """Base class for errors that stop a run before the curriculum is rewritten."""
    pass


class ConfigurationError(PipelineError):
    """Raised when the volume map is missing or malformed."""
    pass


class CurriculumError(PipelineError):
    """Raised when the curriculum index cannot be read or parsed."""
    pass
