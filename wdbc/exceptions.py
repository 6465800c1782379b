"""Error taxonomy for the classification pipeline.

Every error carries the name of the pipeline stage that raised it so the
orchestrator and the CLI can report where a run was aborted.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all structural and parameter errors of the pipeline."""

    default_stage = 'pipeline'

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


class SourceUnavailable(PipelineError):
    """The data source could not be read (missing file, network failure, ...)."""

    default_stage = 'loader'


class SchemaMismatch(PipelineError):
    """The data does not match the expected column schema."""

    default_stage = 'loader'


class InsufficientClasses(PipelineError):
    """Fewer than two distinct labels were observed."""

    default_stage = 'preprocessor'


class InvalidFraction(PipelineError):
    """Train fraction outside (0, 1) or unusable for the given dataset."""

    default_stage = 'splitter'
