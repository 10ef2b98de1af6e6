# -*- coding: utf-8 -*-
"""Exceptions raised by the data preparation pipeline."""


class PipelineError(Exception):
    """Base class for errors that make a pipeline run fatal."""

    def __init__(self, message, stage=None):
        self.stage = stage
        if stage:
            message = f"[{stage}] {message}"
        super().__init__(message)


class SchemaError(PipelineError):
    """A column the pipeline needs is absent from the input schema."""

    def __init__(self, field, stage=None):
        self.field = field
        super().__init__(f"Required column '{field}' is missing from the input schema", stage)


class DataInsufficientError(PipelineError):
    """Too few rows (or status levels) remain to stratify."""

    def __init__(self, level, minimum, found, stage=None):
        self.level = level
        self.minimum = minimum
        self.found = found
        super().__init__(
            f"Status level '{level}' has {found} record(s); at least {minimum} required",
            stage
        )


class ValidationError(PipelineError):
    """A filter predicate cannot be evaluated on a field's values."""

    def __init__(self, field, detail, stage=None):
        self.field = field
        self.detail = detail
        super().__init__(f"Cannot evaluate field '{field}': {detail}", stage)
