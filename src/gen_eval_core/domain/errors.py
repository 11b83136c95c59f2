"""
Domain Errors

Error taxonomy of the evaluation engine. Only ValidationError and
ConfigurationError abort a run; the others are recovered at the record or
metric that produced them and surfaced as data.
"""


class EvaluationError(Exception):
    """Base class for evaluation errors"""
    pass


class ValidationError(EvaluationError):
    """The task is malformed; raised before any scoring"""
    pass


class ConfigurationError(EvaluationError):
    """The engine is missing a collaborator the task needs"""
    pass


class MetricError(EvaluationError):
    """A whole metric cannot be evaluated (unsupported type, missing template)"""
    pass


class RecordError(EvaluationError):
    """A single record could not be scored"""
    pass
