"""
Badge engine errors.

Expected absence (no progress row, no award yet) is never an error;
these cover malformed catalog entries and exhausted write retries.
"""


class BadgeEngineError(Exception):
    """Base badge engine error."""
    pass


class UnknownCriteriaError(BadgeEngineError):
    """Criteria type has no evaluator."""
    pass


class UnknownMetricError(BadgeEngineError):
    """Metric name is not supported by the criteria type."""
    pass


class InvalidConditionError(BadgeEngineError):
    """Condition expression cannot be parsed."""
    pass


class InvalidThresholdsError(BadgeEngineError):
    """Thresholds are not strictly increasing bronze < silver < gold."""
    pass


class ProgressConflictError(BadgeEngineError):
    """Concurrent writers kept winning; progress could not be saved."""
    pass
