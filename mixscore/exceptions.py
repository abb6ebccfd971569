"""Custom exceptions for mixscore."""


class ScoringError(Exception):
    """Base class for scoring failures."""

    pass


class ConfigurationError(ScoringError):
    """Raised when a reference profile or scoring config is malformed."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class ReferenceNotFoundError(ConfigurationError):
    """Raised when a genre or reference file cannot be found."""

    pass


class InsufficientDataError(ScoringError):
    """Raised when no category has usable data, so no score can be given."""

    def __init__(self, message: str, excluded_metrics=None):
        super().__init__(message)
        self.excluded_metrics = list(excluded_metrics or [])


class PartialDataWarning(UserWarning):
    """Some metrics or categories were N/A and were left out of the score."""

    def __init__(self, excluded_metrics, excluded_categories):
        self.excluded_metrics = list(excluded_metrics)
        self.excluded_categories = list(excluded_categories)
        parts = []
        if self.excluded_metrics:
            parts.append("metrics: " + ", ".join(self.excluded_metrics))
        if self.excluded_categories:
            parts.append("categories: " + ", ".join(self.excluded_categories))
        super().__init__("Insufficient data for " + "; ".join(parts))
