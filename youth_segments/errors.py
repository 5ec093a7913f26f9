# Error taxonomy shared by every pipeline stage


class SegmentationError(Exception):
    """Base class for all pipeline errors."""


class SchemaError(SegmentationError):
    """A required column is missing from the input table."""

    def __init__(self, missing, context=""):
        self.missing = list(missing)
        where = f" for {context}" if context else ""
        super().__init__(f"Missing required column(s){where}: {', '.join(self.missing)}")


class DegenerateColumnError(SegmentationError):
    """A feature column has zero variance and cannot be standardised."""

    def __init__(self, columns, context=""):
        self.columns = list(columns)
        where = f"[{context}] " if context else ""
        super().__init__(f"{where}Zero-variance column(s): {', '.join(self.columns)}")


class InsufficientDataError(SegmentationError):
    """Fewer distinct records than the requested number of clusters."""


class DataIntegrityError(SegmentationError, ValueError):
    """Input rows violate a structural assumption, e.g. duplicate respondent ids."""


class ConvergenceError(SegmentationError):
    """
    Iteration cap reached before the partition stabilised.

    The best assignment available at the cutoff is kept on ``result`` so
    callers can log the problem and carry on with it.
    """

    def __init__(self, message, result=None):
        super().__init__(message)
        self.result = result
