class HITLogError(Exception):
    """Base class for errors raised by the workout log."""


class ImportReadError(HITLogError):
    """The import file could not be read or decoded. Raised before any parsing."""


class ExerciseNotFoundError(HITLogError, LookupError):
    pass
