"""Exception types raised by SiteMix."""


class MalformedInputError(ValueError):
    """Instance or solution data is missing fields or has misaligned tables."""


class InfeasibleInstanceError(ValueError):
    """The instance cannot be served, e.g. a client's demand exceeds site capacity."""


class SelectorFailure(RuntimeError):
    """A bounded selector could not run to completion."""
