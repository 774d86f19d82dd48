"""
Error taxonomy.

Only ValidationError and DataUnavailableError cross the request boundary.
StoreError and EnrichmentFailure are internal and are resolved inside the
pipeline.
"""


class VolleyCoachError(Exception):
    """Base class for engine errors."""


class ValidationError(VolleyCoachError):
    """The request is missing required input (e.g., an empty question)."""


class DataUnavailableError(VolleyCoachError):
    """A narrow question's mandatory data fetch failed."""


class StoreError(VolleyCoachError):
    """The persistent store could not be read."""


class EnrichmentFailure(VolleyCoachError):
    """The generative-text service could not produce usable text."""
