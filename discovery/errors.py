# discovery/errors.py
"""Error taxonomy for the discovery location pipeline.

Location resolution errors never reach the caller: the resolver chain
recovers from them by falling through to the next strategy.
ContentFetchFailure is the only one surfaced, as a single notice.
"""


class DiscoveryError(Exception):
    """Base class for all discovery errors."""


class LocationResolutionError(DiscoveryError):
    """A step of the location resolution chain failed."""


class PermissionDenied(LocationResolutionError):
    pass


class PositionUnavailable(LocationResolutionError):
    pass


class GeocodeFailure(LocationResolutionError):
    pass


class PersistenceReadFailure(LocationResolutionError):
    pass


class ContentFetchFailure(DiscoveryError):
    """The document store could not return the content collection."""


class InvalidLocationInput(DiscoveryError, ValueError):
    """Manually entered location text could not be parsed."""
