class CineNovaError(Exception):
    """Base class for every error raised by the catalog core."""


class UpstreamUnavailable(CineNovaError):
    """Metadata provider unreachable, timed out, or answered with a failure flag."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} unavailable: {reason}")


class NotFound(CineNovaError):
    """Provider reports that the requested title does not exist."""

    def __init__(self, provider: str, key: str):
        self.provider = provider
        self.key = key
        super().__init__(f"{provider} has no result for {key!r}")


class ProxyTransferFailure(CineNovaError):
    """External byte source for a download could not be reached."""


class CatalogDataError(CineNovaError):
    """Availability data file is missing or malformed."""
