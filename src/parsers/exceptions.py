class UpstreamError(Exception):
    pass


class UpstreamQueryError(UpstreamError):
    """Ledger or API call could not be completed (transport, timeout, bad response)."""


class MalformedDataError(UpstreamError):
    """Upstream returned a record with an unexpected shape."""
