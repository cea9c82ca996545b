# (c) Nelen & Schuurmans

__all__ = ["EmptyCursor", "FetchError", "FetcherUnavailable"]


class EmptyCursor(Exception):
    """Raised when advancing a page that has no next_url.

    No request is made. Callers can catch this to stop a traversal.
    """

    def __init__(self, msg: str = "empty next_url field"):
        super().__init__(msg)


class FetchError(Exception):
    """Base class for errors raised while fetching from the API."""


class FetcherUnavailable(FetchError):
    def __init__(self, msg: str = "the fetcher is no longer available"):
        super().__init__(msg)
