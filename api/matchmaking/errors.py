class MatchmakingError(Exception):
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidArgument(MatchmakingError):
    """Rejected before any store access; never worth retrying."""

    status_code = 400


class NotFound(MatchmakingError):
    status_code = 404


class StoreUnavailable(MatchmakingError):
    """A backing store failed. Safe for the caller to retry the whole operation."""

    status_code = 503
