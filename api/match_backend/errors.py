class MatchBackendError(Exception):
    """Base class for domain errors raised below the HTTP layer."""

    status_code = 400
    default_detail = "Request could not be processed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class UserNotFound(MatchBackendError):
    status_code = 404
    default_detail = "User not found"


class MissingProfile(MatchBackendError):
    """The requester has no trait profile yet; ranking needs a bio first."""

    status_code = 409
    default_detail = "User does not have trait profile data"


class InvalidSelfReference(MatchBackendError):
    status_code = 400
    default_detail = "Requester and target must be different users"


class CrossCommunity(MatchBackendError):
    status_code = 403
    default_detail = "Users belong to different communities"


class LikeAlreadyExists(MatchBackendError):
    status_code = 400
    default_detail = "User already liked"


class LikeNotFound(MatchBackendError):
    status_code = 404
    default_detail = "Like not found"


class NotMatched(MatchBackendError):
    status_code = 403
    default_detail = "You must match with a user before sending messages"
