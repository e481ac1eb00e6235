# circle/common/errors.py
"""
Domain errors.

Plain exceptions (no DRF import) so pure modules such as
circle.friends.state_machine can raise them. The DRF exception handler in
circle.common.exceptions turns them into the response envelope.
"""


class CircleError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "internal error"

    def __init__(self, message: str = None, *, code: str = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)


class ValidationError(CircleError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "invalid request"


class InvalidTarget(ValidationError):
    code = "INVALID_TARGET"
    default_message = "invalid target user"


class AuthError(CircleError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "authentication required"


class ForbiddenError(CircleError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "permission denied"


class NotFoundError(CircleError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "not found"


class UserNotFound(NotFoundError):
    code = "USER_NOT_FOUND"
    default_message = "user not found"


class NoSuchRequest(NotFoundError):
    code = "NO_SUCH_REQUEST"
    default_message = "friend request not found"


class ConflictError(CircleError):
    status_code = 409
    code = "CONFLICT"
    default_message = "conflicting state"


class AlreadyFriends(ConflictError):
    code = "ALREADY_FRIENDS"
    default_message = "you are already friends"


class DuplicateRequest(ConflictError):
    code = "DUPLICATE_REQUEST"
    default_message = "you have sent a friend request already"


class ReciprocalRequestExists(ConflictError):
    code = "RECIPROCAL_REQUEST_EXISTS"
    default_message = "you have a pending friend request from this user"


class NotFriends(ConflictError):
    code = "NOT_FRIENDS"
    default_message = "you are not friends"


class InternalError(CircleError):
    pass


class RelationshipCorrupted(InternalError):
    code = "RELATIONSHIP_CORRUPTED"
    default_message = "relationship records are inconsistent"
