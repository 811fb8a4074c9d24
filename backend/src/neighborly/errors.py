"""
Error taxonomy for marketplace mutations.

Every refusal a mutation can produce is a ``MarketplaceError`` subclass
carrying the HTTP status the handlers answer with and a stable ``code``
string the web client switches on. Reads never raise these; they degrade
to empty lists, null or default values instead.
"""


class MarketplaceError(Exception):
    """Base class for refusals surfaced directly to the caller."""
    status_code = 400
    code = 'BadRequest'
    default_message = 'Request refused'

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class Unauthenticated(MarketplaceError):
    status_code = 401
    code = 'Unauthenticated'
    default_message = 'Not authenticated'


class NotFound(MarketplaceError):
    status_code = 404
    code = 'NotFound'
    default_message = 'Not found'


class Forbidden(MarketplaceError):
    status_code = 403
    code = 'Forbidden'
    default_message = 'Not authorized'


class InvalidState(MarketplaceError):
    status_code = 409
    code = 'InvalidState'
    default_message = 'Operation not allowed in the current task status'


class DuplicateApplication(MarketplaceError):
    status_code = 409
    code = 'DuplicateApplication'
    default_message = 'Already applied'


class SelfApplication(MarketplaceError):
    status_code = 400
    code = 'SelfApplication'
    default_message = 'Cannot apply to your own task'


class NotAnApplicant(MarketplaceError):
    status_code = 400
    code = 'NotAnApplicant'
    default_message = 'Helper has not applied'


class AlreadyReviewed(MarketplaceError):
    status_code = 409
    code = 'AlreadyReviewed'
    default_message = 'Review already submitted for this task'


class InvalidRating(MarketplaceError):
    status_code = 400
    code = 'InvalidRating'
    default_message = 'Rating must be an integer between 1 and 5'


class NoRecipient(MarketplaceError):
    status_code = 409
    code = 'NoRecipient'
    default_message = 'No recipient found'


class ValidationError(MarketplaceError):
    status_code = 400
    code = 'ValidationError'
    default_message = 'Invalid input'


class ProfileExists(MarketplaceError):
    status_code = 409
    code = 'ProfileExists'
    default_message = 'User profile already exists'


class ConditionFailed(Exception):
    """
    A DynamoDB condition expression or transaction was refused.

    Raised by the store, never returned to callers: mutations re-read the
    records involved and translate it into the precise MarketplaceError.
    """
