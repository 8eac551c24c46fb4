# backend/errors.py
"""Error taxonomy shared by the registry, ledger and aggregator.

Every error carries the HTTP status and a short machine-readable code so the
boundary can render it without inspecting the message:

- ValidationError: missing or malformed required field (400)
- AlreadyVotedError: the voter's address already has a vote (400)
- NotFoundError: operation on an unknown identifier (404)
- StorageFault: persistence failure; the detail stays in the server log (500)
"""


class VotingError(Exception):
    status_code = 500
    code = 'error'
    default_message = 'Request failed'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class ValidationError(VotingError):
    status_code = 400
    code = 'validation_error'
    default_message = 'Invalid request'


class AlreadyVotedError(VotingError):
    status_code = 400
    code = 'already_voted'
    default_message = 'You have already voted from this device/network.'


class NotFoundError(VotingError):
    status_code = 404
    code = 'not_found'
    default_message = 'Not found'


class StorageFault(VotingError):
    status_code = 500
    code = 'storage_fault'
    default_message = 'Internal server error'

    def __init__(self, message=None):
        # The message is never shown to clients
        super().__init__(None)
        self.detail = message
