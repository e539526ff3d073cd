from fastapi import status

from passcode.common.exceptions import InternalException
from passcode.network.database.repository.exceptions import RepositoryObjectNotFound


class PasscodeException(InternalException): ...


class PasscodeValidationError(PasscodeException):
    """
    Malformed input, raised before the store is touched
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid or expired code.'
    default_code = 'mfa_missing_code'


class PasscodeVerificationFailed(PasscodeException):
    """
    Single outcome for unknown, expired, consumed and superseded codes
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid or expired code.'
    default_code = 'mfa_invalid_code'


class PasscodePersistenceError(PasscodeException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Passcode storage is unavailable.'
    default_code = 'mfa_persistence_failure'
    retryable = True


class PasscodeNotFound(RepositoryObjectNotFound):
    """
    Nothing consumable matched, internal to the store
    """

    ...


class MfaUserNotFound(PasscodeException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'User not found.'
    default_code = 'mfa_user_not_found'
