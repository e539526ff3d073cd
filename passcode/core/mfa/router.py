from fastapi import APIRouter, Depends, status
from loguru import logger

from passcode import settings
from passcode.common.domain import BaseDomain
from passcode.common.exceptions import APIException
from passcode.core.mfa.constants import DeliveryChannelEnum
from passcode.core.mfa.exceptions import (
    MfaUserNotFound,
    PasscodeValidationError,
    PasscodeVerificationFailed,
)
from passcode.core.mfa.service import MfaService

router = APIRouter()

INVALID_CODE_MESSAGE = 'Invalid or expired code'


class VerifyPayload(BaseDomain):
    # Loose so a missing or numeric code gets the same answer as a bad one
    code: str | int | None = None
    user_id: str | None = None


class VerifyResponse(BaseDomain):
    user_id: str


class IssuePayload(BaseDomain):
    user_id: str


class IssueResponse(BaseDomain):
    channel: DeliveryChannelEnum


@router.post('/verify')
def verify_code(
    payload: VerifyPayload,
    mfa_service: MfaService = Depends(MfaService.factory),
) -> VerifyResponse:
    """
    Consume a login code, answers with the user it was issued to
    """
    # The client supplied user only narrows the lookup when enabled
    user_ref = payload.user_id if settings.MFA_SETTINGS['SCOPE_VERIFY_TO_USER'] else None
    raw_code = None if payload.code is None else str(payload.code)
    try:
        user_id = mfa_service.verify_code(raw_code, user_ref=user_ref)
    except PasscodeValidationError:
        raise APIException(
            code=status.HTTP_400_BAD_REQUEST,
            message=INVALID_CODE_MESSAGE,
            error_type='MFA_MISSING_CODE',
        )
    except PasscodeVerificationFailed:
        raise APIException(
            code=status.HTTP_400_BAD_REQUEST,
            message=INVALID_CODE_MESSAGE,
            error_type='MFA_INVALID_CODE',
        )

    return VerifyResponse(user_id=user_id)


@router.post('/issue', status_code=201)
def issue_code(
    payload: IssuePayload,
    mfa_service: MfaService = Depends(MfaService.factory),
) -> IssueResponse:
    """
    Send a login code to a user who passed their primary check.
    Only the login flow should be able to reach this.
    """
    if mfa_service.user_directory is None:
        raise APIException(code=status.HTTP_404_NOT_FOUND, message='User not found')

    try:
        user = mfa_service.user_directory.get_user(payload.user_id)
    except MfaUserNotFound:
        logger.info(f'passcode requested for unknown user {payload.user_id}')
        raise APIException(code=status.HTTP_404_NOT_FOUND, message='User not found')

    if not user.mfa_enabled:
        raise APIException(
            code=status.HTTP_409_CONFLICT,
            message='MFA is not enabled for this user',
            error_type='MFA_NOT_ENABLED',
        )

    issued = mfa_service.issue_code(user)
    return IssueResponse(channel=issued.channel)
