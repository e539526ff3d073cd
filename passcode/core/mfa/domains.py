from datetime import datetime, timedelta

from pydantic import Field

from passcode import settings
from passcode.common.domain import BaseDomain
from passcode.common.nanoid import NanoIdType
from passcode.core.mfa.constants import (
    DeliveryChannelEnum,
    EmailBackendEnum,
    MfaMethodEnum,
    SMSBackendEnum,
)


class PasscodeTokenCreate(BaseDomain):
    user_ref: str
    code: str
    created_at: datetime
    expires_at: datetime


class PasscodeTokenRead(PasscodeTokenCreate):
    id: NanoIdType
    consumed_at: datetime | None = None

    @property
    def is_consumed(self) -> bool:
        return self.consumed_at is not None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class MfaUser(BaseDomain):
    """
    Read-only view of a user owned by the account system
    """

    id: str | None = None
    email: str | None = None
    phone: str | None = None
    mfa_method: MfaMethodEnum = MfaMethodEnum.EMAIL
    mfa_enabled: bool = True


class IssuedPasscode(BaseDomain):
    """
    What a caller learns about an issued code. The code itself is only ever
    handed to the delivery channel.
    """

    channel: DeliveryChannelEnum


class DeliveryConfig(BaseDomain):
    """
    Everything delivery needs, captured once and handed to the dispatcher
    """

    email_backend: EmailBackendEnum = EmailBackendEnum.LOG
    email_from_address: str = 'no-reply@passcode.local'
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    resend_api_key: str | None = None
    aws_region_name: str = 'us-east-1'
    aws_ses_access_key_id: str | None = None
    aws_ses_secret_access_key: str | None = None
    aws_sns_access_key_id: str | None = None
    aws_sns_secret_access_key: str | None = None
    sms_backend: SMSBackendEnum = SMSBackendEnum.LOG
    failure_log_level: str = 'ERROR'
    report_failures: bool = False
    log_code_on_failure: bool = False
    timeout_seconds: int = 10
    company_name: str = 'Passcode'
    environment: str = 'local'
    code_lifetime: timedelta = Field(default_factory=lambda: timedelta(minutes=10))

    @classmethod
    def from_settings(cls) -> 'DeliveryConfig':
        email_backend = settings.EMAIL_BACKEND
        if settings.USE_MOCK_EMAIL_CLIENT:
            email_backend = EmailBackendEnum.MOCK
        sms_backend = settings.SMS_BACKEND
        if settings.USE_MOCK_SMS_CLIENT:
            sms_backend = SMSBackendEnum.MOCK

        return cls(
            email_backend=email_backend,
            email_from_address=settings.EMAIL_FROM_ADDRESS,
            smtp_host=settings.SMTP_HOST,
            smtp_port=settings.SMTP_PORT,
            smtp_user=settings.SMTP_USER,
            smtp_password=settings.SMTP_PASSWORD,
            smtp_use_tls=settings.SMTP_USE_TLS,
            resend_api_key=settings.RESEND_API_KEY,
            aws_region_name=settings.AWS_REGION_NAME,
            aws_ses_access_key_id=settings.AWS_SES_ACCESS_KEY_ID,
            aws_ses_secret_access_key=settings.AWS_SES_SECRET_ACCESS_KEY,
            aws_sns_access_key_id=settings.AWS_SNS_ACCESS_KEY_ID,
            aws_sns_secret_access_key=settings.AWS_SNS_SECRET_ACCESS_KEY,
            sms_backend=sms_backend,
            failure_log_level=settings.MFA_DELIVERY_FAILURE_LOG_LEVEL,
            report_failures=settings.MFA_DELIVERY_REPORT_FAILURES,
            log_code_on_failure=settings.MFA_LOG_CODE_ON_FAILURE,
            timeout_seconds=settings.DELIVERY_TIMEOUT_SECONDS,
            company_name=settings.COMPANY_NAME,
            environment=settings.ENVIRONMENT,
            code_lifetime=settings.MFA_SETTINGS['CODE_LIFETIME'],
        )

    @property
    def is_smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    @property
    def is_email_configured(self) -> bool:
        if self.email_backend == EmailBackendEnum.SMTP:
            return self.is_smtp_configured
        if self.email_backend == EmailBackendEnum.LIVE:
            return bool(self.resend_api_key or (self.aws_ses_access_key_id and self.aws_ses_secret_access_key))

        return self.email_backend == EmailBackendEnum.MOCK

    @property
    def is_sms_configured(self) -> bool:
        if self.sms_backend == SMSBackendEnum.LIVE:
            return bool(self.aws_sns_access_key_id and self.aws_sns_secret_access_key)

        return self.sms_backend == SMSBackendEnum.MOCK

    @property
    def code_lifetime_minutes(self) -> int:
        return int(self.code_lifetime.total_seconds() // 60)
