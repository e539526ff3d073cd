from functools import partial

import sentry_sdk
from loguru import logger

from passcode.core.mfa.constants import (
    MFA_CODE_EMAIL_TEMPLATE,
    DeliveryChannelEnum,
    EmailBackendEnum,
    MfaMethodEnum,
    SMSBackendEnum,
)
from passcode.core.mfa.domains import DeliveryConfig, MfaUser
from passcode.platform.email import (
    AbstractEmailClient,
    AWSEmailClient,
    EmailFailedToSend,
    EmailService,
    MockEmailClient,
    ResendEmailClient,
    ResilientLiveEmailClient,
    SMTPEmailClient,
)
from passcode.platform.sms import (
    SMS,
    AbstractSMSClient,
    AWSSNSSMSClient,
    MockSMSClient,
    ResilientLiveSMSClient,
    SMSFailedToSend,
    mask_phone_number,
)


class DeliveryDispatcher:
    """
    Picks a channel for a user and makes a best effort attempt to deliver a
    code on it. Delivery never fails issuance: provider errors are logged at
    the configured severity (optionally reported to sentry) and swallowed.
    Without a configured provider the code is written to the log instead.
    """

    def __init__(
        self,
        config: DeliveryConfig,
        email_client: AbstractEmailClient | None = None,
        sms_client: AbstractSMSClient | None = None,
    ):
        self.config = config
        self._email_client = email_client
        self._sms_client = sms_client

    @classmethod
    def factory(cls) -> 'DeliveryDispatcher':
        return cls(config=DeliveryConfig.from_settings())

    def select_channel(self, user: MfaUser) -> DeliveryChannelEnum:
        if user.mfa_method == MfaMethodEnum.SMS and user.phone:
            return DeliveryChannelEnum.SMS

        return DeliveryChannelEnum.EMAIL

    def send(self, user: MfaUser, code: str) -> DeliveryChannelEnum:
        channel = self.select_channel(user)
        try:
            if channel == DeliveryChannelEnum.SMS:
                self._send_sms(user=user, code=code)
            else:
                self._send_email(user=user, code=code)
        except Exception as exc:
            self._handle_failure(user=user, channel=channel, code=code, exc=exc)

        return channel

    def _send_email(self, user: MfaUser, code: str) -> None:
        if not self.config.is_email_configured:
            self._log_code(user=user, channel=DeliveryChannelEnum.EMAIL, code=code)
            return

        if not user.email:
            raise EmailFailedToSend(message=f'user {user.id} has no email address')

        subject = f'Your {self.config.company_name} login code'
        email_service = EmailService(
            email_client=self.get_email_client(),
            from_address=self.config.email_from_address,
            company_name=self.config.company_name,
            environment=self.config.environment,
        )
        email_service.send_template(
            subject=subject,
            recipients=[user.email],
            template_name=MFA_CODE_EMAIL_TEMPLATE,
            plain_message=self._plain_message(code),
            context=dict(code=code, expires_in_minutes=self.config.code_lifetime_minutes),
        )
        logger.info(f'login code emailed to user {user.id}')

    def _send_sms(self, user: MfaUser, code: str) -> None:
        if not self.config.is_sms_configured:
            self._log_code(user=user, channel=DeliveryChannelEnum.SMS, code=code)
            return

        sms = SMS(
            phone_number=user.phone,
            message=f'{self.config.company_name}: {self._plain_message(code)}',
            sender_id=self.config.company_name,
            client=self.get_sms_client(),
        )
        sms.send()
        logger.info(f'login code texted to user {user.id} at {mask_phone_number(user.phone)}')

    def _plain_message(self, code: str) -> str:
        return (
            f'Your login code is: {code}\n\n'
            f'This code will expire in {self.config.code_lifetime_minutes} minutes.'
        )

    def _log_code(self, user: MfaUser, channel: DeliveryChannelEnum, code: str) -> None:
        # Development fallback, nothing configured to deliver through
        logger.info(f'[MFA] {channel} delivery not configured, login code for user {user.id}: {code}')

    def _handle_failure(self, user: MfaUser, channel: DeliveryChannelEnum, code: str, exc: Exception) -> None:
        logger.opt(exception=exc).log(
            self.config.failure_log_level,
            f'[MFA] {channel} delivery failed for user {user.id}: {exc}',
        )
        if self.config.report_failures:
            sentry_sdk.capture_exception(exc)
        if self.config.log_code_on_failure:
            logger.info(f'[MFA] fallback login code for user {user.id}: {code}')

    def get_email_client(self) -> AbstractEmailClient:
        """
        Built per send so a mocked catcher is picked up
        """
        if self._email_client is not None:
            return self._email_client

        config = self.config
        if config.email_backend == EmailBackendEnum.MOCK:
            return MockEmailClient()
        if config.email_backend == EmailBackendEnum.SMTP:
            return SMTPEmailClient(
                host=config.smtp_host,
                port=config.smtp_port,
                username=config.smtp_user,
                password=config.smtp_password,
                use_tls=config.smtp_use_tls,
                timeout=config.timeout_seconds,
            )

        client_factories = []
        if config.resend_api_key:
            client_factories.append(partial(ResendEmailClient, api_key=config.resend_api_key))
        if config.aws_ses_access_key_id and config.aws_ses_secret_access_key:
            client_factories.append(
                partial(
                    AWSEmailClient,
                    region_name=config.aws_region_name,
                    access_key_id=config.aws_ses_access_key_id,
                    secret_access_key=config.aws_ses_secret_access_key,
                    timeout=config.timeout_seconds,
                )
            )
        return ResilientLiveEmailClient(client_factories=client_factories)

    def get_sms_client(self) -> AbstractSMSClient:
        if self._sms_client is not None:
            return self._sms_client

        config = self.config
        if config.sms_backend == SMSBackendEnum.MOCK:
            return MockSMSClient()

        return ResilientLiveSMSClient(
            client_factories=[
                partial(
                    AWSSNSSMSClient,
                    region_name=config.aws_region_name,
                    access_key_id=config.aws_sns_access_key_id,
                    secret_access_key=config.aws_sns_secret_access_key,
                    timeout=config.timeout_seconds,
                )
            ]
        )
