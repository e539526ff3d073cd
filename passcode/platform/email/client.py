import abc
import smtplib
from email.message import EmailMessage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Callable

import boto3
import resend
import sentry_sdk
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger
from pydantic import model_validator

from passcode.common.domain import BaseDomain
from passcode.platform.email.exceptions import EmailFailedToSend


class EmailClientDomain(BaseDomain):
    """
    All clients must take in this object to send mail
    """

    # Something like (no-reply@passcode.local, Passcode)
    from_email: tuple[str, str]
    to_emails: list[str]
    subject: str
    plain_text_content: str | None = None
    html_content: str | None = None

    @model_validator(mode='after')
    def validate_content(self):
        if self.plain_text_content is None and self.html_content is None:
            raise ValueError('Must supply at least one of a plain_text_content or html_content')

        return self

    @property
    def formatted_from(self) -> str:
        return f'{self.from_email[1]} <{self.from_email[0]}>'


class AbstractEmailClient(abc.ABC):
    def __init__(self, *args, **kwargs): ...

    @abc.abstractmethod
    def send(self, message: EmailClientDomain): ...


class SMTPEmailClient(AbstractEmailClient):
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: int = 10,
        *args,
        **kwargs,
    ):
        self.smtp_host = host
        self.smtp_port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        super().__init__(*args, **kwargs)

    def send(self, message: EmailClientDomain):
        msg = EmailMessage()
        msg['Subject'] = message.subject
        msg['From'] = message.formatted_from
        msg['To'] = ', '.join(message.to_emails)

        # Text content
        if message.plain_text_content:
            msg.set_content(message.plain_text_content)

        # HTML content
        if message.html_content:
            msg.add_alternative(message.html_content, subtype='html')

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailFailedToSend(message=f'SMTP {self.smtp_host}:{self.smtp_port} {message.subject}') from exc

        logger.info(f'message sent through SMTP server at {self.smtp_host}:{self.smtp_port}')


class MockEmailClient(AbstractEmailClient):
    def __init__(self, *args, **kwargs):
        self.email_catcher = self.get_email_catcher()
        super().__init__(*args, **kwargs)

    def send(self, message: EmailClientDomain):
        self.email_catcher.append(message)

    def get_email_catcher(self) -> list:
        """
        Mock this object in tests to attach emails to it
        """
        return []


class ResendEmailClient(AbstractEmailClient):
    def __init__(self, api_key: str, *args, **kwargs):
        resend.api_key = api_key
        super().__init__(*args, **kwargs)

    def send(self, message: EmailClientDomain):
        params: resend.Emails.SendParams = {
            'from': message.formatted_from,
            'to': message.to_emails,
            'subject': message.subject,
        }

        if message.html_content:
            params['html'] = message.html_content

        if message.plain_text_content:
            params['text'] = message.plain_text_content

        try:
            response = resend.Emails.send(params)
            logger.info(f'Resend email sent: {response}')
        except Exception as exc:
            raise EmailFailedToSend(message=f'Resend {message.subject}') from exc


class AWSEmailClient(AbstractEmailClient):
    def __init__(
        self,
        region_name: str,
        access_key_id: str | None,
        secret_access_key: str | None,
        timeout: int = 10,
        *args,
        **kwargs,
    ):
        self.client = boto3.client(
            'ses',
            region_name=region_name,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(connect_timeout=timeout, read_timeout=timeout, retries={'max_attempts': 1}),
        )
        super().__init__(*args, **kwargs)

    def send(self, message: EmailClientDomain):
        """
        Send an email using AWS SES API
        """
        mmp = MIMEMultipart('alternative')

        if message.plain_text_content is not None:
            mmp.attach(MIMEText(message.plain_text_content, 'plain'))

        if message.html_content is not None:
            mmp.attach(MIMEText(message.html_content, 'html'))

        mmp['Subject'] = message.subject
        mmp['From'] = message.formatted_from
        mmp['To'] = ', '.join(message.to_emails)

        try:
            response = self.client.send_raw_email(
                Source=message.from_email[0],
                Destinations=message.to_emails,
                RawMessage={'Data': mmp.as_string()},
            )
        except (BotoCoreError, ClientError) as exc:
            raise EmailFailedToSend(message=f'SES {message.subject}') from exc

        return response


class ResilientLiveEmailClient(AbstractEmailClient):
    """
    Tries each provider in priority order until one accepts the message.
    Providers are built lazily so an unused secondary never opens a connection.
    """

    def __init__(self, client_factories: list[Callable[[], AbstractEmailClient]], *args, **kwargs):
        self.client_factories = client_factories
        super().__init__(*args, **kwargs)

    def send(self, message: EmailClientDomain):
        message_sent = False
        for client_factory in self.client_factories:
            try:
                client = client_factory()
                client.send(message)
            except EmailFailedToSend:
                logger.warning(f'{client_factory} failed to send!')
                sentry_sdk.capture_exception()
            except Exception as exc:
                raise EmailFailedToSend(message=f'Unexpected failure using {client_factory}') from exc
            else:
                # Success
                message_sent = True
                break

        if not message_sent:
            raise EmailFailedToSend(message=f'Exhausted all clients -> {message.subject}')
