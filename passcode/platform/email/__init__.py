from passcode.platform.email.client import (
    AbstractEmailClient,
    AWSEmailClient,
    EmailClientDomain,
    MockEmailClient,
    ResendEmailClient,
    ResilientLiveEmailClient,
    SMTPEmailClient,
)
from passcode.platform.email.exceptions import EmailFailedToSend
from passcode.platform.email.service import EmailService

__all__ = [
    'AbstractEmailClient',
    'AWSEmailClient',
    'EmailClientDomain',
    'EmailFailedToSend',
    'EmailService',
    'MockEmailClient',
    'ResendEmailClient',
    'ResilientLiveEmailClient',
    'SMTPEmailClient',
]
