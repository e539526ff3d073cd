"""
SMS wrapper similar to EmailService.
Provides a simple interface for sending SMS messages.
"""

from loguru import logger

from passcode.platform.sms.client import AbstractSMSClient, SMSMessage
from passcode.platform.sms.utils import mask_phone_number


class SMS:
    """
    High-level SMS sending interface over an explicit client.

    Usage:
        sms = SMS(
            phone_number="+12345678900",
            message="Your login code is: 123456",
            client=MockSMSClient(),
        )
        sms.send()
    """

    def __init__(
        self,
        phone_number: str,
        message: str,
        client: AbstractSMSClient,
        sender_id: str | None = None,
    ):
        self.phone_number = phone_number
        self.message = message
        self.sender_id = sender_id
        self.client = client

    def send(self):
        sms_domain = SMSMessage(
            phone_number=self.phone_number,
            message=self.message,
            sender_id=self.sender_id,
        )
        self.client.send(sms_domain)
        logger.info(f'SMS sent to {mask_phone_number(self.phone_number)}')
