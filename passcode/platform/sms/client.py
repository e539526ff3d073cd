import abc
from typing import Callable

import boto3
import sentry_sdk
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from passcode.common.domain import BaseDomain
from passcode.platform.sms.exceptions import SMSFailedToSend
from passcode.platform.sms.utils import mask_phone_number


class SMSMessage(BaseDomain):
    """
    Domain object for sending SMS messages.
    All SMS clients must accept this object.
    """

    phone_number: str  # E.164 format: +1234567890
    message: str
    sender_id: str | None = None


class AbstractSMSClient(abc.ABC):
    def __init__(self, *args, **kwargs): ...

    @abc.abstractmethod
    def send(self, sms: SMSMessage): ...


class MockSMSClient(AbstractSMSClient):
    """
    Mock SMS client for testing.
    Stores messages in memory instead of sending.
    """

    def __init__(self, *args, **kwargs):
        self.sms_catcher = self.get_sms_catcher()
        super().__init__(*args, **kwargs)

    def send(self, sms: SMSMessage):
        logger.info(f'[MOCK SMS] To: {mask_phone_number(sms.phone_number)}')
        self.sms_catcher.append(sms)

    def get_sms_catcher(self) -> list:
        """
        Mock this object in tests to capture SMS messages
        """
        return []


class AWSSNSSMSClient(AbstractSMSClient):
    """
    AWS SNS SMS client.

    Requirements:
    - AWS credentials with SNS permissions
    - Phone numbers in E.164 format (+1234567890)
    """

    def __init__(
        self,
        region_name: str,
        access_key_id: str | None,
        secret_access_key: str | None,
        timeout: int = 10,
        *args,
        **kwargs,
    ):
        # Require SNS-specific credentials, no fallback to the default AWS chain
        if not access_key_id or not secret_access_key:
            raise ValueError('SNS access key id and secret must be configured for SMS delivery')

        self.client = boto3.client(
            'sns',
            region_name=region_name,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(connect_timeout=timeout, read_timeout=timeout, retries={'max_attempts': 1}),
        )
        super().__init__(*args, **kwargs)

    def send(self, sms: SMSMessage):
        masked_phone = mask_phone_number(sms.phone_number)
        logger.info(f'Sending SMS to {masked_phone}')

        message_attributes = {
            'AWS.SNS.SMS.SMSType': {
                'DataType': 'String',
                'StringValue': 'Transactional',  # Optimized for delivery over cost
            }
        }

        # Not supported in all regions/countries
        if sms.sender_id:
            message_attributes['AWS.SNS.SMS.SenderID'] = {'DataType': 'String', 'StringValue': sms.sender_id}

        try:
            response = self.client.publish(
                PhoneNumber=sms.phone_number, Message=sms.message, MessageAttributes=message_attributes
            )
        except (BotoCoreError, ClientError) as exc:
            raise SMSFailedToSend(message=f'AWS SNS failed: {masked_phone}') from exc

        logger.info(f'SMS sent successfully. MessageId: {response.get("MessageId")}')
        return response


class ResilientLiveSMSClient(AbstractSMSClient):
    """
    Resilient SMS client with failover support.
    Tries each provider in priority order.
    """

    def __init__(self, client_factories: list[Callable[[], AbstractSMSClient]], *args, **kwargs):
        self.client_factories = client_factories
        super().__init__(*args, **kwargs)

    def send(self, sms: SMSMessage):
        message_sent = False

        for client_factory in self.client_factories:
            try:
                client = client_factory()
                client.send(sms)
            except SMSFailedToSend:
                logger.warning(f'{client_factory} failed to send SMS')
                sentry_sdk.capture_exception()
            except Exception as exc:
                raise SMSFailedToSend(message=f'Unexpected failure using {client_factory}') from exc
            else:
                message_sent = True
                break

        if not message_sent:
            raise SMSFailedToSend(message=f'Exhausted all SMS clients for {mask_phone_number(sms.phone_number)}')
