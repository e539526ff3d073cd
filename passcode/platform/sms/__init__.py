from passcode.platform.sms.client import (
    AbstractSMSClient,
    AWSSNSSMSClient,
    MockSMSClient,
    ResilientLiveSMSClient,
    SMSMessage,
)
from passcode.platform.sms.exceptions import SMSFailedToSend
from passcode.platform.sms.sms import SMS
from passcode.platform.sms.utils import mask_phone_number

__all__ = [
    'AbstractSMSClient',
    'AWSSNSSMSClient',
    'MockSMSClient',
    'ResilientLiveSMSClient',
    'SMSFailedToSend',
    'SMSMessage',
    'SMS',
    'mask_phone_number',
]
