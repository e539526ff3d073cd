from passcode.common.enum import BaseEnum


class MfaMethodEnum(BaseEnum):
    """The factor a user asked for when enrolling"""

    EMAIL = 'EMAIL'
    SMS = 'SMS'


class DeliveryChannelEnum(BaseEnum):
    """Where an issued code actually went"""

    EMAIL = 'email'
    SMS = 'sms'


class EmailBackendEnum(BaseEnum):
    LOG = 'log'
    SMTP = 'smtp'
    LIVE = 'live'
    MOCK = 'mock'


class SMSBackendEnum(BaseEnum):
    LOG = 'log'
    LIVE = 'live'
    MOCK = 'mock'


MFA_CODE_EMAIL_TEMPLATE = 'mfa-code.html'

# Width of the code column, codes may be shorter
MAX_CODE_LENGTH = 6
