from passcode.common.exceptions import InternalException


class EmailFailedToSend(InternalException):
    """Raised when an email could not be handed to a provider"""

    default_detail = 'Email failed to send'
    default_code = 'email_send_failure'
