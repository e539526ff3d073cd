from passcode.common.exceptions import APIException, InternalException
from passcode.core.mfa.exceptions import PasscodePersistenceError


def test_internal_exception_defaults_to_detail():
    exc = InternalException()
    assert exc.message == InternalException.default_detail
    assert exc.context == {}
    assert str(exc) == 'InternalException(Internal failure.)'


def test_internal_exception_keeps_message_and_context():
    exc = InternalException('broken', context={'user_ref': 'usr-1'})
    assert exc.message == 'broken'
    assert exc.context == {'user_ref': 'usr-1'}


def test_persistence_error_is_retryable_service_unavailable():
    exc = PasscodePersistenceError()
    assert exc.retryable is True
    assert exc.status_code == 503


def test_api_exception_defaults_code_to_status():
    exc = APIException(message='nope')
    assert exc.code == 400
    assert exc.error_type is None
