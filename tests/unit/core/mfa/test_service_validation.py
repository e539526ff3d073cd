from unittest.mock import MagicMock

import pytest

from passcode.core.mfa.constants import DeliveryChannelEnum
from passcode.core.mfa.domains import MfaUser, PasscodeTokenRead
from passcode.core.mfa.exceptions import PasscodeNotFound, PasscodeValidationError, PasscodeVerificationFailed
from passcode.core.mfa.generator import SecretsCodeGenerator
from passcode.core.mfa.service import MfaService


@pytest.fixture
def store() -> MagicMock:
    return MagicMock()


@pytest.fixture
def dispatcher() -> MagicMock:
    dispatcher = MagicMock()
    dispatcher.send.return_value = DeliveryChannelEnum.EMAIL
    return dispatcher


@pytest.fixture
def service(store, dispatcher, clock) -> MfaService:
    return MfaService(store=store, dispatcher=dispatcher, generator=SecretsCodeGenerator(), clock=clock)


@pytest.mark.parametrize('raw_code', [None, '', '   ', '\t\n'])
def test_empty_input_fails_without_touching_the_store(service, store, raw_code):
    with pytest.raises(PasscodeValidationError):
        service.verify_code(raw_code)

    store.consume_by_code.assert_not_called()


@pytest.mark.parametrize('raw_code', ['12345', '1234567', '12a456', '١٢٣٤٥٦', '12 456'])
def test_malformed_input_fails_without_touching_the_store(service, store, raw_code):
    with pytest.raises(PasscodeValidationError):
        service.verify_code(raw_code)

    store.consume_by_code.assert_not_called()


def test_surrounding_whitespace_is_stripped(service, store, clock):
    store.consume_by_code.return_value = PasscodeTokenRead(
        id='pct-1',
        user_ref='usr-1',
        code='123456',
        created_at=clock.now(),
        expires_at=clock.now(),
        consumed_at=clock.now(),
    )

    assert service.verify_code('  123456\n') == 'usr-1'
    store.consume_by_code.assert_called_once_with(code='123456', now=clock.now(), user_ref=None)


def test_store_miss_becomes_generic_failure(service, store):
    store.consume_by_code.side_effect = PasscodeNotFound('nothing')

    with pytest.raises(PasscodeVerificationFailed):
        service.verify_code('123456')


def test_issue_rejects_user_without_id(service, store, dispatcher):
    with pytest.raises(PasscodeValidationError):
        service.issue_code(MfaUser(id=None, email='a@example.com'))

    store.replace_active.assert_not_called()
    dispatcher.send.assert_not_called()


def test_issue_persists_before_delivering_and_hides_the_code(service, store, dispatcher, clock):
    calls = []
    store.replace_active.side_effect = lambda **kwargs: calls.append(('persist', kwargs['code']))
    dispatcher.send.side_effect = lambda user, code: calls.append(('deliver', code)) or DeliveryChannelEnum.EMAIL

    issued = service.issue_code(MfaUser(id='usr-1', email='a@example.com'))

    assert [step for step, _ in calls] == ['persist', 'deliver']
    assert calls[0][1] == calls[1][1]
    assert issued.channel == DeliveryChannelEnum.EMAIL
    assert 'code' not in issued.to_dict()
    assert store.replace_active.call_args.kwargs['now'] == clock.now()
