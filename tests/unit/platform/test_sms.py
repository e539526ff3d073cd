from unittest.mock import MagicMock

import pytest

from passcode.platform.sms import SMS, MockSMSClient, ResilientLiveSMSClient, SMSFailedToSend, mask_phone_number
from passcode.platform.sms.client import AWSSNSSMSClient, SMSMessage


def test_mask_phone_number():
    assert mask_phone_number('+18452428261') == '+1******8261'
    assert mask_phone_number('+12345') == '+12345'


def test_sms_wrapper_sends_through_given_client(caught_sms):
    SMS(phone_number='+15551234567', message='hello', client=MockSMSClient(), sender_id='TestCompany').send()

    assert caught_sms == [SMSMessage(phone_number='+15551234567', message='hello', sender_id='TestCompany')]


def test_sns_client_requires_credentials():
    with pytest.raises(ValueError):
        AWSSNSSMSClient(region_name='us-east-1', access_key_id=None, secret_access_key=None)


def test_resilient_client_fails_over(monkeypatch):
    monkeypatch.setattr('passcode.platform.sms.client.sentry_sdk.capture_exception', MagicMock())
    primary = MagicMock()
    primary.send.side_effect = SMSFailedToSend('down')
    secondary = MagicMock()
    sms = SMSMessage(phone_number='+15551234567', message='hello')

    ResilientLiveSMSClient(client_factories=[lambda: primary, lambda: secondary]).send(sms)

    primary.send.assert_called_once_with(sms)
    secondary.send.assert_called_once_with(sms)


def test_resilient_client_raises_when_exhausted(monkeypatch):
    monkeypatch.setattr('passcode.platform.sms.client.sentry_sdk.capture_exception', MagicMock())
    primary = MagicMock()
    primary.send.side_effect = SMSFailedToSend('down')

    with pytest.raises(SMSFailedToSend):
        ResilientLiveSMSClient(client_factories=[lambda: primary]).send(
            SMSMessage(phone_number='+15551234567', message='hello')
        )
