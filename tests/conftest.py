import os
import tempfile
from datetime import datetime

# Test Environment Overrides will override .env files
# THESE MUST BE SET BEFORE ANYTHING FROM passcode IS IMPORTED
EXPECTED_SECRET_KEY = 'test'
TEST_DATABASE_DIR = tempfile.mkdtemp(prefix='passcode-tests-')

os.environ.setdefault('SECRET_KEY', EXPECTED_SECRET_KEY)
os.environ.setdefault('ENVIRONMENT', 'testing')
os.environ.setdefault('COMPANY_NAME', 'TestCompany')
os.environ.setdefault('EMAIL_FROM_ADDRESS', 'noreply@testcompany.com')
os.environ.setdefault('DATABASE_URL', f'sqlite:///{os.path.join(TEST_DATABASE_DIR, "test.db")}')
os.environ.setdefault('USE_MOCK_SENTRY_CLIENT', 'True')
os.environ.setdefault('USE_MOCK_EMAIL_CLIENT', 'True')
os.environ.setdefault('USE_MOCK_SMS_CLIENT', 'True')

from passcode import setup  # noqa: E402

setup.run()

# ruff: noqa: E402
import pytest
from sqlalchemy.orm import Session

from passcode import settings
from passcode.common.clock import FrozenClock
from passcode.common.model import BaseModel
from passcode.core.mfa.directory import InMemoryUserDirectory
from passcode.core.mfa.dispatcher import DeliveryDispatcher
from passcode.core.mfa.domains import DeliveryConfig
from passcode.core.mfa.generator import SecretsCodeGenerator
from passcode.core.mfa.service import MfaService
from passcode.core.mfa.store import PasscodeStore
from passcode.network.database.session import db as session_manager
from passcode.network.database.session import get_engine
from passcode.platform.email.client import EmailClientDomain
from passcode.platform.sms.client import SMSMessage

# Add fixtures here
pytest_plugins = [
    'tests.factories.core.mfa',
]

# When passcode files are imported before the above patching, tests will use
# incorrect database settings as well as non mocked services.
if settings.SECRET_KEY != EXPECTED_SECRET_KEY:
    raise ValueError(
        'Patching of environment variables failed.\n'
        'This will cause unexpected test failures\n'
        'Check all passcode imports are delayed until after patching.\n'
    )

FROZEN_NOW = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture(scope='session', autouse=True)
def database_schema():
    engine = get_engine()
    BaseModel.metadata.create_all(engine)
    yield
    BaseModel.metadata.drop_all(engine)


@pytest.fixture(scope='function')
def db() -> Session:
    """
    Passcode operations commit in their own isolated sessions so there is no
    outer transaction to roll back. Tables are emptied after each test instead.
    """
    with session_manager(commit_on_success=False):
        yield session_manager.session

    with get_engine().begin() as connection:
        for table in reversed(BaseModel.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture(scope='function')
def clock() -> FrozenClock:
    return FrozenClock(FROZEN_NOW)


@pytest.fixture(scope='function')
def delivery_config() -> DeliveryConfig:
    return DeliveryConfig.from_settings()


@pytest.fixture(scope='function')
def user_directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture(scope='function')
def mfa_service(clock, delivery_config, user_directory) -> MfaService:
    return MfaService(
        store=PasscodeStore(),
        dispatcher=DeliveryDispatcher(config=delivery_config),
        generator=SecretsCodeGenerator(),
        clock=clock,
        user_directory=user_directory,
    )


@pytest.fixture(scope='function')
def caught_emails(monkeypatch) -> list[EmailClientDomain]:
    """
    Fixture that returns any sent emails during the function calls
    def sample_test(caught_emails):
        service.something_that_sends_an_email_as_side_effect()
        assert len(caught_emails) == 1
    """
    caught_email_container = []
    monkeypatch.setattr(
        'passcode.platform.email.client.MockEmailClient.get_email_catcher', lambda self: caught_email_container
    )
    return caught_email_container


@pytest.fixture(scope='function')
def caught_sms(monkeypatch) -> list[SMSMessage]:
    """
    Same as caught_emails for text messages
    """
    caught_sms_container = []
    monkeypatch.setattr('passcode.platform.sms.client.MockSMSClient.get_sms_catcher', lambda self: caught_sms_container)
    return caught_sms_container


@pytest.fixture(scope='function')
def email_user(mfa_user_factory, user_directory):
    return user_directory.add(mfa_user_factory.build(email='ada@example.com'))


@pytest.fixture(scope='function')
def sms_user(mfa_user_factory, user_directory):
    return user_directory.add(mfa_user_factory.build(mfa_method='SMS', phone='+15551234567'))
