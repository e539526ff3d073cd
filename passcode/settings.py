import os
from datetime import timedelta

from decouple import Choices, config

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BASE_MODULE = 'passcode'

COMPANY_NAME = config('COMPANY_NAME', default='Passcode')

# API Documentation
API_TITLE = config('API_TITLE', default=f'{COMPANY_NAME} MFA API')
API_DESCRIPTION = config('API_DESCRIPTION', default='One-time passcode issuance and verification')

HOST = 'http://127.0.0.1'
SECRET_KEY = config('SECRET_KEY', default='secret')
DEBUG = config('DEBUG', default=False, cast=bool)
ENVIRONMENT = config(
    'ENVIRONMENT', default='local', cast=Choices(['local', 'testing', 'demo', 'staging', 'production'])
)
IS_LOCAL = ENVIRONMENT == 'local'
IS_PRODUCTION = ENVIRONMENT == 'production'
IS_STAGING = ENVIRONMENT == 'staging'
IS_DEMO = ENVIRONMENT == 'demo'
IS_DEPLOYED_ENV = IS_PRODUCTION or IS_STAGING or IS_DEMO

API_PREFIX = ''
LOG_LEVEL = config('LOG_LEVEL', 'INFO')

MFA_SETTINGS = {
    'CODE_LENGTH': config('MFA_CODE_LENGTH', default=6, cast=int),
    'CODE_LIFETIME': timedelta(minutes=config('MFA_CODE_LIFETIME_MINUTES', default=10, cast=int)),
    # Re-selects allowed when a concurrent verify consumed the chosen candidate first
    'CONSUME_MAX_ATTEMPTS': config('MFA_CONSUME_MAX_ATTEMPTS', default=3, cast=int),
    'SWEEP_INTERVAL_MINUTES': config('MFA_SWEEP_INTERVAL_MINUTES', default=15, cast=int),
    'SCOPE_VERIFY_TO_USER': config('MFA_SCOPE_VERIFY_TO_USER', default=False, cast=bool),
}

# Support DATABASE_URL (any SQLAlchemy url) or individual postgres vars
DATABASE_URL = config('DATABASE_URL', default=None)
DB_NAME = config('DB_NAME', default=None)
DB_USER = config('DB_USER', default=None)
DB_PASSWORD = config('DB_PASSWORD', default='dev1')
DB_HOST = config('DB_HOST', default='127.0.0.1')
DB_PORT = config('DB_PORT', default=5432, cast=int)
if not DATABASE_URL:
    if DB_NAME:
        DATABASE_URL = f'postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}'
    else:
        DATABASE_URL = f'sqlite:///{os.path.join(BASE_DIR, "passcode.db")}'
DB_LOG_STATEMENTS = config('DB_LOG_STATEMENTS', default=False, cast=bool)
DB_STATEMENT_TIMEOUT_MS = config('DB_STATEMENT_TIMEOUT_MS', default=5000, cast=int)

# Define boundaries whose models are registered on the metadata
BOUNDARIES = [
    'core.mfa',
]

# AWS
AWS_REGION_NAME = config('AWS_REGION_NAME', default='us-east-1')
AWS_SES_ACCESS_KEY_ID = config('AWS_SES_ACCESS_KEY_ID', default=None)
AWS_SES_SECRET_ACCESS_KEY = config('AWS_SES_SECRET_ACCESS_KEY', default=None)
AWS_SNS_ACCESS_KEY_ID = config('AWS_SNS_ACCESS_KEY_ID', default=None)
AWS_SNS_SECRET_ACCESS_KEY = config('AWS_SNS_SECRET_ACCESS_KEY', default=None)

# Email
EMAIL_FROM_ADDRESS = config('EMAIL_FROM_ADDRESS', default=config('SMTP_FROM', default='no-reply@passcode.local'))
EMAIL_BACKEND = config('EMAIL_BACKEND', default='log', cast=Choices(['log', 'smtp', 'live']))
SMTP_HOST = config('SMTP_HOST', default=None)
SMTP_PORT = config('SMTP_PORT', default=587, cast=int)
SMTP_USER = config('SMTP_USER', default=None)
SMTP_PASSWORD = config('SMTP_PASSWORD', default=None)
SMTP_USE_TLS = config('SMTP_USE_TLS', default=True, cast=bool)
RESEND_API_KEY = config('RESEND_API_KEY', default=None)

# SMS
SMS_BACKEND = config('SMS_BACKEND', default='log', cast=Choices(['log', 'live']))

# Delivery
DELIVERY_TIMEOUT_SECONDS = config('DELIVERY_TIMEOUT_SECONDS', default=10, cast=int)
MFA_DELIVERY_FAILURE_LOG_LEVEL = config(
    'MFA_DELIVERY_FAILURE_LOG_LEVEL', default='ERROR', cast=Choices(['WARNING', 'ERROR', 'CRITICAL'])
)
MFA_DELIVERY_REPORT_FAILURES = config('MFA_DELIVERY_REPORT_FAILURES', default=IS_DEPLOYED_ENV, cast=bool)
MFA_LOG_CODE_ON_FAILURE = config('MFA_LOG_CODE_ON_FAILURE', default=not IS_DEPLOYED_ENV, cast=bool)

# Sentry
SENTRY_DSN = config('SENTRY_DSN', default=None)
SENTRY_DEFAULT_SAMPLE_RATE = config('SENTRY_DEFAULT_SAMPLE_RATE', default=1, cast=int)

# Mocks
USE_MOCK_SENTRY_CLIENT = config('USE_MOCK_SENTRY_CLIENT', default=False, cast=bool)
USE_MOCK_EMAIL_CLIENT = config('USE_MOCK_EMAIL_CLIENT', default=False, cast=bool)
USE_MOCK_SMS_CLIENT = config('USE_MOCK_SMS_CLIENT', default=False, cast=bool)
