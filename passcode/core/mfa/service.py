from loguru import logger

from passcode import settings
from passcode.common.clock import Clock, SystemClock
from passcode.core.mfa.directory import UserDirectory, default_user_directory
from passcode.core.mfa.dispatcher import DeliveryDispatcher
from passcode.core.mfa.domains import IssuedPasscode, MfaUser
from passcode.core.mfa.exceptions import (
    PasscodeNotFound,
    PasscodeValidationError,
    PasscodeVerificationFailed,
)
from passcode.core.mfa.generator import AbstractCodeGenerator, SecretsCodeGenerator
from passcode.core.mfa.store import PasscodeStore


class MfaService:
    """
    Second factor passcodes: issue one per user, verify each at most once.

    A new code supersedes any unconsumed code for the same user. Codes expire
    after the configured lifetime whether or not they were used. Verification
    looks codes up by value, optionally scoped to a user.
    """

    def __init__(
        self,
        store: PasscodeStore,
        dispatcher: DeliveryDispatcher,
        generator: AbstractCodeGenerator,
        clock: Clock,
        user_directory: UserDirectory | None = None,
        code_length: int | None = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.generator = generator
        self.clock = clock
        self.user_directory = user_directory
        self.code_length = code_length or generator.length

    @classmethod
    def factory(cls) -> 'MfaService':
        return cls(
            store=PasscodeStore.factory(),
            dispatcher=DeliveryDispatcher.factory(),
            generator=SecretsCodeGenerator(),
            clock=SystemClock(),
            user_directory=default_user_directory,
            code_length=settings.MFA_SETTINGS['CODE_LENGTH'],
        )

    def issue_code(self, user: MfaUser) -> IssuedPasscode:
        """
        Creates a fresh code for the user, replacing any unconsumed one, and
        hands it to delivery. The code is committed before delivery starts.
        """
        if not user.id:
            raise PasscodeValidationError('cannot issue a passcode for a user without an id')

        code = self.generator.generate()
        self.store.replace_active(user_ref=user.id, code=code, now=self.clock.now())

        channel = self.dispatcher.send(user=user, code=code)
        logger.info(f'issued passcode for user {user.id} over {channel}')

        return IssuedPasscode(channel=channel)

    def issue_code_for(self, user_ref: str) -> IssuedPasscode:
        if self.user_directory is None:
            raise ValueError('no user directory configured')

        return self.issue_code(self.user_directory.get_user(user_ref))

    def verify_code(self, raw_code: str | None, user_ref: str | None = None) -> str:
        """
        Returns the user the code belongs to and consumes it. Every kind of
        miss raises the same PasscodeVerificationFailed.
        """
        code = self.normalize_code(raw_code)

        try:
            token = self.store.consume_by_code(code=code, now=self.clock.now(), user_ref=user_ref)
        except PasscodeNotFound:
            logger.info('passcode verification failed')
            raise PasscodeVerificationFailed()

        logger.info(f'passcode verified for user {token.user_ref}')
        return token.user_ref

    def normalize_code(self, raw_code: str | None) -> str:
        code = (raw_code or '').strip()
        if not code:
            raise PasscodeValidationError('a code is required')
        if not code.isascii() or not code.isdigit() or len(code) != self.code_length:
            raise PasscodeValidationError(f'a code is {self.code_length} digits')

        return code

    def sweep_expired(self) -> int:
        swept = self.store.sweep_expired(now=self.clock.now())
        logger.info(f'swept {swept} expired passcode(s)')
        return swept
