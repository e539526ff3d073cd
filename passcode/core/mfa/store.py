from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from passcode import settings
from passcode.core.mfa.domains import PasscodeTokenCreate, PasscodeTokenRead
from passcode.core.mfa.exceptions import PasscodeNotFound, PasscodePersistenceError
from passcode.core.mfa.models import PasscodeToken
from passcode.network.database.repository.exceptions import RepositoryObjectNotFound
from passcode.network.database.session import IsolatedSession


class PasscodeStore:
    """
    Persistence for passcode tokens.

    `invalidate_active` and `create` run in whatever session is current. The
    remaining operations use their own isolated session, writes are committed
    before they return so nothing is held open across delivery I/O.
    """

    def __init__(self, lifetime: timedelta | None = None, max_consume_attempts: int | None = None):
        self.lifetime = lifetime or settings.MFA_SETTINGS['CODE_LIFETIME']
        self.max_consume_attempts = max_consume_attempts or settings.MFA_SETTINGS['CONSUME_MAX_ATTEMPTS']

    @classmethod
    def factory(cls) -> 'PasscodeStore':
        return cls()

    def invalidate_active(self, user_ref: str, now: datetime) -> int:
        """
        Delete every unconsumed token for the user, expired or not
        """
        return PasscodeToken.delete(
            PasscodeToken.user_ref == user_ref,
            PasscodeToken.consumed_at.is_(None),
        )

    def create(self, user_ref: str, code: str, now: datetime) -> PasscodeTokenRead:
        return PasscodeToken.create(
            PasscodeTokenCreate(
                user_ref=user_ref,
                code=code,
                created_at=now,
                expires_at=now + self.lifetime,
            )
        )

    def replace_active(self, user_ref: str, code: str, now: datetime) -> PasscodeTokenRead:
        """
        Invalidate and create as one committed unit. A concurrent issuance
        for the same user that loses the race on the active token index
        surfaces as a retryable persistence error with nothing written.
        """
        try:
            with IsolatedSession(commit_on_success=True):
                invalidated = self.invalidate_active(user_ref=user_ref, now=now)
                token = self.create(user_ref=user_ref, code=code, now=now)
        except SQLAlchemyError as exc:
            logger.warning(f'failed to replace active passcode for {user_ref}: {exc}')
            raise PasscodePersistenceError(context={'user_ref': user_ref}) from exc

        if invalidated:
            logger.info(f'superseded {invalidated} passcode(s) for {user_ref}')

        return token

    def consume_by_code(self, code: str, now: datetime, user_ref: str | None = None) -> PasscodeTokenRead:
        """
        Marks the newest live token carrying `code` as consumed. The update is
        conditional on the token still being live so exactly one of several
        concurrent callers wins; losers re-select in case another live token
        shares the code.
        """
        try:
            with IsolatedSession(commit_on_success=True):
                for attempt in range(1, self.max_consume_attempts + 1):
                    candidate = self._newest_live(code=code, now=now, user_ref=user_ref)
                    consumed = PasscodeToken.bulk_update(
                        updates={'consumed_at': now},
                        clauses=[
                            PasscodeToken.id == candidate.id,
                            PasscodeToken.consumed_at.is_(None),
                            PasscodeToken.expires_at > now,
                        ],
                    )
                    if consumed == 1:
                        return candidate.model_copy(update={'consumed_at': now})

                    logger.debug(f'passcode {candidate.id} taken concurrently, attempt {attempt}')

                raise PasscodeNotFound('no passcode could be consumed')
        except SQLAlchemyError as exc:
            logger.warning(f'failed to consume passcode: {exc}')
            raise PasscodePersistenceError() from exc

    def _newest_live(self, code: str, now: datetime, user_ref: str | None = None) -> PasscodeTokenRead:
        clauses = [
            PasscodeToken.code == code,
            PasscodeToken.consumed_at.is_(None),
            PasscodeToken.expires_at > now,
        ]
        if user_ref is not None:
            clauses.append(PasscodeToken.user_ref == user_ref)

        try:
            # Last issued wins when codes collide, id only makes equal timestamps deterministic
            return PasscodeToken.latest(*clauses, by=[PasscodeToken.created_at, PasscodeToken.id])
        except RepositoryObjectNotFound:
            raise PasscodeNotFound('no live passcode matches')

    def sweep_expired(self, now: datetime) -> int:
        """
        Delete every token whose expiry has passed, consumed or not
        """
        try:
            with IsolatedSession(commit_on_success=True):
                return PasscodeToken.delete(PasscodeToken.expires_at <= now)
        except SQLAlchemyError as exc:
            raise PasscodePersistenceError() from exc

    def list_for_user(self, user_ref: str) -> list[PasscodeTokenRead]:
        # Fresh session so the read reflects what is committed right now
        with IsolatedSession():
            return PasscodeToken.list(PasscodeToken.user_ref == user_ref, ordering=['-created_at', '-id'])

    def count_active(self, user_ref: str, now: datetime) -> int:
        with IsolatedSession():
            return PasscodeToken.count(
                PasscodeToken.user_ref == user_ref,
                PasscodeToken.consumed_at.is_(None),
                PasscodeToken.expires_at > now,
            )
