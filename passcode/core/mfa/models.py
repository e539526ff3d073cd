from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from passcode.common.model import BaseModel
from passcode.core.mfa.constants import MAX_CODE_LENGTH
from passcode.core.mfa.domains import PasscodeTokenCreate, PasscodeTokenRead


class PasscodeToken(BaseModel[PasscodeTokenRead, PasscodeTokenCreate]):
    # Weak reference, users live in another system
    user_ref: Mapped[str] = mapped_column(String(length=50), nullable=False)
    code: Mapped[str] = mapped_column(String(length=MAX_CODE_LENGTH), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    consumed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, default=None)

    __pk_abbrev__ = 'pct'
    __read_domain__ = PasscodeTokenRead
    __create_domain__ = PasscodeTokenCreate

    __table_args__ = (
        Index('ix_passcodetoken_lookup', 'code', 'consumed_at', 'expires_at'),
        Index('ix_passcodetoken_expires_at', 'expires_at'),
        # At most one unconsumed token per user
        Index(
            'uq_passcodetoken_active_user_ref',
            'user_ref',
            unique=True,
            sqlite_where=text('consumed_at IS NULL'),
            postgresql_where=text('consumed_at IS NULL'),
        ),
    )
