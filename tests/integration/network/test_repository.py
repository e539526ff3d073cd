from datetime import datetime, timedelta

import pytest

from passcode.core.mfa.domains import PasscodeTokenCreate
from passcode.core.mfa.models import PasscodeToken
from passcode.network.database.repository.exceptions import (
    PreventingModelTruncation,
    RepositoryObjectNotFound,
)

NOW = datetime(2025, 1, 1, 12)


def _token(user_ref: str, code: str, created_at: datetime) -> PasscodeTokenCreate:
    return PasscodeTokenCreate(
        user_ref=user_ref,
        code=code,
        created_at=created_at,
        expires_at=created_at + timedelta(minutes=10),
    )


def test_delete_without_clauses_is_refused():
    PasscodeToken.create(_token('usr-a', '111111', NOW))

    with pytest.raises(PreventingModelTruncation):
        PasscodeToken.delete()

    assert PasscodeToken.count() == 1


def test_bulk_update_without_clauses_is_refused():
    with pytest.raises(PreventingModelTruncation):
        PasscodeToken.bulk_update(updates={'consumed_at': NOW}, clauses=[])


def test_bulk_update_reports_matched_rows():
    token = PasscodeToken.create(_token('usr-a', '111111', NOW))

    clauses = [PasscodeToken.id == token.id, PasscodeToken.consumed_at.is_(None)]
    assert PasscodeToken.bulk_update(updates={'consumed_at': NOW}, clauses=clauses) == 1
    assert PasscodeToken.bulk_update(updates={'consumed_at': NOW}, clauses=clauses) == 0


def test_latest_orders_by_the_given_columns():
    PasscodeToken.create(_token('usr-a', '111111', NOW))
    newest = PasscodeToken.create(_token('usr-b', '222222', NOW + timedelta(minutes=1)))

    assert PasscodeToken.latest(by=PasscodeToken.created_at).id == newest.id
    with pytest.raises(RepositoryObjectNotFound):
        PasscodeToken.latest(PasscodeToken.code == '999999', by=PasscodeToken.created_at)


def test_list_accepts_string_ordering():
    PasscodeToken.create(_token('usr-a', '111111', NOW))
    PasscodeToken.create(_token('usr-a', '222222', NOW + timedelta(minutes=1)))

    codes = [token.code for token in PasscodeToken.list(PasscodeToken.user_ref == 'usr-a', ordering=['-created_at'])]
    assert codes == ['222222', '111111']
