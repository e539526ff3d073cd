from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from passcode.core.mfa.exceptions import PasscodeNotFound, PasscodePersistenceError
from passcode.core.mfa.models import PasscodeToken
from passcode.core.mfa.store import PasscodeStore
from passcode.network.database.session import IsolatedSession


@pytest.fixture
def store() -> PasscodeStore:
    return PasscodeStore(lifetime=timedelta(minutes=10), max_consume_attempts=3)


def test_replace_active_sets_expiry_from_now(store, clock):
    token = store.replace_active(user_ref='usr-a', code='123456', now=clock.now())

    assert token.id.startswith('pct-')
    assert token.created_at == clock.now()
    assert token.expires_at == clock.now() + timedelta(minutes=10)
    assert token.consumed_at is None
    assert not token.is_expired(clock.now())
    assert token.is_expired(token.expires_at)


def test_replace_active_keeps_a_single_active_token(store, clock):
    first = store.replace_active(user_ref='usr-a', code='111111', now=clock.now())
    clock.advance(seconds=30)
    second = store.replace_active(user_ref='usr-a', code='222222', now=clock.now())

    tokens = store.list_for_user('usr-a')
    assert [token.id for token in tokens] == [second.id]
    assert first.id != second.id
    assert store.count_active('usr-a', now=clock.now()) == 1


def test_replace_active_also_removes_expired_unconsumed_tokens(store, clock):
    store.replace_active(user_ref='usr-a', code='111111', now=clock.now())
    clock.advance(minutes=30)
    store.replace_active(user_ref='usr-a', code='222222', now=clock.now())

    assert [token.code for token in store.list_for_user('usr-a')] == ['222222']


def test_replace_active_keeps_consumed_history(store, clock):
    store.replace_active(user_ref='usr-a', code='111111', now=clock.now())
    store.consume_by_code('111111', now=clock.advance(minutes=1))
    store.replace_active(user_ref='usr-a', code='222222', now=clock.advance(minutes=1))

    tokens = store.list_for_user('usr-a')
    assert [token.code for token in tokens] == ['222222', '111111']
    assert tokens[1].is_consumed


def test_replace_active_leaves_other_users_alone(store, clock):
    store.replace_active(user_ref='usr-a', code='111111', now=clock.now())
    store.replace_active(user_ref='usr-b', code='222222', now=clock.now())

    assert store.count_active('usr-a', now=clock.now()) == 1
    assert store.count_active('usr-b', now=clock.now()) == 1


def test_consume_marks_token_once(store, clock):
    issued = store.replace_active(user_ref='usr-a', code='123456', now=clock.now())
    now = clock.advance(minutes=1)

    consumed = store.consume_by_code('123456', now=now)

    assert consumed.id == issued.id
    assert consumed.consumed_at == now
    assert store.list_for_user('usr-a')[0].consumed_at == now
    with pytest.raises(PasscodeNotFound):
        store.consume_by_code('123456', now=clock.advance(seconds=1))


def test_unknown_code_is_not_found(store, clock):
    store.replace_active(user_ref='usr-a', code='123456', now=clock.now())

    with pytest.raises(PasscodeNotFound):
        store.consume_by_code('654321', now=clock.now())


def test_expiry_is_exclusive(store, clock):
    issued = store.replace_active(user_ref='usr-a', code='123456', now=clock.now())

    with pytest.raises(PasscodeNotFound):
        store.consume_by_code('123456', now=issued.expires_at)

    consumed = store.consume_by_code('123456', now=issued.expires_at - timedelta(seconds=1))
    assert consumed.id == issued.id


def test_newest_token_wins_when_codes_collide(store, clock):
    store.replace_active(user_ref='usr-a', code='123456', now=clock.now())
    store.replace_active(user_ref='usr-b', code='123456', now=clock.advance(seconds=5))

    consumed = store.consume_by_code('123456', now=clock.advance(seconds=5))
    assert consumed.user_ref == 'usr-b'

    # The older one is still live and goes next
    assert store.consume_by_code('123456', now=clock.now()).user_ref == 'usr-a'


def test_equal_timestamps_resolve_by_id(store, clock):
    first = store.replace_active(user_ref='usr-a', code='123456', now=clock.now())
    second = store.replace_active(user_ref='usr-b', code='123456', now=clock.now())

    consumed = store.consume_by_code('123456', now=clock.now())
    assert consumed.id == max(first.id, second.id)


def test_user_scoped_consumption_ignores_other_users(store, clock):
    store.replace_active(user_ref='usr-a', code='123456', now=clock.now())
    store.replace_active(user_ref='usr-b', code='123456', now=clock.advance(seconds=5))

    consumed = store.consume_by_code('123456', now=clock.now(), user_ref='usr-a')
    assert consumed.user_ref == 'usr-a'

    with pytest.raises(PasscodeNotFound):
        store.consume_by_code('123456', now=clock.now(), user_ref='usr-a')


def test_sweep_removes_expired_tokens_only(store, clock):
    store.replace_active(user_ref='usr-a', code='111111', now=clock.now())
    store.consume_by_code('111111', now=clock.advance(minutes=1))
    store.replace_active(user_ref='usr-b', code='222222', now=clock.now())
    store.replace_active(user_ref='usr-c', code='333333', now=clock.advance(minutes=8))

    # usr-a and usr-b expire at +10m and +11m, usr-c at +19m
    swept = store.sweep_expired(now=clock.advance(minutes=4))

    assert swept == 2
    assert store.list_for_user('usr-a') == []
    assert store.list_for_user('usr-b') == []
    assert len(store.list_for_user('usr-c')) == 1


def test_database_refuses_two_unconsumed_tokens_for_a_user(store, clock):
    with pytest.raises(IntegrityError):
        with IsolatedSession(commit_on_success=True):
            store.create(user_ref='usr-a', code='111111', now=clock.now())
            store.create(user_ref='usr-a', code='222222', now=clock.now())

    assert store.list_for_user('usr-a') == []


def test_failed_replace_leaves_previous_token_in_place(store, clock, monkeypatch):
    original = store.replace_active(user_ref='usr-a', code='111111', now=clock.now())

    def broken_create(**kwargs):
        raise OperationalError('INSERT INTO passcodetoken', {}, Exception('database is locked'))

    monkeypatch.setattr(store, 'create', broken_create)

    with pytest.raises(PasscodePersistenceError) as exc_info:
        store.replace_active(user_ref='usr-a', code='222222', now=clock.advance(seconds=30))

    assert exc_info.value.retryable is True
    assert [token.id for token in store.list_for_user('usr-a')] == [original.id]


def test_consume_retries_are_bounded(store, clock, monkeypatch):
    store.replace_active(user_ref='usr-a', code='123456', now=clock.now())
    # Every conditional update loses, as if another verifier always got there first
    monkeypatch.setattr(PasscodeToken, 'bulk_update', classmethod(lambda cls, updates, clauses: 0))

    with pytest.raises(PasscodeNotFound):
        store.consume_by_code('123456', now=clock.now())
