import abc
import threading

from passcode.core.mfa.domains import MfaUser
from passcode.core.mfa.exceptions import MfaUserNotFound


class UserDirectory(abc.ABC):
    """
    Read-only lookup into the system that owns user accounts
    """

    @abc.abstractmethod
    def get_user(self, user_ref: str) -> MfaUser: ...


class InMemoryUserDirectory(UserDirectory):
    """
    Directory for development and tests, seeded with `add`
    """

    def __init__(self, users: list[MfaUser] | None = None):
        self._lock = threading.Lock()
        self._users: dict[str, MfaUser] = {}
        for user in users or []:
            self.add(user)

    def add(self, user: MfaUser) -> MfaUser:
        if not user.id:
            raise ValueError('users need an id to be looked up')
        with self._lock:
            self._users[user.id] = user
        return user

    def get_user(self, user_ref: str) -> MfaUser:
        with self._lock:
            user = self._users.get(user_ref)
        if user is None:
            raise MfaUserNotFound(context={'user_ref': user_ref})

        return user


# Shared by the http layer until a real account system is wired in
default_user_directory = InMemoryUserDirectory()
