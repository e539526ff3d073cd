import abc
import random
import secrets

from passcode import settings
from passcode.core.mfa.constants import MAX_CODE_LENGTH


class AbstractCodeGenerator(abc.ABC):
    """
    Produces fixed width numeric codes without a leading zero,
    e.g. a width of 6 gives values in [100000, 999999]
    """

    def __init__(self, length: int | None = None):
        self.length = length or settings.MFA_SETTINGS['CODE_LENGTH']
        if not 1 <= self.length <= MAX_CODE_LENGTH:
            raise ValueError(f'code length must be between 1 and {MAX_CODE_LENGTH}, got {self.length}')

    @property
    def range_start(self) -> int:
        return 10 ** (self.length - 1)

    @property
    def range_end(self) -> int:
        return 10**self.length - 1

    @abc.abstractmethod
    def generate(self) -> str: ...


class SecretsCodeGenerator(AbstractCodeGenerator):
    def generate(self) -> str:
        code = secrets.randbelow(self.range_end - self.range_start + 1) + self.range_start
        return str(code)


class RandomCodeGenerator(AbstractCodeGenerator):
    """
    Draws from an injected random source, seed it for reproducible tests.
    Not for production use.
    """

    def __init__(self, source: random.Random | None = None, length: int | None = None):
        self.source = source or random.Random()
        super().__init__(length=length)

    def generate(self) -> str:
        return str(self.source.randint(self.range_start, self.range_end))
