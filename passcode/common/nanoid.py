import secrets
import string
from typing import TypeAlias

# Primary keys look like: pct-XSqS5h9vFTSgP
NanoIdType: TypeAlias = str

_DEFAULT_CHAR_POOL = string.digits + string.ascii_letters


def generate_custom_nanoid(size: int = 8, char_pool: str | None = None) -> NanoIdType:
    """
    Generate a short random url safe id
    """
    char_pool = char_pool or _DEFAULT_CHAR_POOL
    return ''.join(secrets.choice(char_pool) for _ in range(size))


class NanoId:
    """
    ID used as primary key
    """

    _CHAR_SIZE = 13

    @classmethod
    def gen(cls, abbrev: str | None = None) -> NanoIdType:
        nano_id = generate_custom_nanoid(size=cls._CHAR_SIZE)
        if abbrev:
            nano_id = f'{abbrev}-{nano_id}'

        return nano_id
