import re
import secrets

from .exceptions import BadRequest

OBJECT_ID_LENGTH = 24
_OBJECT_ID_RE = re.compile(r'[0-9a-f]{24}')


def new_object_id():
    return secrets.token_hex(OBJECT_ID_LENGTH // 2)


def is_object_id(value):
    return isinstance(value, str) and bool(_OBJECT_ID_RE.fullmatch(value))


def require_object_id(value, label='ID'):
    if not is_object_id(value):
        raise BadRequest(f'Invalid {label} format')
    return value
