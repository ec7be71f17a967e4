'''Access control for election administration.

Identities are opaque hashable values authenticated outside this library.
Administrative operations are guarded by :func:`admin_only`, which compares
the calling identity with the election's administrator before the operation
body runs.
'''

from functools import wraps
from typing import Any, Hashable


class Unauthorized(PermissionError):
    '''The caller is not allowed to perform the operation.

    :param caller: Identity of the rejected caller.
    :param operation: Name of the operation attempted.
    '''
    def __init__(self, caller: Any, operation: str = None):
        self.caller = caller
        self.operation = operation
        message = f'only the administrator can call this function: {caller!r}'
        if operation:
            message += f' attempted {operation}'
        super().__init__(message)


def check_identity(identity: Any) -> Hashable:
    '''Return the identity if it can be used as a caller identity.

    :raises TypeError: If the identity is None or unhashable.
    '''
    if identity is None:
        raise TypeError('caller identity must not be None')
    try:
        hash(identity)
    except TypeError as e:
        raise TypeError(f'caller identity must be hashable: {identity!r}') from e
    return identity


def admin_only(method):
    '''Restrict an election method to the election's administrator.

    The decorated method must take the calling identity as its first
    argument after ``self``; the instance must expose an ``administrator``
    attribute.
    '''
    @wraps(method)
    def wrapper(self, caller, *args, **kwargs):
        if caller != self.administrator:
            raise Unauthorized(caller, method.__name__)
        return method(self, caller, *args, **kwargs)
    return wrapper
