from __future__ import annotations

from mysql.connector import errorcode, errors

from ..core.exceptions import StorageError, TransientStorageError

_TRANSIENT_ERRNOS = {
    errorcode.ER_LOCK_WAIT_TIMEOUT,
    errorcode.ER_LOCK_DEADLOCK,
    errorcode.CR_SERVER_GONE_ERROR,
    errorcode.CR_SERVER_LOST,
    errorcode.CR_CONN_HOST_ERROR,
}


def translate_mysql_error(exc: errors.Error) -> StorageError:
    """Map a mysql-connector error onto the domain storage taxonomy."""
    if isinstance(exc, (errors.OperationalError, errors.InterfaceError, errors.PoolError)):
        return TransientStorageError(f"Storage temporarily unavailable: {exc.msg}")
    if getattr(exc, "errno", None) in _TRANSIENT_ERRNOS:
        return TransientStorageError(f"Storage temporarily unavailable: {exc.msg}")
    return StorageError(f"Storage error: {exc.msg}")
