#!/usr/bin/env python3


class FocusBlockError(Exception):
    """Base class for every error focusblock reports to the user."""


class StorageError(FocusBlockError):
    pass


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    pass


class HostsError(FocusBlockError):
    pass


class HostsReadError(HostsError):
    pass


class HostsWriteError(HostsError):
    pass


class LockError(FocusBlockError):
    """Another focusblock process holds the state lock."""


class PrivilegeError(FocusBlockError):
    pass


class DnsFlushWarning(FocusBlockError, UserWarning):
    """DNS cache flush failed. Callers log it and carry on."""


class InvalidDomainError(FocusBlockError):
    pass
