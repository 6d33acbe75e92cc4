from __future__ import annotations

# produce_api/errors.py


class ProduceError(Exception):
    """Base class for errors raised by this service."""


class ConfigError(ProduceError):
    pass


class ValidationError(ProduceError):
    """Malformed or missing input. Routes turn it into a 400."""


class StorageError(ProduceError):
    """The storage engine failed. Not retried; routes turn it into a 500."""


class StorageUnavailable(StorageError):
    pass


class StorageWriteError(StorageError):
    pass
