"""Exceptions raised by the settings store."""


class SettingsError(Exception):
    """Base class for all settings store errors."""


class KeyConflictError(SettingsError):
    """An entry with the same key already exists."""

    def __init__(self, key: int) -> None:
        super().__init__(f"An entry with key {key} already exists")
        self.key = key


class TypeCoercionError(SettingsError):
    """A stored value cannot be parsed as the requested type."""

    def __init__(self, key: int, value: str, as_type: type) -> None:
        super().__init__(f"Value {value!r} of key {key} is not a valid {as_type.__name__}")
        self.key = key
        self.value = value
        self.as_type = as_type


class StoreIOError(SettingsError):
    """The backing database file cannot be created, opened or written."""

    def __init__(self, path: str, reason: str = "") -> None:
        message = f"Settings database {path} is not accessible"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path
        self.reason = reason
