# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
ansible-db Error Classes.

All custom exceptions for clear error handling and exit codes.
Every load aborts on the first error; nothing here is retried.
"""

from __future__ import annotations

import enum


class ExitCode(enum.IntEnum):
    """Exit codes used by the ansible-db client."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    NOT_FOUND = 2
    PARSE_ERROR = 3
    VAULT_ERROR = 4
    KEYBOARD_INTERRUPT = 130


class AnsibleDbError(Exception):
    """Base exception for all ansible-db errors."""

    exit_code: int = ExitCode.GENERIC_ERROR

    def __init__(self, message: str, details: str | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}\n  Details: {self.details}"
        return self.message


class FormatError(AnsibleDbError):
    """Malformed inventory text: bad section header, bad key/value scan,
    undeclared group reference or wrong field count."""

    exit_code: int = ExitCode.PARSE_ERROR

    def __init__(
        self,
        message: str,
        line: int | None = None,
        source: str | None = None,
        details: str | None = None,
    ) -> None:
        self.line = line
        self.source = source
        self.reason = message
        location = ""
        if source:
            location = f" in {source}"
        if line:
            location += f" at line {line}"
        super().__init__(f"Inventory format error{location}: {message}", details)


class ConsistencyError(AnsibleDbError):
    """The inventory parsed but does not form a consistent hierarchy."""

    exit_code: int = ExitCode.PARSE_ERROR

    def __init__(
        self,
        message: str,
        name: str | None = None,
        line: int | None = None,
        details: str | None = None,
    ) -> None:
        self.name = name
        self.line = line
        if line:
            message = f"{message} (line {line})"
        super().__init__(f"Inventory consistency error: {message}", details)


class NotFoundError(AnsibleDbError, LookupError):
    """A host or group name is not present in the inventory."""

    exit_code: int = ExitCode.NOT_FOUND

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} {name} does not exist in the inventory")


class VaultError(AnsibleDbError):
    """Base class for vault errors, also raised for password sourcing."""

    exit_code: int = ExitCode.VAULT_ERROR


class CryptoFormatError(VaultError):
    """Bad envelope: unsupported header, malformed hex, bad padding or
    an unreadable decrypted document."""


class AuthenticationError(VaultError):
    """HMAC verification failed: wrong password or tampered envelope."""

    def __init__(self, message: str = "HMAC verification failed - wrong password?") -> None:
        super().__init__(message)


class PatternError(AnsibleDbError):
    """Invalid credential match rule or filter regular expression."""

    exit_code: int = ExitCode.PARSE_ERROR

    def __init__(self, message: str, pattern: str | None = None) -> None:
        self.pattern = pattern
        super().__init__(message)
