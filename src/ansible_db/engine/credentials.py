# Copyright (c) 2024 ansible-db Contributors
# MIT License

"""
Vault Credentials

Credential records decoded from a vault and the matcher that selects the
credentials applicable to a host name.

A record either carries a regular expression (``PatternRule``) or is a
default credential (``DefaultRule``), never both and never neither.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from loguru import logger

from ansible_db.engine.errors import CryptoFormatError, PatternError

MASK = "********"


@dataclass(frozen=True)
class PatternRule:
    """Applies to host names the regular expression matches."""

    pattern: str
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.pattern:
            raise PatternError("invalid vault entry, non-default and empty regex pattern")
        try:
            compiled = re.compile(self.pattern)
        except re.error as e:
            raise PatternError(
                f"invalid vault entry, regex compilation for '{self.pattern}' failed: {e}",
                self.pattern,
            ) from e
        object.__setattr__(self, 'regex', compiled)

    def matches(self, name: str) -> bool:
        return self.regex.search(name) is not None


@dataclass(frozen=True)
class DefaultRule:
    """Applies to every host, after all pattern matches."""

    def matches(self, name: str) -> bool:
        return True


MatchRule = Union[PatternRule, DefaultRule]


@dataclass(frozen=True)
class Credential:
    """A single credential record from the vault."""

    rule: MatchRule
    description: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    enabled_password: str = field(default="", repr=False)
    priority: int = 0

    @property
    def is_default(self) -> bool:
        return isinstance(self.rule, DefaultRule)

    @property
    def match_pattern(self) -> Optional[str]:
        if isinstance(self.rule, PatternRule):
            return self.rule.pattern
        return None

    @classmethod
    def from_dict(cls, record: Mapping[str, Any], index: int = 0) -> Credential:
        """
        Build a credential from one entry of the decrypted document.

        Args:
            record: Mapping with ``description``, ``regex``, ``username``,
                ``password``, ``password_enable``, ``priority``, ``default``
            index: Position of the entry, for error messages

        Raises:
            PatternError: Both or neither of ``regex``/``default`` are set,
                or the regex does not compile
            CryptoFormatError: A field has the wrong type
        """
        if not isinstance(record, Mapping):
            raise CryptoFormatError(f"invalid vault entry #{index}: expected a mapping")

        regex = _text(record, 'regex', index)
        is_default = record.get('default', False)
        if not isinstance(is_default, bool):
            raise CryptoFormatError(f"invalid vault entry #{index}: 'default' must be a boolean")
        if is_default and regex:
            raise PatternError("invalid vault entry, default and non-empty regex pattern", regex)
        if not is_default and not regex:
            raise PatternError("invalid vault entry, non-default and empty regex pattern")

        priority = record.get('priority', 0)
        if priority is None:
            priority = 0
        if isinstance(priority, bool) or not isinstance(priority, int):
            raise CryptoFormatError(f"invalid vault entry #{index}: 'priority' must be an integer")

        rule: MatchRule = DefaultRule() if is_default else PatternRule(regex)
        return cls(
            rule=rule,
            description=_text(record, 'description', index),
            username=_text(record, 'username', index),
            password=_text(record, 'password', index),
            enabled_password=_text(record, 'password_enable', index),
            priority=priority,
        )

    def to_dict(self, reveal: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for JSON output. Secrets are masked
        unless ``reveal`` is set."""
        result: Dict[str, Any] = {
            "description": self.description,
            "username": self.username,
            "password": self.password if reveal else _mask(self.password),
            "password_enable": self.enabled_password if reveal else _mask(self.enabled_password),
            "priority": self.priority,
            "default": self.is_default,
        }
        if self.match_pattern is not None:
            result["regex"] = self.match_pattern
        return result

    def __str__(self) -> str:
        return (
            f"username={self.username}, password={_mask(self.password)}, "
            f"enabled_password={_mask(self.enabled_password)}, priority={self.priority}, "
            f"default={str(self.is_default).lower()}, description={self.description}"
        )


class CredentialMatcher:
    """Select the credentials that apply to a host name."""

    def __init__(self, credentials: Iterable[Credential]):
        self.credentials: List[Credential] = list(credentials)

    def match(self, name: str) -> List[Credential]:
        """
        Return credentials applicable to ``name``.

        Pattern records whose regex matches come first, ordered by priority,
        followed by every default record ordered by priority. Both sorts are
        stable, so equal priorities keep declaration order. An empty result
        means no credential applies.
        """
        matched = [c for c in self.credentials if not c.is_default and c.rule.matches(name)]
        matched.sort(key=lambda c: c.priority)
        defaults = [c for c in self.credentials if c.is_default]
        defaults.sort(key=lambda c: c.priority)
        logger.debug("host {}: {} pattern credential(s), {} default(s)", name, len(matched), len(defaults))
        return matched + defaults

    def __len__(self) -> int:
        return len(self.credentials)


def _text(record: Mapping[str, Any], key: str, index: int) -> str:
    value = record.get(key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise CryptoFormatError(f"invalid vault entry #{index}: '{key}' must be a scalar")
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _mask(value: str) -> str:
    return MASK if value else ""
