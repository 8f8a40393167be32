"""
ansible-db Engine Module

Error taxonomy, vault decoding and credential matching.
"""

from ansible_db.engine.errors import (
    AnsibleDbError,
    AuthenticationError,
    ConsistencyError,
    CryptoFormatError,
    ExitCode,
    FormatError,
    NotFoundError,
    PatternError,
    VaultError,
)
from ansible_db.engine.credentials import (
    Credential,
    CredentialMatcher,
    DefaultRule,
    MatchRule,
    PatternRule,
)
from ansible_db.engine.vault import (
    DerivedKey,
    VaultEnvelope,
    VaultHeader,
    VaultLib,
    VaultSecret,
)

__all__ = [
    'AnsibleDbError',
    'AuthenticationError',
    'ConsistencyError',
    'CryptoFormatError',
    'ExitCode',
    'FormatError',
    'NotFoundError',
    'PatternError',
    'VaultError',
    'Credential',
    'CredentialMatcher',
    'DefaultRule',
    'MatchRule',
    'PatternRule',
    'DerivedKey',
    'VaultEnvelope',
    'VaultHeader',
    'VaultLib',
    'VaultSecret',
]
