"""
Credentials providers.

Implements the CredentialsProvider protocol from core.facade.
"""

from .providers import (
    EnvironmentCredentialsProvider,
    PropertiesFileCredentialsProvider,
    SessionCredentialsProvider,
    StaticCredentialsProvider,
)

__all__ = [
    "EnvironmentCredentialsProvider",
    "PropertiesFileCredentialsProvider",
    "SessionCredentialsProvider",
    "StaticCredentialsProvider",
]
