"""
Credentials providers.

Each provider answers get_credentials() with a Credentials value or raises
CredentialError. They do not validate the credentials against the store;
the facade's probe only checks that key and secret are present.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import dotenv_values

from ...core.errors import CredentialError
from ...core.models import Credentials

logger = logging.getLogger(__name__)


DEFAULT_PROPERTIES_FILE = "AwsCredentials.properties"


class StaticCredentialsProvider:
    """Credentials fixed at construction. Mostly for settings and tests."""

    def __init__(
        self,
        access_key_id: str,
        secret_access_key: str,
        session_token: Optional[str] = None,
    ) -> None:
        self._credentials = Credentials(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
        )

    def get_credentials(self) -> Credentials:
        return self._credentials


class EnvironmentCredentialsProvider:
    """
    Reads the standard AWS environment variables on every call.

    AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY are required,
    AWS_SESSION_TOKEN is optional.
    """

    ACCESS_KEY_VARIABLE = "AWS_ACCESS_KEY_ID"
    SECRET_KEY_VARIABLE = "AWS_SECRET_ACCESS_KEY"
    SESSION_TOKEN_VARIABLE = "AWS_SESSION_TOKEN"

    def get_credentials(self) -> Credentials:
        access_key_id = os.environ.get(self.ACCESS_KEY_VARIABLE)
        secret_access_key = os.environ.get(self.SECRET_KEY_VARIABLE)

        if not access_key_id or not secret_access_key:
            raise CredentialError(
                f"{self.ACCESS_KEY_VARIABLE} and {self.SECRET_KEY_VARIABLE} must be set"
            )

        return Credentials(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=os.environ.get(self.SESSION_TOKEN_VARIABLE) or None,
        )


class PropertiesFileCredentialsProvider:
    """
    Reads accessKey and secretKey from a key=value properties file.

    File format:
        accessKey = AKIA...
        secretKey = ...

    The file is re-read on every call so rotated keys are picked up by the
    next probe.
    """

    ACCESS_KEY_PROPERTY = "accessKey"
    SECRET_KEY_PROPERTY = "secretKey"

    def __init__(self, path: Union[str, Path] = DEFAULT_PROPERTIES_FILE) -> None:
        self.path = Path(path)

    def get_credentials(self) -> Credentials:
        if not self.path.is_file():
            raise CredentialError(f"Credentials file not found: {self.path}")

        values = dotenv_values(self.path, interpolate=False, encoding="utf-8")
        access_key_id = values.get(self.ACCESS_KEY_PROPERTY)
        secret_access_key = values.get(self.SECRET_KEY_PROPERTY)

        if access_key_id is None or secret_access_key is None:
            raise CredentialError(
                f"{self.path} must define {self.ACCESS_KEY_PROPERTY} and {self.SECRET_KEY_PROPERTY}"
            )

        return Credentials(
            access_key_id=access_key_id.strip(),
            secret_access_key=secret_access_key.strip(),
        )


class SessionCredentialsProvider:
    """
    boto3's default credential chain: env, shared config files, SSO,
    instance metadata and so on.

    Credentials are frozen at call time. Refreshable credentials
    (assumed roles, SSO) are re-resolved on the next call.
    """

    def __init__(self, profile_name: Optional[str] = None) -> None:
        self.profile_name = profile_name

    def get_credentials(self) -> Credentials:
        try:
            import boto3
        except ImportError:
            raise ImportError(
                "boto3 is required for the session credentials provider. Install with: pip install boto3"
            )

        try:
            session = boto3.Session(profile_name=self.profile_name)
            resolved = session.get_credentials()
        except Exception as e:
            raise CredentialError(f"Could not resolve boto3 credentials: {e}") from e

        if resolved is None:
            raise CredentialError("boto3 found no credentials")

        frozen = resolved.get_frozen_credentials()

        logger.debug(
            "Resolved credentials from boto3 session",
            extra={"profile": self.profile_name, "method": getattr(resolved, "method", None)},
        )

        return Credentials(
            access_key_id=frozen.access_key,
            secret_access_key=frozen.secret_key,
            session_token=frozen.token,
        )
