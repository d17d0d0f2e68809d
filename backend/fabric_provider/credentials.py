"""
AWS credential resolution for the connection accepter.

Credentials come from the first source in the chain that yields both an
access key and a secret key:

1. static values from the resource configuration
2. environment (AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY)
3. shared credentials file, using the configured profile
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from botocore.credentials import (
    CredentialProvider,
    Credentials,
    EnvProvider,
    SharedCredentialProvider,
)
from botocore.exceptions import BotoCoreError

from fabric_provider.exceptions import CredentialResolutionError

logger = logging.getLogger(__name__)

DEFAULT_SHARED_CREDENTIALS_FILE = "~/.aws/credentials"


@dataclass(frozen=True)
class AWSCredentials:
    access_key_id: str
    secret_access_key: str
    session_token: str = ""
    source: str = ""


class StaticCredentialProvider(CredentialProvider):
    """Credentials given directly in the resource configuration."""

    METHOD = "static"

    def __init__(self, access_key: str | None, secret_key: str | None):
        self._access_key = access_key or ""
        self._secret_key = secret_key or ""

    def load(self) -> Credentials | None:
        if not self._access_key or not self._secret_key:
            return None
        return Credentials(self._access_key, self._secret_key, method=self.METHOD)


def shared_credentials_file() -> str:
    path = os.environ.get("AWS_SHARED_CREDENTIALS_FILE") or DEFAULT_SHARED_CREDENTIALS_FILE
    return os.path.expanduser(path)


def build_provider_chain(
    access_key: str | None, secret_key: str | None, profile: str | None
) -> list[CredentialProvider]:
    profile_name = profile or os.environ.get("AWS_PROFILE") or "default"
    return [
        StaticCredentialProvider(access_key, secret_key),
        EnvProvider(),
        SharedCredentialProvider(shared_credentials_file(), profile_name=profile_name),
    ]


def resolve_aws_credentials(
    access_key: str | None = None,
    secret_key: str | None = None,
    profile: str | None = None,
) -> AWSCredentials:
    """
    Resolve an AWS key pair from the provider chain.

    Raises:
        CredentialResolutionError: no source produced a complete key pair
    """
    problems: list[str] = []
    for provider in build_provider_chain(access_key, secret_key, profile):
        try:
            creds = provider.load()
        except BotoCoreError as e:
            # Partial pair or unreadable file; the next source may still work
            logger.debug("Credential source %s skipped: %s", provider.METHOD, e)
            problems.append(f"{provider.METHOD}: {e}")
            continue

        if creds is None:
            continue
        frozen = creds.get_frozen_credentials()
        if not frozen.access_key or not frozen.secret_key:
            problems.append(f"{provider.METHOD}: incomplete key pair")
            continue

        logger.debug("Resolved AWS credentials from %s", provider.METHOD)
        return AWSCredentials(
            access_key_id=frozen.access_key,
            secret_access_key=frozen.secret_key,
            session_token=frozen.token or "",
            source=provider.METHOD,
        )

    raise CredentialResolutionError(
        "no valid AWS credential providers in chain",
        {"profile": profile or "", "details": "; ".join(problems) or "none found"},
    )
