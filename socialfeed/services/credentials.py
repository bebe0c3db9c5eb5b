"""Credential storage: secrets keyed by (server, type, username)."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from cryptography.fernet import InvalidToken
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from socialfeed.db.encryption import decrypt, encrypt
from socialfeed.models.credential import StoredCredential

logger = logging.getLogger(__name__)


class CredentialsType(str, Enum):
    OAUTH_ACCESS_TOKEN = "oauthAccessToken"
    OAUTH_ACCESS_TOKEN_SECRET = "oauthAccessTokenSecret"


@dataclass(frozen=True)
class Credentials:
    type: CredentialsType
    username: str
    secret: str


class CredentialsError(Exception):
    """Raised when the credential backend cannot complete an operation."""


class CredentialsNotFoundError(CredentialsError):
    """Raised when no secret is stored for the requested key."""


class CredentialsStore(Protocol):
    """Key-value secret store used to link and rehydrate provider accounts."""

    async def store_credentials(self, credentials: Credentials, server: str) -> None:
        """Insert or replace the secret for (server, credentials.type, credentials.username)."""
        ...

    async def retrieve_credentials(self, type: CredentialsType, server: str, username: str) -> Credentials:
        """Return stored credentials. Raises CredentialsNotFoundError when absent."""
        ...

    async def remove_credentials(self, type: CredentialsType, server: str, username: str) -> None:
        """Delete stored credentials; missing entries are ignored."""
        ...


class MemoryCredentialsStore:
    """Process-local store. Secrets are lost when the process exits."""

    def __init__(self) -> None:
        self._secrets: dict[tuple[str, CredentialsType, str], str] = {}

    async def store_credentials(self, credentials: Credentials, server: str) -> None:
        self._secrets[(server, credentials.type, credentials.username)] = credentials.secret

    async def retrieve_credentials(self, type: CredentialsType, server: str, username: str) -> Credentials:
        try:
            secret = self._secrets[(server, type, username)]
        except KeyError:
            raise CredentialsNotFoundError(f"No {type.value} for {username}@{server}") from None
        return Credentials(type=type, username=username, secret=secret)

    async def remove_credentials(self, type: CredentialsType, server: str, username: str) -> None:
        self._secrets.pop((server, type, username), None)


class SQLCredentialsStore:
    """Database-backed store; secrets are Fernet-encrypted at rest."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], fernet_key: str):
        self._session_factory = session_factory
        self._fernet_key = fernet_key

    @staticmethod
    def _key_clause(type: CredentialsType, server: str, username: str):
        return (
            StoredCredential.server == server,
            StoredCredential.type == type.value,
            StoredCredential.username == username,
        )

    async def store_credentials(self, credentials: Credentials, server: str) -> None:
        try:
            ciphertext = encrypt(credentials.secret, self._fernet_key)
        except ValueError as e:
            raise CredentialsError(f"Cannot encrypt {credentials.type.value} for {credentials.username}") from e

        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(StoredCredential).where(
                        *self._key_clause(credentials.type, server, credentials.username)
                    )
                )
                row = result.scalar_one_or_none()
                if row:
                    row.secret = ciphertext
                else:
                    session.add(
                        StoredCredential(
                            server=server,
                            type=credentials.type.value,
                            username=credentials.username,
                            secret=ciphertext,
                        )
                    )
                await session.commit()
        except SQLAlchemyError as e:
            raise CredentialsError(f"Failed to store {credentials.type.value} for {credentials.username}") from e

        logger.debug("Stored %s for %s@%s", credentials.type.value, credentials.username, server)

    async def retrieve_credentials(self, type: CredentialsType, server: str, username: str) -> Credentials:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(StoredCredential).where(*self._key_clause(type, server, username))
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise CredentialsError(f"Failed to read {type.value} for {username}") from e

        if row is None:
            raise CredentialsNotFoundError(f"No {type.value} for {username}@{server}")

        try:
            secret = decrypt(row.secret, self._fernet_key)
        except (InvalidToken, ValueError) as e:
            raise CredentialsError(f"Stored {type.value} for {username} cannot be decrypted") from e

        return Credentials(type=type, username=username, secret=secret)

    async def remove_credentials(self, type: CredentialsType, server: str, username: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(StoredCredential).where(*self._key_clause(type, server, username))
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise CredentialsError(f"Failed to remove {type.value} for {username}") from e
