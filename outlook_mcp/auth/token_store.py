"""
Token Store Module

This module persists the OAuth credential record on disk, optionally encrypted.
"""

import base64
import os
from pathlib import Path
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import ValidationError as PydanticValidationError

from outlook_mcp.models import CredentialRecord
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)


def derive_encryption_key(secret: str) -> bytes:
    """
    Derive a Fernet key from a passphrase using PBKDF2.

    Args:
        secret (str): The configured passphrase.

    Returns:
        bytes: A url-safe base64 encoded 32-byte key.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=b"outlook-mcp-token-salt",
        iterations=100000,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode()))


class TokenStore:
    """
    Durable storage for a single credential record.

    Read failures of any kind are reported as "no record" so callers can carry on
    as if they had never authenticated.
    """

    def __init__(self, path: Union[str, Path], encryption_key: Optional[str] = None) -> None:
        self.path = Path(os.path.expanduser(str(path)))
        if encryption_key:
            self.fernet: Optional[Fernet] = Fernet(derive_encryption_key(encryption_key))
        else:
            logger.warning("No encryption key found, tokens will not be encrypted")
            self.fernet = None

    def load(self) -> Optional[CredentialRecord]:
        """
        Load the stored credential record.

        Returns:
            Optional[CredentialRecord]: The record, or None if it is missing,
            unreadable or malformed.
        """
        if not self.path.exists():
            logger.info(f"No token found at {self.path}")
            return None

        try:
            raw = self.path.read_text()
            if self.fernet:
                raw = self.fernet.decrypt(raw.encode()).decode()
            record = CredentialRecord.model_validate_json(raw)
        except (OSError, InvalidToken, PydanticValidationError, ValueError) as e:
            logger.error(f"Failed to read token from {self.path}: {e}")
            return None

        if not record.access_token:
            logger.warning(f"Token file {self.path} has no access token")
            return None
        return record

    def save(self, record: CredentialRecord) -> bool:
        """
        Persist the credential record.

        Args:
            record (CredentialRecord): The record to write.

        Returns:
            bool: True if the record was written.
        """
        payload = record.model_dump_json(indent=2)
        if self.fernet:
            payload = self.fernet.encrypt(payload.encode()).decode()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_text(payload)
            os.chmod(tmp_path, 0o600)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to store token at {self.path}: {e}")
            return False

        logger.info(f"Stored token at {self.path}")
        return True

    def clear(self) -> None:
        """Remove the stored credential record."""
        if self.path.exists():
            try:
                self.path.unlink()
                logger.info(f"Cleared token at {self.path}")
            except OSError as e:
                logger.error(f"Failed to clear token at {self.path}: {e}")

    def exists(self) -> bool:
        return self.path.exists()
