# dc_certificates/services/secure_zip_creator.py
"""
AES-256 encrypted ZIP archives of a generated certificate hierarchy.

Private keys leave the service only inside these archives.
"""

import io
import logging
import secrets
import string
from typing import Mapping, Optional, Tuple, Union

import pyzipper

logger = logging.getLogger(__name__)


class SecureZipCreatorError(Exception):
    """Base exception for SecureZipCreator operations"""
    pass


class ZipCreationError(SecureZipCreatorError):
    """Raised when ZIP creation fails"""
    pass


class PasswordGenerationError(SecureZipCreatorError):
    """Raised when password generation fails"""
    pass


class ZipValidationError(SecureZipCreatorError):
    """Raised when ZIP validation fails"""
    pass


class SecureZipCreator:
    """
    Creates password-protected ZIP files with WinZip AES-256 encryption (pyzipper).
    """

    MIN_PASSWORD_LENGTH = 16
    DEFAULT_PASSWORD_LENGTH = 20
    SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
    PASSWORD_CHARSET = string.ascii_letters + string.digits + SPECIAL_CHARACTERS

    def generate_secure_password(self, length: Optional[int] = None) -> str:
        """
        Generate a cryptographically secure random password.

        Args:
            length: Password length (minimum 16, default 20)

        Returns:
            Password containing lowercase, uppercase, digit and special characters

        Raises:
            PasswordGenerationError: If the requested length is too short
        """
        if length is None:
            length = self.DEFAULT_PASSWORD_LENGTH

        if length < self.MIN_PASSWORD_LENGTH:
            raise PasswordGenerationError(
                f"Password length must be at least {self.MIN_PASSWORD_LENGTH} characters"
            )

        password_chars = [
            secrets.choice(string.ascii_lowercase),
            secrets.choice(string.ascii_uppercase),
            secrets.choice(string.digits),
            secrets.choice(self.SPECIAL_CHARACTERS),
        ]
        password_chars.extend(secrets.choice(self.PASSWORD_CHARSET) for _ in range(length - 4))

        # Fisher-Yates with the secrets generator
        for i in range(len(password_chars) - 1, 0, -1):
            j = secrets.randbelow(i + 1)
            password_chars[i], password_chars[j] = password_chars[j], password_chars[i]

        logger.debug(f"Generated secure password of length {length}")
        return "".join(password_chars)

    def create_protected_zip(
        self,
        files: Mapping[str, Union[bytes, str]],
        password: Optional[str] = None
    ) -> Tuple[bytes, str]:
        """
        Create an AES-256 encrypted ZIP in memory.

        Args:
            files: Mapping of archive path to content
            password: Optional password (a secure one is generated if omitted)

        Returns:
            Tuple of (zip_data_bytes, password_used)

        Raises:
            ZipCreationError: If there is nothing to archive or pyzipper fails
        """
        if not files:
            raise ZipCreationError("No files provided for ZIP creation")

        if password is None:
            password = self.generate_secure_password()

        buffer = io.BytesIO()
        try:
            with pyzipper.AESZipFile(
                buffer,
                "w",
                compression=pyzipper.ZIP_DEFLATED,
                encryption=pyzipper.WZ_AES
            ) as zf:
                zf.setpassword(password.encode("utf-8"))
                zf.setencryption(pyzipper.WZ_AES, nbits=256)

                for filename, content in files.items():
                    if isinstance(content, str):
                        content = content.encode("utf-8")
                    zf.writestr(filename, content)
                    logger.debug(f"Added encrypted file '{filename}' ({len(content)} bytes)")
        except (OSError, ValueError, RuntimeError) as e:
            logger.error(f"AES-256 ZIP creation failed: {e}")
            raise ZipCreationError(f"Failed to create encrypted ZIP: {e}") from e

        zip_data = buffer.getvalue()
        logger.info(f"Created AES-256 encrypted ZIP with {len(files)} files ({len(zip_data)} bytes)")
        return zip_data, password

    def validate_zip_integrity(self, zip_data: bytes, password: str) -> bool:
        """
        Check that every member of the archive decrypts with the password.

        Returns:
            True if the archive opens, False on a wrong password

        Raises:
            ZipValidationError: If input is missing or the archive is corrupt
        """
        if not zip_data:
            raise ZipValidationError("No ZIP data provided for validation")

        if not password:
            raise ZipValidationError("No password provided for validation")

        try:
            with pyzipper.AESZipFile(io.BytesIO(zip_data), "r") as zf:
                zf.setpassword(password.encode("utf-8"))
                for name in zf.namelist():
                    zf.read(name)
        except RuntimeError as e:
            if "password" in str(e).lower():
                logger.error("AES ZIP password validation failed")
                return False
            raise ZipValidationError(f"Failed to validate ZIP integrity: {e}") from e
        except (pyzipper.BadZipFile, OSError, ValueError) as e:
            raise ZipValidationError(f"Failed to validate ZIP integrity: {e}") from e

        logger.debug("AES ZIP integrity validated successfully")
        return True


# Global instance
secure_zip_creator = SecureZipCreator()
