# tests/test_secure_zip_creator.py
"""
Tests for SecureZipCreator service
"""

import io

import pytest
import pyzipper

from dc_certificates.services.secure_zip_creator import (
    SecureZipCreator,
    ZipCreationError,
    PasswordGenerationError,
    ZipValidationError
)


class TestSecureZipCreator:
    """Test suite for SecureZipCreator service"""

    @pytest.fixture
    def zip_creator(self):
        """Create SecureZipCreator instance for testing"""
        return SecureZipCreator()

    @pytest.fixture
    def sample_files(self):
        """Artifact layout of a generated hierarchy"""
        return {
            'example.org.ca0.pem': b'-----BEGIN CERTIFICATE-----\nca0\n-----END CERTIFICATE-----\n',
            'csrs/example.org.ca1.csr': b'-----BEGIN CERTIFICATE REQUEST-----\nca1\n-----END CERTIFICATE REQUEST-----\n',
            'example.org.report.txt': '+++ Certificate info +++\nDONE\n'
        }

    def test_password_generation_default_length(self, zip_creator):
        """Test password generation with default length"""
        password = zip_creator.generate_secure_password()

        assert len(password) == zip_creator.DEFAULT_PASSWORD_LENGTH
        assert any(c.islower() for c in password)  # Has lowercase
        assert any(c.isupper() for c in password)  # Has uppercase
        assert any(c.isdigit() for c in password)  # Has digit
        assert any(c in zip_creator.SPECIAL_CHARACTERS for c in password)  # Has special

    def test_password_generation_custom_length(self, zip_creator):
        assert len(zip_creator.generate_secure_password(25)) == 25

    def test_password_generation_minimum_length_error(self, zip_creator):
        """Test password generation fails with too short length"""
        with pytest.raises(PasswordGenerationError):
            zip_creator.generate_secure_password(8)

    def test_password_uniqueness(self, zip_creator):
        passwords = [zip_creator.generate_secure_password() for _ in range(10)]
        assert len(set(passwords)) == 10

    def test_create_protected_zip_custom_password(self, zip_creator, sample_files):
        """Test ZIP creation with custom password"""
        custom_password = "MySecurePassword123!"
        zip_data, password = zip_creator.create_protected_zip(sample_files, custom_password)

        assert password == custom_password
        assert isinstance(zip_data, bytes)

    def test_create_protected_zip_empty_files_error(self, zip_creator):
        with pytest.raises(ZipCreationError):
            zip_creator.create_protected_zip({})

    def test_zip_validation_success(self, zip_creator, sample_files):
        zip_data, password = zip_creator.create_protected_zip(sample_files)

        assert zip_creator.validate_zip_integrity(zip_data, password) is True

    def test_zip_validation_wrong_password(self, zip_creator, sample_files):
        """Wrong password is reported, not raised"""
        zip_data, _ = zip_creator.create_protected_zip(sample_files)

        assert zip_creator.validate_zip_integrity(zip_data, "wrongpassword") is False

    def test_zip_validation_empty_data_error(self, zip_creator):
        with pytest.raises(ZipValidationError):
            zip_creator.validate_zip_integrity(b'', "password")

    def test_zip_validation_no_password_error(self, zip_creator):
        with pytest.raises(ZipValidationError):
            zip_creator.validate_zip_integrity(b'data', '')

    def test_zip_validation_corrupt_archive(self, zip_creator):
        with pytest.raises(ZipValidationError):
            zip_creator.validate_zip_integrity(b'not a zip archive', "password")

    def test_zip_content_integrity(self, zip_creator, sample_files):
        """Paths with subdirectories and str content survive archiving"""
        zip_data, password = zip_creator.create_protected_zip(sample_files)

        with pyzipper.AESZipFile(io.BytesIO(zip_data), 'r') as zip_file:
            zip_file.setpassword(password.encode('utf-8'))

            assert sorted(zip_file.namelist()) == sorted(sample_files)
            for filename, expected_content in sample_files.items():
                if isinstance(expected_content, str):
                    expected_content = expected_content.encode('utf-8')
                assert zip_file.read(filename) == expected_content

    def test_entries_are_aes_encrypted(self, zip_creator, sample_files):
        zip_data, _ = zip_creator.create_protected_zip(sample_files)

        with pyzipper.AESZipFile(io.BytesIO(zip_data), 'r') as zip_file:
            for info in zip_file.infolist():
                assert info.flag_bits & 0x1  # encrypted
