# dc_certificates/config.py
# Configuration settings for the certificate chain generator and its API

import os

class Settings:
    """Application settings"""

    # Application
    APP_NAME: str = "SMPTE DC Certificate Chain API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "OFF").upper() == "ON"

    # API
    API_PREFIX: str = "/api"
    CORS_ORIGINS: list = ["*"]  # In production, specify actual origins

    # Key material (SMPTE 430-2 mandates RSA 2048 with exponent 65537)
    KEY_SIZE: int = 2048
    PUBLIC_EXPONENT: int = 65537

    # Validity - do not reach past 2038-01-19 (32-bit time_t on playback servers)
    ROOT_VALIDITY_DAYS: int = int(os.getenv("DC_ROOT_VALIDITY_DAYS", "4700"))

    # Serial numbers - Dolby DSS220 decodes serials as unsigned 32 bit
    HARDWARE_SERIAL_MAX: int = 2 ** 32 - 1
    SERIAL_DRAW_ATTEMPTS: int = int(os.getenv("DC_SERIAL_DRAW_ATTEMPTS", "16"))

    # Output
    OUTPUT_DIR: str = os.getenv("DC_OUTPUT_DIR", ".")

    # Chain builds wrapped by the API get an external deadline
    BUILD_TIMEOUT_SECONDS: float = float(os.getenv("DC_BUILD_TIMEOUT_SECONDS", "120"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Global settings instance
settings = Settings()
