"""
Installer-wide constants.

Centralizes values that are fixed by the application being installed rather
than by the host (those live in config.yaml).
"""

# Secrets
SECRET_BYTES = 32  # 256 bits -> 64 hex characters
URL_DELIMITERS = (":", "@", "/")

# Backend env keys written from operator input and generated secrets
BACKEND_ENV_EXAMPLE = ".env.example"
BACKEND_ENV_FILE = ".env"
VYOS_API_VERSION = "1.5"
VYOS_API_PROTOCOL = "https"
VYOS_API_KEY_ID = "fastapi"

# Frontend
FRONTEND_ENV_FILE = ".env"

# PostgreSQL
POSTGRES_ADMIN_USER = "postgres"
POSTGRES_SERVICE = "postgresql"
PG_HBA_FROM_METHOD = "peer"
PG_HBA_TO_METHOD = "scram-sha-256"

# Files
ENV_FILE_MODE = 0o600
UNIT_FILE_MODE = 0o644

# Network
DOWNLOAD_TIMEOUT = 30  # seconds
