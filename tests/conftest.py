import json

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from walletpass.config import Settings
from walletpass.services.generic_pass_service import GenericPassBuilder


ISSUER_ID = "test-issuer"
PASS_ID = "test-pass"
CLASS_ID = "test-class"
SERVICE_ACCOUNT_EMAIL = "test@example.com"


@pytest.fixture(scope="session")
def rsa_key():
    """Generate one RSA key for the whole test session."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key) -> str:
    """PEM-encoded private key."""
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


@pytest.fixture(scope="session")
def public_key(rsa_key):
    """Public half of the test key, for verifying tokens."""
    return rsa_key.public_key()


@pytest.fixture
def service_account_json(private_key_pem) -> str:
    """Inline service account JSON bundle."""
    return json.dumps({
        "type": "service_account",
        "client_email": "bundle@example.iam.gserviceaccount.com",
        "private_key": private_key_pem,
    })


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def builder(settings) -> GenericPassBuilder:
    """A fresh builder without credentials."""
    return GenericPassBuilder.create(ISSUER_ID, PASS_ID, CLASS_ID, settings=settings)


@pytest.fixture
def configured_builder(builder, private_key_pem) -> GenericPassBuilder:
    """A builder with signing credentials set."""
    return builder.set_service_account_credentials_from_key_data(SERVICE_ACCOUNT_EMAIL, private_key_pem)
