"""Service account credential loading for "save to wallet" signing."""
import json
import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from walletpass.core.exceptions import CredentialError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceAccountCredentials:
    """Signing identity: the service account email and its PEM private key."""

    service_account_email: str
    private_key: str  # PEM-encoded


def normalize_pem(key: str) -> str:
    """Convert escaped newlines (\\n) into real ones.

    PEM keys copied out of JSON or env vars often keep the literal
    backslash sequences.
    """
    if "\\n" in key:
        key = key.replace("\\n", "\n")
    return key


def _parse_json_object(text: str) -> Optional[dict]:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else {}


def resolve_private_key(key_path_or_json: str) -> Tuple[str, Optional[dict]]:
    """Resolve key material from inline JSON or a file path.

    Order:
        1. parse the input itself as a JSON service account bundle
        2. otherwise treat the input as a path and read the file
        3. look for ``private_key`` in whichever bundle was parsed
        4. fall back to the raw file content (a plain PEM key file)

    Returns:
        Tuple of (pem_private_key, parsed_bundle_or_None)
    """
    bundle = _parse_json_object(key_path_or_json)
    file_content = None

    if bundle is None:
        path = key_path_or_json
        if not os.path.exists(path):
            raise CredentialError(
                f"Failed to load service account key: file not found: {path}",
                details={"error_type": "configuration", "path": path},
            )
        try:
            with open(path, "r", encoding="utf-8") as f:
                file_content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise CredentialError(
                f"Failed to load service account key: {e}",
                details={"error_type": "configuration", "path": path},
            ) from e
        bundle = _parse_json_object(file_content)
        logger.debug(f"Read service account key file {path}")

    private_key = bundle.get("private_key") if bundle else None
    if private_key:
        return normalize_pem(private_key), bundle

    if file_content and file_content.strip():
        logger.debug("No private_key field found, using raw file content as PEM key")
        return normalize_pem(file_content), bundle

    raise CredentialError(
        "Failed to load service account key: Private key not found",
        details={"error_type": "configuration"},
    )


def load_credentials(
    service_account_email: Optional[str],
    key_path_or_json: str,
) -> ServiceAccountCredentials:
    """Build credentials from a JSON bundle, a bundle path, or a PEM file path.

    When no email is given the bundle's ``client_email`` is used.
    """
    private_key, bundle = resolve_private_key(key_path_or_json)
    email = service_account_email or (bundle or {}).get("client_email")
    if not email:
        raise CredentialError(
            "Service account email not provided and not present in key bundle",
            details={"error_type": "configuration"},
        )
    return ServiceAccountCredentials(service_account_email=email, private_key=private_key)


def load_signing_key(credentials: ServiceAccountCredentials) -> RSAPrivateKey:
    """Parse the PEM private key so it can be handed to the JWT signer."""
    try:
        key = serialization.load_pem_private_key(
            credentials.private_key.encode("utf-8"),
            password=None,
        )
    except (ValueError, TypeError) as e:
        raise CredentialError(
            "Failed to parse service account private key. Check private key format.",
            details={"error_type": "authentication", "error": str(e)},
        ) from e

    if not isinstance(key, RSAPrivateKey):
        raise CredentialError(
            "Service account private key must be an RSA key",
            details={"error_type": "authentication", "key_type": type(key).__name__},
        )
    return key
