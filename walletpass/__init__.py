from walletpass.config import Settings, get_settings
from walletpass.core.exceptions import (
    WalletPassException,
    CredentialError,
    PreconditionError,
    NotConfiguredError,
)
from walletpass.core.credentials import ServiceAccountCredentials
from walletpass.schemas.generic_pass import (
    BarcodeType,
    CardRowTemplateInfo,
    GenericClass,
    GenericObject,
    GenericType,
    LatLongPoint,
    LinkUri,
    ReviewStatus,
)
from walletpass.services.generic_pass_service import GenericPassBuilder
from walletpass.services.pass_validator import (
    ensure_non_empty,
    validate_pass_class,
    validate_pass_object,
)

__all__ = [
    "Settings",
    "get_settings",
    "WalletPassException",
    "CredentialError",
    "PreconditionError",
    "NotConfiguredError",
    "ServiceAccountCredentials",
    "BarcodeType",
    "CardRowTemplateInfo",
    "GenericClass",
    "GenericObject",
    "GenericType",
    "LatLongPoint",
    "LinkUri",
    "ReviewStatus",
    "GenericPassBuilder",
    "ensure_non_empty",
    "validate_pass_class",
    "validate_pass_object",
]
