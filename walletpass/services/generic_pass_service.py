#
# generic_pass_service.py
# Builder for Google Wallet generic passes and "Add to Google Wallet" links
#

import json
import logging
import time
from enum import Enum
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar, Union

import jwt
from pydantic import BaseModel

from walletpass.config import Settings, get_settings
from walletpass.core.credentials import (
    ServiceAccountCredentials,
    load_credentials,
    load_signing_key,
    normalize_pem,
)
from walletpass.core.exceptions import CredentialError, NotConfiguredError, PreconditionError
from walletpass.schemas.generic_pass import (
    AppLinkData,
    AppLinkInfo,
    AppTarget,
    Barcode,
    BarcodeType,
    CardRowTemplateInfo,
    CardTemplateOverride,
    ClassTemplateInfo,
    DateTime,
    FieldReference,
    GenericClass,
    GenericObject,
    GroupingInfo,
    ImageModule,
    ImageObject,
    InfoModule,
    LabelValue,
    LatLongPoint,
    LinksModule,
    LinkUri,
    LocalizedString,
    OneItem,
    SaveToWalletClaims,
    SaveToWalletPayload,
    TemplateItem,
    TemplateItemValue,
    TextModule,
    ThreeItems,
    TimeInterval,
    TranslatedString,
    TwoItems,
    Uri,
)
from walletpass.services.pass_validator import (
    ensure_non_empty,
    validate_pass_class,
    validate_pass_object,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
DateLike = Union[str, date, datetime]


def _coerce(model_cls: Type[ModelT], value: Union[ModelT, Dict[str, Any]]) -> ModelT:
    if isinstance(value, model_cls):
        return value.model_copy(deep=True)
    return model_cls.model_validate(value)


def _enum_value(value: Union[str, Enum]) -> str:
    return value.value if isinstance(value, Enum) else value


def _iso(value: DateLike) -> str:
    return value if isinstance(value, str) else value.isoformat()


def _template_item(field_path: Optional[str]) -> Optional[TemplateItem]:
    if not field_path:
        return None
    return TemplateItem(
        first_value=TemplateItemValue(fields=[FieldReference(field_path=field_path)])
    )


class GenericPassBuilder:
    """Fluent builder for a Google Wallet generic pass.

    Holds the pass object (per user) and an optional pass class (per
    issuer). Every mutator returns the builder so calls can be chained:

        link = (
            GenericPassBuilder.create("3388", "member-42", "loyalty")
            .set_service_account_credentials(email, "service-account.json")
            .set_pass_class("Acme")
            .set_card_title("Acme Rewards")
            .set_barcode("123456", "QR_CODE")
            .generate_add_to_wallet_link()
        )
    """

    def __init__(
        self,
        issuer_id: Optional[str],
        pass_id: str,
        class_id: str,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        issuer_id = issuer_id or self.settings.GOOGLE_WALLET_ISSUER_ID
        if not issuer_id:
            raise NotConfiguredError(
                "Google Wallet issuer id not provided",
                details={"error_type": "configuration", "missing": ["GOOGLE_WALLET_ISSUER_ID"]},
            )
        self.language = self.settings.GOOGLE_WALLET_DEFAULT_LANGUAGE
        self.pass_object = GenericObject(
            id=f"{issuer_id}.{pass_id}",
            class_id=f"{issuer_id}.{class_id}",
        )
        self.pass_class: Optional[GenericClass] = None
        self.credentials: Optional[ServiceAccountCredentials] = None

    @classmethod
    def create(
        cls,
        issuer_id: Optional[str],
        pass_id: str,
        class_id: str,
        settings: Optional[Settings] = None,
    ) -> "GenericPassBuilder":
        """Start a pass; a missing issuer id falls back to GOOGLE_WALLET_ISSUER_ID."""
        return cls(issuer_id, pass_id, class_id, settings=settings)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def set_service_account_credentials(
        self,
        service_account_email: Optional[str],
        private_key_path_or_json: str,
    ) -> "GenericPassBuilder":
        """Load signing credentials from a JSON bundle, its path, or a PEM file path."""
        self.credentials = load_credentials(service_account_email, private_key_path_or_json)
        logger.debug(f"Loaded credentials for {self.credentials.service_account_email}")
        return self

    def set_service_account_credentials_from_key_data(
        self,
        service_account_email: str,
        private_key: str,
    ) -> "GenericPassBuilder":
        """Set signing credentials directly from PEM key content."""
        if not service_account_email or not private_key:
            raise CredentialError(
                "Service account email and private key are required",
                details={"error_type": "configuration"},
            )
        self.credentials = ServiceAccountCredentials(
            service_account_email=service_account_email,
            private_key=normalize_pem(private_key),
        )
        return self

    def set_credentials_from_settings(self, settings: Optional[Settings] = None) -> "GenericPassBuilder":
        """Load signing credentials from GOOGLE_WALLET_SERVICE_ACCOUNT_* settings."""
        settings = settings or self.settings
        email = settings.GOOGLE_WALLET_SERVICE_ACCOUNT_EMAIL
        key = settings.GOOGLE_WALLET_SERVICE_ACCOUNT_KEY

        if key:
            if key.lstrip().startswith("{"):
                return self.set_service_account_credentials(email, key)
            return self.set_service_account_credentials_from_key_data(email or "", key)

        if settings.GOOGLE_WALLET_SERVICE_ACCOUNT_KEY_PATH:
            return self.set_service_account_credentials(
                email, settings.GOOGLE_WALLET_SERVICE_ACCOUNT_KEY_PATH
            )

        raise NotConfiguredError(
            "Google Wallet credentials not configured",
            details={
                "error_type": "configuration",
                "missing": [
                    "GOOGLE_WALLET_SERVICE_ACCOUNT_KEY or GOOGLE_WALLET_SERVICE_ACCOUNT_KEY_PATH"
                ],
            },
        )

    # ------------------------------------------------------------------
    # Pass class (template)
    # ------------------------------------------------------------------

    def set_pass_class(self, issuer_name: str) -> "GenericPassBuilder":
        self.pass_class = GenericClass(
            id=self.pass_object.class_id,
            issuer_name=ensure_non_empty(issuer_name, "Issuer"),
        )
        return self

    def set_pass_class_with_details(
        self,
        issuer_name: str,
        review_status: Optional[Union[str, Enum]] = None,
        logo_image_url: Optional[str] = None,
        logo_description: Optional[str] = None,
        hero_image_url: Optional[str] = None,
        hero_description: Optional[str] = None,
        hex_background_color: Optional[str] = None,
    ) -> "GenericPassBuilder":
        self.set_pass_class(issuer_name)

        if review_status:
            self.pass_class.review_status = _enum_value(review_status)
        if logo_image_url:
            self.pass_class.logo_image = self._image(logo_image_url, logo_description)
        if hero_image_url:
            self.pass_class.hero_image = self._image(hero_image_url, hero_description)
        if hex_background_color:
            self.pass_class.hex_background_color = hex_background_color

        return self

    def set_class_template_info(
        self,
        card_row_templates: Iterable[Union[CardRowTemplateInfo, Dict[str, Any]]],
    ) -> "GenericPassBuilder":
        """Override the card layout with the given rows."""
        if self.pass_class is None:
            raise PreconditionError(
                "Pass class must be created before adding template info",
                details={"class_id": self.pass_object.class_id},
            )

        rows = [_coerce(CardRowTemplateInfo, row) for row in card_row_templates]
        self.pass_class.class_template_info = ClassTemplateInfo(
            card_template_override=CardTemplateOverride(card_row_template_infos=rows)
        )
        return self

    @staticmethod
    def create_two_items_row(
        start_field_path: Optional[str] = None,
        end_field_path: Optional[str] = None,
    ) -> CardRowTemplateInfo:
        return CardRowTemplateInfo(
            two_items=TwoItems(
                start_item=_template_item(start_field_path),
                end_item=_template_item(end_field_path),
            )
        )

    @staticmethod
    def create_three_items_row(
        start_field_path: Optional[str] = None,
        middle_field_path: Optional[str] = None,
        end_field_path: Optional[str] = None,
    ) -> CardRowTemplateInfo:
        return CardRowTemplateInfo(
            three_items=ThreeItems(
                start_item=_template_item(start_field_path),
                middle_item=_template_item(middle_field_path),
                end_item=_template_item(end_field_path),
            )
        )

    @staticmethod
    def create_one_item_row(field_path: Optional[str] = None) -> CardRowTemplateInfo:
        return CardRowTemplateInfo(one_item=OneItem(item=_template_item(field_path)))

    # ------------------------------------------------------------------
    # Pass object
    # ------------------------------------------------------------------

    def set_basic_info(
        self,
        generic_type: Union[str, Enum],
        hex_background_color: Optional[str] = None,
    ) -> "GenericPassBuilder":
        self.pass_object.generic_type = _enum_value(generic_type)
        if hex_background_color:
            self.pass_object.hex_background_color = hex_background_color
        return self

    def set_card_title(self, title: str) -> "GenericPassBuilder":
        self.pass_object.card_title = self._localized(title, "Card")
        return self

    def set_header_info(self, header: str, subheader: Optional[str] = None) -> "GenericPassBuilder":
        self.pass_object.header = self._localized(header, "Header")
        if subheader is not None:
            self.pass_object.subheader = self._localized(subheader, "Subheader")
        return self

    def add_text_module(self, id: str, body: str, header: Optional[str] = None) -> "GenericPassBuilder":
        if self.pass_object.text_modules_data is None:
            self.pass_object.text_modules_data = []

        self.pass_object.text_modules_data.append(
            TextModule(
                id=id,
                body=ensure_non_empty(body, "Information"),
                header=ensure_non_empty(header, "Section") if header is not None else None,
            )
        )
        return self

    def set_logo(self, image_url: str, description: Optional[str] = None) -> "GenericPassBuilder":
        self.pass_object.logo = self._image(image_url, description)
        return self

    def set_hero_image(self, image_url: str, description: Optional[str] = None) -> "GenericPassBuilder":
        self.pass_object.hero_image = self._image(image_url, description)
        return self

    def add_image_module(
        self,
        id: str,
        image_url: str,
        description: Optional[str] = None,
    ) -> "GenericPassBuilder":
        if self.pass_object.image_modules_data is None:
            self.pass_object.image_modules_data = []

        self.pass_object.image_modules_data.append(
            ImageModule(id=id, main_image=self._image(image_url, description))
        )
        return self

    def set_barcode(
        self,
        value: str,
        type: Union[str, Enum] = BarcodeType.QR_CODE,
        alternate_text: Optional[str] = None,
    ) -> "GenericPassBuilder":
        # Google Wallet expects alternateText to exist, an empty string is fine
        self.pass_object.barcode = Barcode(
            type=_enum_value(type),
            value=value,
            alternate_text=alternate_text or "",
        )
        return self

    def add_links(self, links: Iterable[Union[LinkUri, Dict[str, Any]]]) -> "GenericPassBuilder":
        if self.pass_object.links_module_data is None:
            self.pass_object.links_module_data = LinksModule()

        for link in links:
            link = _coerce(LinkUri, link)
            link.description = ensure_non_empty(link.description, f"Link {link.id}")
            self.pass_object.links_module_data.uris.append(link)
        return self

    def add_locations(
        self,
        locations: Iterable[Union[LatLongPoint, Dict[str, Any]]],
    ) -> "GenericPassBuilder":
        self.pass_object.locations = [_coerce(LatLongPoint, point) for point in locations]
        return self

    def set_valid_time_interval(
        self,
        start: DateLike,
        end: Optional[DateLike] = None,
    ) -> "GenericPassBuilder":
        """Set the validity window; without an end the pass stays valid."""
        interval = TimeInterval(start=DateTime(date=_iso(start)))
        if end:
            interval.end = DateTime(date=_iso(end))
        self.pass_object.valid_time_interval = interval
        return self

    def add_custom_info_module(self, id: str, label: str, value: str) -> "GenericPassBuilder":
        if self.pass_object.custom_info_modules is None:
            self.pass_object.custom_info_modules = []

        self.pass_object.custom_info_modules.append(self._info_module(id, label, value))
        return self

    def add_additional_info(self, id: str, label: str, value: str) -> "GenericPassBuilder":
        if self.pass_object.additional_info is None:
            self.pass_object.additional_info = []

        self.pass_object.additional_info.append(self._info_module(id, label, value))
        return self

    def clear_additional_info(self) -> "GenericPassBuilder":
        """Drop the additionalInfo section, including the seeded entry."""
        self.pass_object.additional_info = None
        return self

    def add_android_app_link(
        self,
        title: str,
        target_uri: str,
        description: Optional[str] = None,
        logo_image_url: Optional[str] = None,
        logo_description: Optional[str] = None,
    ) -> "GenericPassBuilder":
        return self._set_app_link(
            "android_app_link_info", "Android", title, target_uri,
            description, logo_image_url, logo_description,
        )

    def add_ios_app_link(
        self,
        title: str,
        target_uri: str,
        description: Optional[str] = None,
        logo_image_url: Optional[str] = None,
        logo_description: Optional[str] = None,
    ) -> "GenericPassBuilder":
        return self._set_app_link(
            "ios_app_link_info", "iOS", title, target_uri,
            description, logo_image_url, logo_description,
        )

    def add_web_app_link(
        self,
        title: str,
        target_uri: str,
        description: Optional[str] = None,
        logo_image_url: Optional[str] = None,
        logo_description: Optional[str] = None,
    ) -> "GenericPassBuilder":
        return self._set_app_link(
            "web_app_link_info", "Web", title, target_uri,
            description, logo_image_url, logo_description,
        )

    def set_grouping_info(self, grouping_id: str, sort_index: Optional[int] = None) -> "GenericPassBuilder":
        self.pass_object.grouping_info = GroupingInfo(grouping_id=grouping_id, sort_index=sort_index)
        return self

    def add_custom_field(self, key: str, value: Any) -> "GenericPassBuilder":
        """Set an arbitrary top-level field on the pass object.

        Overrides typed fields of the same wire name when serialized.
        """
        self.pass_object.custom_fields[key] = value
        return self

    # ------------------------------------------------------------------
    # Envelope, JWT and link
    # ------------------------------------------------------------------

    def build_envelope(self, origins: Optional[List[str]] = None) -> Dict[str, Any]:
        """Validate the pass and assemble the "savetowallet" JWT claims."""
        credentials = self._require_credentials()

        validate_pass_object(self.pass_object)
        if self.pass_class is not None:
            validate_pass_class(self.pass_class)

        if origins is None:
            origins = self.settings.GOOGLE_WALLET_ORIGINS

        claims = SaveToWalletClaims(
            iss=credentials.service_account_email,
            iat=int(time.time()),
            origins=list(origins),
            payload=SaveToWalletPayload(
                generic_objects=[self.pass_object.to_wire()],
                generic_classes=[self.pass_class.to_wire()] if self.pass_class is not None else None,
            ),
        )
        return claims.to_wire()

    def generate_jwt(self, origins: Optional[List[str]] = None) -> str:
        """Generate the signed JWT for the pass."""
        envelope = self.build_envelope(origins)
        signing_key = load_signing_key(self.credentials)
        algorithm = self.settings.GOOGLE_WALLET_SIGNING_ALGORITHM

        try:
            token = jwt.encode(envelope, signing_key, algorithm=algorithm)
        except (jwt.PyJWTError, ValueError, NotImplementedError) as e:
            raise CredentialError(
                "Failed to sign save to wallet token. Check private key format.",
                details={"error_type": "authentication", "algorithm": algorithm, "error": str(e)},
            ) from e

        logger.info(f"Generated save to wallet token for {self.pass_object.id}")
        return token

    def generate_add_to_wallet_link(self, origins: Optional[List[str]] = None) -> str:
        """Generate the "Add to Google Wallet" URL."""
        token = self.generate_jwt(origins)
        return f"{self.settings.GOOGLE_WALLET_SAVE_URL}/{token}"

    def debug_payload(self, origins: Optional[List[str]] = None) -> Optional[Dict[str, Any]]:
        """Log the unsigned envelope. Never raises; returns None on failure."""
        if self.credentials is None:
            logger.warning("Service account not configured")
            return None

        try:
            envelope = self.build_envelope(origins)
        except Exception as e:
            logger.error(f"Error preparing payload: {e}", exc_info=True)
            return None

        logger.info(f"JWT payload: {json.dumps(envelope, indent=2)}")
        return envelope

    def get_pass_object(self) -> GenericObject:
        return self.pass_object

    def get_pass_class(self) -> Optional[GenericClass]:
        return self.pass_class

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_credentials(self) -> ServiceAccountCredentials:
        if self.credentials is None:
            raise NotConfiguredError(
                "Service account credentials not set",
                details={"error_type": "configuration"},
            )
        return self.credentials

    def _localized(self, value: Optional[str], fallback: str) -> LocalizedString:
        return LocalizedString(
            default_value=TranslatedString(
                language=self.language,
                value=ensure_non_empty(value, fallback),
            )
        )

    def _image(self, image_url: str, description: Optional[str] = None) -> ImageObject:
        # Google Wallet requires a contentDescription on every image
        return ImageObject(
            source_uri=Uri(uri=image_url),
            content_description=self._localized(description, "Image"),
        )

    def _info_module(self, id: str, label: str, value: str) -> InfoModule:
        return InfoModule(
            id=id,
            label_value=LabelValue(
                label=ensure_non_empty(label, "Info"),
                value=ensure_non_empty(value, "Value"),
            ),
        )

    def _set_app_link(
        self,
        attr: str,
        platform: str,
        title: str,
        target_uri: str,
        description: Optional[str],
        logo_image_url: Optional[str],
        logo_description: Optional[str],
    ) -> "GenericPassBuilder":
        if self.pass_object.app_link_data is None:
            self.pass_object.app_link_data = AppLinkData()

        info = AppLinkInfo(
            title=ensure_non_empty(title, f"{platform} App"),
            description=description,
            app_target=AppTarget(target_uri=target_uri),
        )
        if logo_image_url:
            info.app_logo_image = self._image(logo_image_url, logo_description)

        setattr(self.pass_object.app_link_data, attr, info)
        return self
