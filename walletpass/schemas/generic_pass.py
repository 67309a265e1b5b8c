#
# generic_pass.py
# Pydantic schemas for Google Wallet generic passes
#

from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import AliasChoices, BaseModel, Field, PrivateAttr, model_validator
from pydantic.alias_generators import to_camel


class GenericType(str, Enum):
    UNSPECIFIED = "GENERIC_TYPE_UNSPECIFIED"
    SEASON_PASS = "GENERIC_SEASON_PASS"
    UTILITY_BILLS = "GENERIC_UTILITY_BILLS"
    PARKING_PASS = "GENERIC_PARKING_PASS"
    VOUCHER = "GENERIC_VOUCHER"
    GYM_MEMBERSHIP = "GENERIC_GYM_MEMBERSHIP"
    LIBRARY_MEMBERSHIP = "GENERIC_LIBRARY_MEMBERSHIP"
    RESERVATIONS = "GENERIC_RESERVATIONS"
    AUTO_INSURANCE = "GENERIC_AUTO_INSURANCE"
    HOME_INSURANCE = "GENERIC_HOME_INSURANCE"
    ENTRY_TICKET = "GENERIC_ENTRY_TICKET"
    RECEIPT = "GENERIC_RECEIPT"
    LOYALTY_CARD = "GENERIC_LOYALTY_CARD"
    OTHER = "GENERIC_OTHER"


class BarcodeType(str, Enum):
    QR_CODE = "QR_CODE"
    AZTEC = "AZTEC"
    PDF_417 = "PDF_417"
    DATA_MATRIX = "DATA_MATRIX"
    CODE_128 = "CODE_128"
    CODE_39 = "CODE_39"
    EAN_13 = "EAN_13"
    EAN_8 = "EAN_8"
    UPC_A = "UPC_A"
    ITF_14 = "ITF_14"
    TEXT_ONLY = "TEXT_ONLY"


class ReviewStatus(str, Enum):
    DRAFT = "DRAFT"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class WalletModel(BaseModel):
    """Base for wallet schemas: snake_case attributes, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# Localized text and images

class TranslatedString(WalletModel):
    language: str = "en-US"
    value: str


class LocalizedString(WalletModel):
    default_value: TranslatedString


class Uri(WalletModel):
    uri: str


class ImageObject(WalletModel):
    source_uri: Uri
    # Google Wallet rejects images without a description
    content_description: LocalizedString


# Pass modules

class TextModule(WalletModel):
    id: str
    header: Optional[str] = None
    body: str


class ImageModule(WalletModel):
    id: str
    main_image: ImageObject


class LinkUri(WalletModel):
    uri: str
    description: str
    id: str


class LinksModule(WalletModel):
    uris: List[LinkUri] = Field(default_factory=list)


class Barcode(WalletModel):
    type: str = BarcodeType.QR_CODE.value
    value: str
    alternate_text: str = ""


class LatLongPoint(WalletModel):
    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "long", "lng"))


class DateTime(WalletModel):
    date: str  # ISO 8601


class TimeInterval(WalletModel):
    start: DateTime
    end: Optional[DateTime] = None


class LabelValue(WalletModel):
    label: str
    value: str


class InfoModule(WalletModel):
    id: str
    label_value: LabelValue


class AppTarget(WalletModel):
    target_uri: str


class AppLinkInfo(WalletModel):
    app_logo_image: Optional[ImageObject] = None
    title: str
    description: Optional[str] = None
    app_target: AppTarget


class AppLinkData(WalletModel):
    android_app_link_info: Optional[AppLinkInfo] = None
    ios_app_link_info: Optional[AppLinkInfo] = None
    web_app_link_info: Optional[AppLinkInfo] = None


class GroupingInfo(WalletModel):
    grouping_id: str
    sort_index: Optional[int] = None


# Card layout (class template)

class FieldReference(WalletModel):
    field_path: str


class TemplateItemValue(WalletModel):
    fields: List[FieldReference] = Field(default_factory=list)


class TemplateItem(WalletModel):
    first_value: Optional[TemplateItemValue] = None
    second_value: Optional[TemplateItemValue] = None


class TwoItems(WalletModel):
    start_item: Optional[TemplateItem] = None
    end_item: Optional[TemplateItem] = None


class ThreeItems(WalletModel):
    start_item: Optional[TemplateItem] = None
    middle_item: Optional[TemplateItem] = None
    end_item: Optional[TemplateItem] = None


class OneItem(WalletModel):
    item: Optional[TemplateItem] = None


class CardRowTemplateInfo(WalletModel):
    two_items: Optional[TwoItems] = None
    three_items: Optional[ThreeItems] = None
    one_item: Optional[OneItem] = None

    @model_validator(mode="after")
    def check_single_layout(self):
        """A row is exactly one of two, three or one slot layouts."""
        layouts = [self.two_items, self.three_items, self.one_item]
        if sum(layout is not None for layout in layouts) != 1:
            raise ValueError("Card row must define exactly one of twoItems, threeItems or oneItem")
        return self


class CardTemplateOverride(WalletModel):
    card_row_template_infos: List[CardRowTemplateInfo] = Field(default_factory=list)


class ClassTemplateInfo(WalletModel):
    card_template_override: Optional[CardTemplateOverride] = None


# Object / class

def _default_additional_info() -> List[InfoModule]:
    # Seeded so the additionalInfo array is never sent empty
    return [
        InfoModule(
            id="default_info",
            label_value=LabelValue(label="Info", value="See details"),
        )
    ]


class GenericObject(WalletModel):
    """A single issued pass (Google Wallet "generic object")."""

    id: str
    class_id: str
    generic_type: str = GenericType.UNSPECIFIED.value
    hex_background_color: Optional[str] = None
    logo: Optional[ImageObject] = None
    card_title: Optional[LocalizedString] = None
    header: Optional[LocalizedString] = None
    subheader: Optional[LocalizedString] = None
    text_modules_data: Optional[List[TextModule]] = None
    links_module_data: Optional[LinksModule] = None
    image_modules_data: Optional[List[ImageModule]] = None
    barcode: Optional[Barcode] = None
    hero_image: Optional[ImageObject] = None
    valid_time_interval: Optional[TimeInterval] = None
    locations: Optional[List[LatLongPoint]] = None
    custom_info_modules: Optional[List[InfoModule]] = None
    additional_info: Optional[List[InfoModule]] = Field(default_factory=_default_additional_info)
    app_link_data: Optional[AppLinkData] = None
    grouping_info: Optional[GroupingInfo] = None

    _custom_fields: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @property
    def custom_fields(self) -> Dict[str, Any]:
        """Extension fields merged over the typed fields on serialization."""
        return self._custom_fields

    def to_wire(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_none=True)
        for key, value in self._custom_fields.items():
            if isinstance(value, BaseModel):
                value = value.model_dump(by_alias=True, exclude_none=True)
            data[key] = value
        return data


class GenericClass(WalletModel):
    """Issuer-level template shared by generic objects."""

    id: str
    issuer_name: str
    review_status: Optional[str] = None
    logo_image: Optional[ImageObject] = None
    hero_image: Optional[ImageObject] = None
    hex_background_color: Optional[str] = None
    class_template_info: Optional[ClassTemplateInfo] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# JWT claims

class SaveToWalletPayload(WalletModel):
    generic_objects: List[Dict[str, Any]]
    generic_classes: Optional[List[Dict[str, Any]]] = None


class SaveToWalletClaims(WalletModel):
    iss: str
    aud: str = "google"
    typ: str = "savetowallet"
    iat: int
    origins: List[str] = Field(default_factory=list)
    payload: SaveToWalletPayload

    def to_wire(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True)
        if self.payload.generic_classes is None:
            data["payload"].pop("genericClasses")
        return data
