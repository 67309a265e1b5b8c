#
# pass_validator.py
# Repairs empty display strings before a pass is signed
#

import logging
from typing import Optional, List

from walletpass.schemas.generic_pass import (
    AppLinkInfo,
    GenericClass,
    GenericObject,
    ImageObject,
    InfoModule,
    LocalizedString,
)

logger = logging.getLogger(__name__)

APP_PLATFORMS = (
    ("android_app_link_info", "Android"),
    ("ios_app_link_info", "iOS"),
    ("web_app_link_info", "Web"),
)


def ensure_non_empty(value: Optional[str], fallback: str) -> str:
    """Return value, or fallback when value is missing or whitespace only."""
    if not value or value.strip() == "":
        return fallback
    return value


def _repair_localized(text: Optional[LocalizedString], fallback: str) -> None:
    if text is not None:
        text.default_value.value = ensure_non_empty(text.default_value.value, fallback)


def _repair_image(image: Optional[ImageObject], fallback: str) -> None:
    if image is not None:
        _repair_localized(image.content_description, fallback)


def _repair_info_modules(modules: Optional[List[InfoModule]]) -> None:
    for module in modules or []:
        module.label_value.label = ensure_non_empty(module.label_value.label, f"Label {module.id}")
        module.label_value.value = ensure_non_empty(module.label_value.value, f"Value {module.id}")


def _repair_app_link(info: Optional[AppLinkInfo], platform: str) -> None:
    if info is None:
        return
    info.title = ensure_non_empty(info.title, f"{platform} App")
    _repair_image(info.app_logo_image, f"{platform} App Logo")


def validate_pass_object(pass_object: GenericObject) -> GenericObject:
    """Replace every present-but-empty display string with its fallback.

    Works in place and never adds a field that is not already set, so
    running it again leaves the object unchanged.
    """
    _repair_localized(pass_object.card_title, "Card")
    _repair_localized(pass_object.header, "Header")
    _repair_localized(pass_object.subheader, "Subheader")

    for module in pass_object.text_modules_data or []:
        module.body = ensure_non_empty(module.body, f"Info {module.id}")
        if module.header is not None:
            module.header = ensure_non_empty(module.header, f"Section {module.id}")

    if pass_object.links_module_data is not None:
        for link in pass_object.links_module_data.uris:
            link.description = ensure_non_empty(link.description, f"Link {link.id}")

    _repair_info_modules(pass_object.custom_info_modules)
    _repair_info_modules(pass_object.additional_info)

    _repair_image(pass_object.logo, "Logo")
    _repair_image(pass_object.hero_image, "Hero Image")
    for module in pass_object.image_modules_data or []:
        _repair_image(module.main_image, f"Image {module.id}")

    # An empty alternate text is accepted by Google Wallet, a blank one is not
    barcode = pass_object.barcode
    if barcode is not None and barcode.alternate_text:
        barcode.alternate_text = ensure_non_empty(barcode.alternate_text, "Scan this code")

    if pass_object.app_link_data is not None:
        for attr, platform in APP_PLATFORMS:
            _repair_app_link(getattr(pass_object.app_link_data, attr), platform)

    logger.debug(f"Validated pass object {pass_object.id}")
    return pass_object


def validate_pass_class(pass_class: GenericClass) -> GenericClass:
    pass_class.issuer_name = ensure_non_empty(pass_class.issuer_name, "Issuer")
    _repair_image(pass_class.logo_image, "Logo")
    _repair_image(pass_class.hero_image, "Hero Image")
    return pass_class
