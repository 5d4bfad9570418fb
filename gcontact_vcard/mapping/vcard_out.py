"""
Contact -> vCard 3.0 mapping.

Builds vobject vCard components from Contact records. Memberships become
CATEGORIES through a caller supplied resource name -> group name lookup;
photos are embedded when they can be downloaded and referenced by URI
otherwise.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import vobject

from gcontact_vcard.contacts.contact import Contact, DateType
from gcontact_vcard.contacts.fields import (
    GENDER_FEMALE,
    GENDER_MALE,
    GENDER_UNSPECIFIED,
    Name,
)
from gcontact_vcard.contacts.group import STARRED_GROUP
from gcontact_vcard.contacts.photo import detect_image_type, download_photo
from gcontact_vcard.errors import GContactVCardError, ValidationError

VCARD_VERSION = "3.0"

PHONE_TYPES = {"home": "HOME", "mobile": "CELL", "work": "WORK"}
ADDRESS_TYPES = {"home": "HOME", "work": "WORK"}
EMAIL_TYPES = {"home": "HOME", "work": "WORK"}
GENDER_CODES = {GENDER_MALE: "M", GENDER_FEMALE: "F", GENDER_UNSPECIFIED: "U"}

logger = logging.getLogger(__name__)


def contact_to_vcard(
    contact: Contact,
    group_names: Mapping[str, str] | None = None,
    starred_category: str = "",
    export_photo: bool = True,
    use_default_photo: bool = False,
    photo_loader: Callable[[str], bytes] = download_photo,
) -> Any:
    """
    Convert a Contact to a vobject vCard 3.0 component.

    Args:
        contact: Contact to convert
        group_names: Lookup of group resource name -> category name. Only
            memberships found in the lookup become categories.
        starred_category: Category written for starred contacts instead of
            the looked-up name of the starred group ("" keeps the lookup)
        export_photo: Include the contact photo
        use_default_photo: Also export the generated placeholder photo when
            the contact has no custom photo
        photo_loader: Callable downloading a photo URL

    Returns:
        vobject VCARD component

    Raises:
        ValidationError: If the contact has no names entry
    """
    names = [n for n in contact.field_groups.get("names", []) if not n.is_empty()]
    if not names:
        raise ValidationError(f"Contact {contact.resource_name or '(new)'} has no name")
    name = names[0]

    card = vobject.vCard()
    card.add("version").value = VCARD_VERSION
    card.add("n").value = vobject.vcard.Name(
        family=name.family_name,
        given=name.given_name,
        additional=name.middle_name,
        prefix=name.honorific_prefix,
        suffix=name.honorific_suffix,
    )
    card.add("fn").value = _formatted_name(name, contact)
    if contact.resource_name:
        card.add("uid").value = contact.resource_name

    _write_organization(card, contact)
    _write_simple(card, contact, "nicknames", "nickname")
    _write_simple(card, contact, "occupations", "role")
    _write_simple(card, contact, "biographies", "note")
    _write_birthday(card, contact)
    _write_gender(card, contact)
    _write_addresses(card, contact)
    _write_phones(card, contact)
    _write_emails(card, contact)
    _write_urls(card, contact)
    _write_categories(card, contact, group_names or {}, starred_category)
    if export_photo:
        _write_photo(card, contact, use_default_photo, photo_loader)

    return card


def write_vcards(cards: Iterable[Any]) -> str:
    """Serialize vCard components into a single vCard text."""
    return "".join(card.serialize() for card in cards)


def _formatted_name(name: Name, contact: Contact) -> str:
    if name.display_name:
        return name.display_name
    parts = [
        name.honorific_prefix,
        name.given_name,
        name.middle_name,
        name.family_name,
        name.honorific_suffix,
    ]
    composed = " ".join(p for p in parts if p)
    return composed or name.unstructured_name or contact.display_name


def _add_typed(card: Any, prop: str, value: Any, types: list[str]) -> Any:
    line = card.add(prop)
    line.value = value
    if types:
        line.params["TYPE"] = types
    return line


def _write_organization(card: Any, contact: Contact) -> None:
    organizations = [
        o for o in contact.field_groups.get("organizations", []) if not o.is_empty()
    ]
    if not organizations:
        return
    organization = organizations[0]
    if organization.name or organization.department:
        value = [organization.name]
        if organization.department:
            value.append(organization.department)
        card.add("org").value = value
    if organization.title:
        card.add("title").value = organization.title


def _write_simple(card: Any, contact: Contact, group: str, prop: str) -> None:
    for entry in contact.field_groups.get(group, []):
        if entry.value:
            card.add(prop).value = entry.value


def _write_birthday(card: Any, contact: Contact) -> None:
    birthday = contact.get_date_of_birth(DateType.STRING)
    if birthday:
        card.add("bday").value = birthday


def _write_gender(card: Any, contact: Contact) -> None:
    genders = [g for g in contact.field_groups.get("genders", []) if g.value]
    if genders:
        card.add("gender").value = GENDER_CODES.get(genders[0].value.lower(), "O")


def _write_addresses(card: Any, contact: Contact) -> None:
    for address in contact.field_groups.get("addresses", []):
        if address.is_empty():
            continue
        types = []
        if address.type in ADDRESS_TYPES:
            types.append(ADDRESS_TYPES[address.type])
        if address.primary:
            types.append("PREF")
        _add_typed(
            card,
            "adr",
            vobject.vcard.Address(
                street=address.street_address,
                city=address.city,
                region=address.region,
                code=address.postal_code,
                country=address.country or address.country_code,
                box=address.po_box,
                extended=address.extended_address,
            ),
            types,
        )


def _write_phones(card: Any, contact: Contact) -> None:
    for phone in contact.field_groups.get("phoneNumbers", []):
        if not phone.value:
            continue
        types = [PHONE_TYPES.get(phone.type, "VOICE")]
        if phone.primary:
            types.append("PREF")
        _add_typed(card, "tel", phone.value, types)


def _write_emails(card: Any, contact: Contact) -> None:
    for email in contact.field_groups.get("emailAddresses", []):
        if not email.value:
            continue
        types = ["INTERNET"]
        if email.type in EMAIL_TYPES:
            types.append(EMAIL_TYPES[email.type])
        if email.primary:
            types.append("PREF")
        _add_typed(card, "email", email.value, types)


def _write_urls(card: Any, contact: Contact) -> None:
    for url in contact.field_groups.get("urls", []):
        if url.value:
            card.add("url").value = url.value


def _write_categories(
    card: Any, contact: Contact, group_names: Mapping[str, str], starred_category: str
) -> None:
    categories: list[str] = []
    for resource_name in contact.group_resource_names():
        if resource_name == STARRED_GROUP and starred_category:
            name = starred_category
        else:
            name = group_names.get(resource_name, "")
        if name and name not in categories:
            categories.append(name)
    if categories:
        card.add("categories").value = categories


def _select_photo_url(contact: Contact, use_default_photo: bool) -> str:
    photos = [p for p in contact.field_groups.get("photos", []) if p.url]
    custom = next((p for p in photos if not p.default), None)
    if custom is not None:
        return str(custom.url)
    if use_default_photo and photos:
        return str(photos[0].url)
    return ""


def _write_photo(
    card: Any,
    contact: Contact,
    use_default_photo: bool,
    photo_loader: Callable[[str], bytes],
) -> None:
    url = _select_photo_url(contact, use_default_photo)
    if not url:
        return

    try:
        data = photo_loader(url)
        image_type = detect_image_type(data)
    except GContactVCardError as e:
        logger.warning(
            f"Could not embed photo of {contact.display_name}, "
            f"writing a reference instead: {e}"
        )
        line = card.add("photo")
        line.value = url
        line.params["VALUE"] = ["URI"]
        return

    line = card.add("photo")
    line.value = data
    line.encoding_param = "b"
    line.type_param = image_type.upper()
