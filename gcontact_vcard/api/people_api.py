"""
Google People API wrapper for contacts.

Provides a high-level interface to the contact endpoints of the People API:
- Listing contacts with pagination, sort order and a group filter
- Searching contacts (limited to a single page by the service)
- Reading, creating, updating (with etag precondition) and deleting contacts
- Starring contacts through the starred system group
- Uploading and deleting contact photos
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from google.oauth2.credentials import Credentials

from gcontact_vcard.api.base import GoogleServiceClient
from gcontact_vcard.contacts.contact import (
    DETAIL_PERSON_FIELDS,
    LIST_PERSON_FIELDS,
    Contact,
)
from gcontact_vcard.contacts.fields import READ_ONLY_GROUPS, entry_type_for
from gcontact_vcard.contacts.group import STARRED_GROUP
from gcontact_vcard.contacts.photo import detect_image_type, load_photo, shrink_photo
from gcontact_vcard.errors import ValidationError

# Page size limits of the People API
CONTACTS_MAX_PAGE_SIZE = 1000
SEARCH_MAX_PAGE_SIZE = 30
DEFAULT_PAGE_SIZE = 200

# Sort orders supported by people.connections.list
SORT_LAST_MODIFIED_ASCENDING = "LAST_MODIFIED_ASCENDING"
SORT_LAST_MODIFIED_DESCENDING = "LAST_MODIFIED_DESCENDING"
SORT_FIRST_NAME_ASCENDING = "FIRST_NAME_ASCENDING"
SORT_LAST_NAME_ASCENDING = "LAST_NAME_ASCENDING"

VALID_SORT_ORDERS = (
    SORT_LAST_MODIFIED_ASCENDING,
    SORT_LAST_MODIFIED_DESCENDING,
    SORT_FIRST_NAME_ASCENDING,
    SORT_LAST_NAME_ASCENDING,
)

logger = logging.getLogger(__name__)


def _field_mask(field_groups: Iterable[str]) -> str:
    groups = list(dict.fromkeys(field_groups))
    if "metadata" not in groups:
        groups.append("metadata")
    return ",".join(groups)


class PeopleAPI(GoogleServiceClient):
    """
    Google People API wrapper for contact operations.

    Attributes:
        credentials: Google OAuth2 credentials
        page_size: Contacts per page when listing (capped at 1000)
        search_page_size: Results of a search (capped at 30)
        person_fields: Field groups read for single contacts
        list_person_fields: Field groups read when listing

    Usage:
        api = PeopleAPI(credentials)

        # All contacts of a group, by last name
        contacts = api.list_contacts(group_resource_name="contactGroups/abc")

        # Edit a contact
        contact = api.get_contact("people/c12345")
        contact.set_primary_item("emailAddresses", 0)
        contact = api.update_contact(contact.resource_name, contact)

        # Star it
        api.set_starred(contact.resource_name, True)
    """

    def __init__(
        self,
        credentials: Credentials | None,
        page_size: int = DEFAULT_PAGE_SIZE,
        search_page_size: int = SEARCH_MAX_PAGE_SIZE,
        person_fields: Iterable[str] = DETAIL_PERSON_FIELDS,
        list_person_fields: Iterable[str] = LIST_PERSON_FIELDS,
        service: Any = None,
    ):
        """
        Initialize the People API wrapper.

        Args:
            credentials: Valid Google OAuth2 credentials with contacts scope
            page_size: Contacts per page when listing (default 200, max 1000)
            search_page_size: Maximum search results (default and max 30)
            person_fields: Field groups read by get/create/update
            list_person_fields: Field groups read by list/search
            service: Prebuilt service resource (used by tests)
        """
        super().__init__(credentials, service)
        self.page_size = min(page_size, CONTACTS_MAX_PAGE_SIZE)
        self.search_page_size = min(search_page_size, SEARCH_MAX_PAGE_SIZE)
        self.person_fields = list(person_fields)
        self.list_person_fields = list(list_person_fields)

    def add_person_fields(self, *field_groups: str, listing: bool = False) -> None:
        """
        Request additional field groups.

        Args:
            field_groups: Group names to add
            listing: Add to the listing fields instead of the detail fields

        Raises:
            ValidationError: If a group is unknown
        """
        target = self.list_person_fields if listing else self.person_fields
        for group in field_groups:
            entry_type_for(group)
            if group not in target:
                target.append(group)

    # ========== Listing and search ==========

    def list_contacts(
        self,
        sort_order: str = SORT_LAST_NAME_ASCENDING,
        group_resource_name: str = "",
        field_groups: Iterable[str] | None = None,
    ) -> list[Contact]:
        """
        List all contacts of the authenticated user.

        Follows nextPageToken until the last page. Any failed page fails the
        whole call; partial results are never returned.

        Args:
            sort_order: One of VALID_SORT_ORDERS
            group_resource_name: Only return members of this group
            field_groups: Field groups to read (default: list_person_fields)

        Returns:
            Contacts in service order

        Raises:
            ValidationError: If the sort order is not supported
            RemoteApiError: If a page cannot be fetched
        """
        if sort_order not in VALID_SORT_ORDERS:
            raise ValidationError(f"Invalid sort order: {sort_order}")

        field_groups = list(
            self.list_person_fields if field_groups is None else field_groups
        )
        if group_resource_name and "memberships" not in field_groups:
            field_groups.append("memberships")
        mask = _field_mask(field_groups)

        logger.debug(
            f"Listing contacts (sort_order={sort_order}, "
            f"group={group_resource_name or 'all'})"
        )

        contacts: list[Contact] = []
        page_token: str | None = None
        page_count = 0

        while True:
            params: dict[str, Any] = {
                "resourceName": "people/me",
                "personFields": mask,
                "pageSize": self.page_size,
                "sortOrder": sort_order,
            }
            if page_token:
                params["pageToken"] = page_token

            def execute_list(p: dict[str, Any] = params) -> Any:
                return self.service.people().connections().list(**p).execute()

            response = self._execute(execute_list, "list_contacts")
            page_count += 1

            for person in response.get("connections", []):
                contact = Contact.from_api_response(person, field_groups)
                if group_resource_name and not contact.belongs_to_group(
                    group_resource_name
                ):
                    continue
                contacts.append(contact)

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        logger.info(f"Listed {len(contacts)} contacts ({page_count} pages)")
        return contacts

    def search_contacts(self, query: str) -> list[Contact]:
        """
        Search contacts by name, nickname, email, phone or organization.

        The service only answers searches after a warmup request with an
        empty query, so one is sent first. Only a single page is fetched and
        no total count is available: if the result list has
        search_page_size entries there may be more matches.

        Args:
            query: Prefix query string

        Returns:
            Matching contacts, at most search_page_size
        """
        mask = _field_mask(self.list_person_fields)
        logger.debug(f"Searching contacts: {query!r}")

        def execute_warmup() -> Any:
            return (
                self.service.people()
                .searchContacts(query="", readMask=mask)
                .execute()
            )

        def execute_search() -> Any:
            return (
                self.service.people()
                .searchContacts(
                    query=query, readMask=mask, pageSize=self.search_page_size
                )
                .execute()
            )

        self._execute(execute_warmup, "search_contacts(warmup)")
        response = self._execute(execute_search, f"search_contacts({query!r})")

        contacts = [
            Contact.from_api_response(result.get("person", {}), self.list_person_fields)
            for result in response.get("results", [])
        ]
        logger.info(f"Search for {query!r} returned {len(contacts)} contacts")
        return contacts

    # ========== Single contacts ==========

    def get_contact(self, resource_name: str) -> Contact:
        """
        Get a single contact by resource name.

        Raises:
            NotFoundError: If the contact does not exist
        """
        logger.debug(f"Getting contact: {resource_name}")
        mask = _field_mask(self.person_fields)

        def execute_get() -> Any:
            return (
                self.service.people()
                .get(resourceName=resource_name, personFields=mask)
                .execute()
            )

        response = self._execute(execute_get, f"get_contact({resource_name})")
        return Contact.from_api_response(response, self.person_fields)

    def create_contact(self, contact: Contact) -> Contact:
        """
        Create a new contact.

        Args:
            contact: Contact to create (resource_name and etag are ignored)

        Returns:
            Created Contact as returned by the service
        """
        logger.debug(f"Creating contact: {contact.display_name}")
        body = contact.to_api_format()
        mask = _field_mask(self.person_fields)

        def execute_create() -> Any:
            return (
                self.service.people()
                .createContact(body=body, personFields=mask)
                .execute()
            )

        response = self._execute(execute_create, "create_contact")
        created = Contact.from_api_response(response, self.person_fields)
        logger.info(f"Created contact: {created.resource_name}")
        return created

    def update_contact(
        self, resource_name: str, contact: Contact, etag: str | None = None
    ) -> Contact:
        """
        Update an existing contact.

        The etag is the optimistic concurrency token: the service rejects the
        update if the contact changed since the etag was read.

        Args:
            resource_name: Contact to update (e.g., "people/c12345")
            contact: Contact with updated data
            etag: Etag read together with the data (default: contact.etag)

        Returns:
            Updated Contact with the new etag

        Raises:
            ValidationError: If resource_name or etag is missing
            StaleWriteError: If the etag is outdated
            NotFoundError: If the contact does not exist
        """
        target_etag = etag or contact.etag
        if not resource_name:
            raise ValidationError("resource_name is required for update")
        if not target_etag:
            raise ValidationError("etag is required for update")

        update_fields = [
            group
            for group in contact.field_groups
            if group not in READ_ONLY_GROUPS
        ]
        if not update_fields:
            raise ValidationError("Contact has no writable field groups")

        logger.debug(f"Updating contact: {resource_name}")
        body = contact.to_api_format()
        body["etag"] = target_etag
        body["resourceName"] = resource_name
        mask = _field_mask(self.person_fields)

        def execute_update() -> Any:
            return (
                self.service.people()
                .updateContact(
                    resourceName=resource_name,
                    body=body,
                    updatePersonFields=",".join(update_fields),
                    personFields=mask,
                )
                .execute()
            )

        response = self._execute(execute_update, f"update_contact({resource_name})")
        updated = Contact.from_api_response(response, self.person_fields)
        logger.info(f"Updated contact: {resource_name}")
        return updated

    def delete_contact(self, resource_name: str) -> None:
        """
        Delete a contact.

        Raises:
            NotFoundError: If the contact does not exist
        """
        logger.debug(f"Deleting contact: {resource_name}")

        def execute_delete() -> Any:
            return (
                self.service.people()
                .deleteContact(resourceName=resource_name)
                .execute()
            )

        self._execute(execute_delete, f"delete_contact({resource_name})")
        logger.info(f"Deleted contact: {resource_name}")

    def set_starred(self, resource_name: str, starred: bool) -> None:
        """
        Star or unstar a contact.

        Stars are memberships in the starred system group, so this modifies
        that group's members.
        """
        body: dict[str, Any] = (
            {"resourceNamesToAdd": [resource_name]}
            if starred
            else {"resourceNamesToRemove": [resource_name]}
        )

        def execute_modify() -> Any:
            return (
                self.service.contactGroups()
                .members()
                .modify(resourceName=STARRED_GROUP, body=body)
                .execute()
            )

        self._execute(execute_modify, f"set_starred({resource_name})")
        logger.info(f"{'Starred' if starred else 'Unstarred'} contact: {resource_name}")

    # ========== Photo Methods ==========

    def set_photo(self, resource_name: str, source: str | Path) -> Contact | None:
        """
        Set a contact photo from a URL or local file.

        Raises:
            NotFoundError: If the source does not exist
            UnsupportedMediaTypeError: If the image is not JPEG, PNG, GIF or BMP
        """
        return self.set_photo_bytes(resource_name, load_photo(source))

    def set_photo_bytes(self, resource_name: str, photo_data: bytes) -> Contact | None:
        """
        Upload raw photo data for a contact.

        Args:
            resource_name: Contact's resource name (e.g., "people/c12345")
            photo_data: Image data (JPEG, PNG, GIF or BMP)

        Returns:
            Contact returned by the service, if any

        Raises:
            UnsupportedMediaTypeError: If the image type is not supported
        """
        if not resource_name:
            raise ValidationError("resource_name is required")
        image_type = detect_image_type(photo_data)
        photo_data = shrink_photo(photo_data)

        logger.debug(
            f"Uploading {image_type} photo ({len(photo_data)} bytes) "
            f"for contact: {resource_name}"
        )
        body = {
            "photoBytes": base64.b64encode(photo_data).decode("utf-8"),
            "personFields": _field_mask(self.person_fields),
        }

        def execute_upload() -> Any:
            return (
                self.service.people()
                .updateContactPhoto(resourceName=resource_name, body=body)
                .execute()
            )

        response = self._execute(execute_upload, f"set_photo({resource_name})")
        logger.info(f"Uploaded photo for contact: {resource_name}")
        person = (response or {}).get("person")
        return Contact.from_api_response(person, self.person_fields) if person else None

    def delete_photo(self, resource_name: str) -> None:
        """Delete a contact's photo."""
        if not resource_name:
            raise ValidationError("resource_name is required")
        logger.debug(f"Deleting photo for contact: {resource_name}")

        def execute_delete_photo() -> Any:
            return (
                self.service.people()
                .deleteContactPhoto(resourceName=resource_name)
                .execute()
            )

        self._execute(execute_delete_photo, f"delete_photo({resource_name})")
        logger.info(f"Deleted photo for contact: {resource_name}")
