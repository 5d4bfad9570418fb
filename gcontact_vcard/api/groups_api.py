"""
Google People API wrapper for contact groups.

Provides a high-level interface to the contactGroups endpoints:
- Listing groups by type, as records or as a resource name -> name map
- Resolving a group name to its resource name
- Creating, renaming and deleting groups (optionally with their members)
- Adding and removing group members
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from google.oauth2.credentials import Credentials

from gcontact_vcard.api.base import GoogleServiceClient
from gcontact_vcard.contacts.group import (
    GROUP_TYPE_SYSTEM_CONTACT_GROUP,
    GROUP_TYPE_USER_CONTACT_GROUP,
    ContactGroup,
)
from gcontact_vcard.errors import ValidationError

GROUPS_MAX_PAGE_SIZE = 1000
DEFAULT_GROUP_PAGE_SIZE = 50
MAX_MEMBERS_PER_REQUEST = 1000

GROUP_FIELDS = "name,groupType,memberCount,metadata"

# Group type filters for list_groups
GROUP_TYPE_ALL = ""
VALID_GROUP_TYPES = (
    GROUP_TYPE_ALL,
    GROUP_TYPE_USER_CONTACT_GROUP,
    GROUP_TYPE_SYSTEM_CONTACT_GROUP,
)

logger = logging.getLogger(__name__)


class ListShape(Enum):
    """Result shape of ContactGroupsAPI.list_groups()."""

    DATA = "data"
    NAMES = "names"


class ContactGroupsAPI(GoogleServiceClient):
    """
    Google People API wrapper for contact group operations.

    Usage:
        groups_api = ContactGroupsAPI(credentials)

        # resource name -> name of all user groups
        names = groups_api.list_groups(
            GROUP_TYPE_USER_CONTACT_GROUP, shape=ListShape.NAMES
        )

        # Find or create a group
        resource_name = groups_api.resolve_name_to_id("Family")
        if not resource_name:
            resource_name = groups_api.create_group("Family").resource_name
    """

    def __init__(
        self,
        credentials: Credentials | None,
        page_size: int = DEFAULT_GROUP_PAGE_SIZE,
        service: Any = None,
    ):
        super().__init__(credentials, service)
        self.page_size = min(page_size, GROUPS_MAX_PAGE_SIZE)

    def list_groups(
        self,
        group_type: str = GROUP_TYPE_ALL,
        shape: ListShape = ListShape.DATA,
    ) -> list[ContactGroup] | dict[str, str]:
        """
        List the contact groups of the authenticated user.

        Args:
            group_type: GROUP_TYPE_ALL, USER_CONTACT_GROUP or SYSTEM_CONTACT_GROUP
            shape: ListShape.DATA for ContactGroup records, ListShape.NAMES
                for a {resource_name: formatted name} mapping

        Returns:
            Groups in service order, in the requested shape

        Raises:
            ValidationError: If the group type is not supported
            RemoteApiError: If a page cannot be fetched
        """
        if group_type not in VALID_GROUP_TYPES:
            raise ValidationError(f"Invalid group type: {group_type}")

        logger.debug(f"Listing contact groups (type={group_type or 'all'})")

        groups: list[ContactGroup] = []
        page_token: str | None = None

        while True:
            params: dict[str, Any] = {
                "pageSize": self.page_size,
                "groupFields": GROUP_FIELDS,
            }
            if page_token:
                params["pageToken"] = page_token

            def execute_list(p: dict[str, Any] = params) -> Any:
                return self.service.contactGroups().list(**p).execute()

            response = self._execute(execute_list, "list_groups")

            for group_data in response.get("contactGroups", []):
                group = ContactGroup.from_api_response(group_data)
                if group_type and group.group_type != group_type:
                    continue
                groups.append(group)

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        logger.info(f"Listed {len(groups)} contact groups")
        if shape is ListShape.NAMES:
            return {g.resource_name: g.display_name for g in groups}
        return groups

    def group_names(self, group_type: str = GROUP_TYPE_ALL) -> dict[str, str]:
        """Shortcut for list_groups(group_type, ListShape.NAMES)."""
        names = self.list_groups(group_type, ListShape.NAMES)
        return names if isinstance(names, dict) else {}

    def resolve_name_to_id(self, name: str) -> str:
        """
        Find the resource name of a group by its name.

        Returns:
            The group's resource name, or "" if no group has that name

        Raises:
            RemoteApiError: If the groups cannot be listed
        """
        for resource_name, group_name in self.group_names().items():
            if group_name == name:
                return resource_name
        return ""

    def get_group(self, resource_name: str, max_members: int = 0) -> ContactGroup:
        """
        Get a single contact group.

        Args:
            resource_name: Group's resource name (e.g., "contactGroups/abc123")
            max_members: Number of member resource names to include (max 1000)

        Raises:
            NotFoundError: If the group does not exist
        """
        logger.debug(f"Getting contact group: {resource_name}")
        params: dict[str, Any] = {
            "resourceName": resource_name,
            "groupFields": GROUP_FIELDS,
        }
        if max_members > 0:
            params["maxMembers"] = min(max_members, MAX_MEMBERS_PER_REQUEST)

        def execute_get() -> Any:
            return self.service.contactGroups().get(**params).execute()

        response = self._execute(execute_get, f"get_group({resource_name})")
        return ContactGroup.from_api_response(response)

    def create_group(self, name: str) -> ContactGroup:
        """
        Create a new contact group.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a group with this name already exists
        """
        if not name.strip():
            raise ValidationError("Group name cannot be empty")
        logger.debug(f"Creating contact group: {name}")
        body = {"contactGroup": {"name": name}}

        def execute_create() -> Any:
            return self.service.contactGroups().create(body=body).execute()

        response = self._execute(execute_create, f"create_group({name})")
        group = ContactGroup.from_api_response(response)
        logger.info(f"Created contact group: {group.resource_name} ({name})")
        return group

    def rename_group(
        self, resource_name: str, name: str, etag: str | None = None
    ) -> ContactGroup:
        """
        Rename a contact group.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If another group already has this name
            NotFoundError: If the group does not exist
        """
        if not name.strip():
            raise ValidationError("Group name cannot be empty")
        logger.debug(f"Renaming contact group: {resource_name}")

        body: dict[str, Any] = {
            "contactGroup": {"name": name},
            "updateGroupFields": "name",
        }
        if etag:
            body["contactGroup"]["etag"] = etag

        def execute_update() -> Any:
            return (
                self.service.contactGroups()
                .update(resourceName=resource_name, body=body)
                .execute()
            )

        response = self._execute(execute_update, f"rename_group({resource_name})")
        logger.info(f"Renamed contact group: {resource_name} -> {name}")
        return ContactGroup.from_api_response(response)

    def delete_group(self, resource_name: str, delete_contacts: bool = False) -> None:
        """
        Delete a contact group.

        Args:
            resource_name: Group's resource name
            delete_contacts: Also delete every contact in the group. This
                cannot be undone.

        Raises:
            NotFoundError: If the group does not exist
        """
        if delete_contacts:
            logger.warning(
                f"Deleting contact group {resource_name} together with its contacts"
            )
        else:
            logger.debug(f"Deleting contact group: {resource_name}")

        def execute_delete() -> Any:
            return (
                self.service.contactGroups()
                .delete(resourceName=resource_name, deleteContacts=delete_contacts)
                .execute()
            )

        self._execute(execute_delete, f"delete_group({resource_name})")
        logger.info(f"Deleted contact group: {resource_name}")

    def add_contacts_to_group(
        self, resource_name: str, contact_resource_names: list[str]
    ) -> dict[str, Any]:
        """Add contacts to a group."""
        return self._modify_members(resource_name, add=contact_resource_names)

    def remove_contacts_from_group(
        self, resource_name: str, contact_resource_names: list[str]
    ) -> dict[str, Any]:
        """Remove contacts from a group."""
        return self._modify_members(resource_name, remove=contact_resource_names)

    def _modify_members(
        self,
        resource_name: str,
        add: list[str] | None = None,
        remove: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Modify the members of a contact group.

        Returns:
            Response with notFoundResourceNames and
            canNotRemoveLastContactGroupResourceNames, when reported
        """
        if not add and not remove:
            raise ValidationError("No contacts to add or remove")

        body: dict[str, Any] = {}
        if add:
            body["resourceNamesToAdd"] = add
        if remove:
            body["resourceNamesToRemove"] = remove

        def execute_modify() -> Any:
            return (
                self.service.contactGroups()
                .members()
                .modify(resourceName=resource_name, body=body)
                .execute()
            )

        response = self._execute(execute_modify, f"modify_members({resource_name})")
        logger.info(
            f"Modified members of {resource_name}: "
            f"added {len(add or [])}, removed {len(remove or [])}"
        )
        return dict(response or {})
