"""
ContactGroup data model for Google contact groups.

Provides the ContactGroup representation and the constants for group
types and the predefined system groups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Group types as defined by Google People API
GROUP_TYPE_UNSPECIFIED = "GROUP_TYPE_UNSPECIFIED"
GROUP_TYPE_USER_CONTACT_GROUP = "USER_CONTACT_GROUP"
GROUP_TYPE_SYSTEM_CONTACT_GROUP = "SYSTEM_CONTACT_GROUP"

# Predefined system groups
STARRED_GROUP = "contactGroups/starred"
MY_CONTACTS_GROUP = "contactGroups/myContacts"
ALL_GROUP = "contactGroups/all"
CHAT_BUDDIES_GROUP = "contactGroups/chatBuddies"
FRIENDS_GROUP = "contactGroups/friends"
FAMILY_GROUP = "contactGroups/family"
COWORKERS_GROUP = "contactGroups/coworkers"
BLOCKED_GROUP = "contactGroups/blocked"

SYSTEM_GROUP_NAMES = frozenset(
    {
        STARRED_GROUP,
        MY_CONTACTS_GROUP,
        ALL_GROUP,
        CHAT_BUDDIES_GROUP,
        FRIENDS_GROUP,
        FAMILY_GROUP,
        COWORKERS_GROUP,
        BLOCKED_GROUP,
    }
)

GROUP_RESOURCE_PREFIX = "contactGroups/"


@dataclass
class ContactGroup:
    """
    A contact group (label) of the authenticated user.

    Attributes:
        resource_name: Google's unique ID (e.g., "contactGroups/123abc")
        etag: Required for updates, prevents concurrent modification conflicts
        name: Group name, unique per account
        group_type: USER_CONTACT_GROUP or SYSTEM_CONTACT_GROUP
        member_count: Number of members reported by the API
        member_resource_names: Contact resource names (only when requested)
        formatted_name: Localized name for system groups, else same as name
    """

    resource_name: str
    etag: str
    name: str
    group_type: str = GROUP_TYPE_UNSPECIFIED

    member_count: int = 0
    member_resource_names: list[str] = field(default_factory=list)
    formatted_name: str | None = None

    @classmethod
    def from_api_response(cls, group_data: dict[str, Any]) -> ContactGroup:
        """
        Create a ContactGroup from a Google People API response.

        Example API response structure::

            {
                'resourceName': 'contactGroups/123abc',
                'etag': 'xyz789',
                'name': 'Family',
                'formattedName': 'Family',
                'groupType': 'USER_CONTACT_GROUP',
                'memberCount': 5,
                'memberResourceNames': ['people/c1', 'people/c2']
            }
        """
        return cls(
            resource_name=group_data.get("resourceName", ""),
            etag=group_data.get("etag", ""),
            name=group_data.get("name", ""),
            group_type=group_data.get("groupType", GROUP_TYPE_UNSPECIFIED),
            member_count=group_data.get("memberCount", 0),
            member_resource_names=list(group_data.get("memberResourceNames", [])),
            formatted_name=group_data.get("formattedName"),
        )

    def to_api_format(self) -> dict[str, Any]:
        """
        Convert to the contactGroup body used by create/update.

        Only the name is writable.
        """
        group: dict[str, Any] = {"name": self.name}
        if self.etag:
            group["etag"] = self.etag
        return group

    @property
    def display_name(self) -> str:
        return self.formatted_name or self.name

    def is_user_group(self) -> bool:
        return self.group_type == GROUP_TYPE_USER_CONTACT_GROUP

    def is_system_group(self) -> bool:
        """
        Check if this is a system contact group.

        Returns:
            True for SYSTEM_CONTACT_GROUP types and the predefined groups
        """
        return (
            self.group_type == GROUP_TYPE_SYSTEM_CONTACT_GROUP
            or self.resource_name in SYSTEM_GROUP_NAMES
        )

    def __repr__(self) -> str:
        """Return a readable string representation."""
        return (
            f"ContactGroup(resource_name={self.resource_name!r}, "
            f"name={self.name!r}, "
            f"group_type={self.group_type!r}, "
            f"member_count={self.member_count})"
        )


def is_group_resource_name(value: str) -> bool:
    """Check whether a value looks like a contact group resource name."""
    return value.startswith(GROUP_RESOURCE_PREFIX) and len(value) > len(
        GROUP_RESOURCE_PREFIX
    )
