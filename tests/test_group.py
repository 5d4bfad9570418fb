"""
Unit tests for the ContactGroup data model.

Tests API conversion, display names and system group detection.
"""

from gcontact_vcard.contacts.group import (
    GROUP_TYPE_SYSTEM_CONTACT_GROUP,
    GROUP_TYPE_UNSPECIFIED,
    GROUP_TYPE_USER_CONTACT_GROUP,
    MY_CONTACTS_GROUP,
    STARRED_GROUP,
    SYSTEM_GROUP_NAMES,
    ContactGroup,
    is_group_resource_name,
)


class TestContactGroupFromApi:
    """Tests for ContactGroup.from_api_response."""

    def test_full_response(self):
        """Test conversion of a complete API response."""
        group = ContactGroup.from_api_response(
            {
                "resourceName": "contactGroups/abc",
                "etag": "e1",
                "name": "Family",
                "formattedName": "Family",
                "groupType": GROUP_TYPE_USER_CONTACT_GROUP,
                "memberCount": 2,
                "memberResourceNames": ["people/c1", "people/c2"],
            }
        )

        assert group.resource_name == "contactGroups/abc"
        assert group.etag == "e1"
        assert group.member_count == 2
        assert group.member_resource_names == ["people/c1", "people/c2"]
        assert group.is_user_group()

    def test_minimal_response(self):
        """Test that missing keys fall back to defaults."""
        group = ContactGroup.from_api_response({"resourceName": "contactGroups/x"})

        assert group.name == ""
        assert group.group_type == GROUP_TYPE_UNSPECIFIED
        assert group.member_count == 0
        assert group.member_resource_names == []
        assert group.formatted_name is None


class TestContactGroupToApi:
    """Tests for ContactGroup.to_api_format."""

    def test_includes_etag_when_set(self):
        """Test the update body."""
        group = ContactGroup("contactGroups/a", "e1", "Friends")
        assert group.to_api_format() == {"name": "Friends", "etag": "e1"}

    def test_create_body(self):
        """Test the create body without etag."""
        group = ContactGroup("", "", "Friends", member_count=4)
        assert group.to_api_format() == {"name": "Friends"}


class TestContactGroupKinds:
    """Tests for user/system group detection."""

    def test_display_name_prefers_formatted_name(self):
        """Test that the localized name is shown for system groups."""
        group = ContactGroup(
            MY_CONTACTS_GROUP,
            "",
            "myContacts",
            GROUP_TYPE_SYSTEM_CONTACT_GROUP,
            formatted_name="My Contacts",
        )
        assert group.display_name == "My Contacts"
        assert group.is_system_group()
        assert not group.is_user_group()

    def test_predefined_name_is_system(self):
        """Test that predefined resource names count as system groups."""
        group = ContactGroup(STARRED_GROUP, "", "starred")
        assert STARRED_GROUP in SYSTEM_GROUP_NAMES
        assert group.is_system_group()

    def test_user_group(self):
        """Test a regular user group."""
        group = ContactGroup(
            "contactGroups/1a2b", "", "Work", GROUP_TYPE_USER_CONTACT_GROUP
        )
        assert group.display_name == "Work"
        assert not group.is_system_group()

    def test_repr(self):
        """Test the readable representation."""
        group = ContactGroup("contactGroups/a", "", "Friends", member_count=3)
        assert "Friends" in repr(group)
        assert "member_count=3" in repr(group)


class TestIsGroupResourceName:
    """Tests for is_group_resource_name."""

    def test_values(self):
        """Test recognized and rejected values."""
        assert is_group_resource_name("contactGroups/abc")
        assert not is_group_resource_name("contactGroups/")
        assert not is_group_resource_name("Friends")
