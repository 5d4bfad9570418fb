"""
Tests for vCard export runs.

Runs VCardExporter against the in-memory service from conftest and reads
the written text back with the vCard reader.
"""

import pytest

from gcontact_vcard.contacts.group import MY_CONTACTS_GROUP, STARRED_GROUP
from gcontact_vcard.errors import NotFoundError, ValidationError
from gcontact_vcard.mapping.vcard_in import parse_vcards
from gcontact_vcard.transfer.exporter import ExportOptions, VCardExporter


@pytest.fixture
def exporter(people_api, groups_api, png_bytes):
    return VCardExporter(people_api, groups_api, photo_loader=lambda url: png_bytes)


class TestExportScope:
    """Tests for the export scope selected by resource name."""

    def test_all_contacts(self, exporter, fake_service):
        """Test exporting every contact."""
        fake_service.add_person(given="Ada", family="Lovelace")
        fake_service.add_person(given="Charles", family="Babbage")

        cards = parse_vcards(exporter.export())

        assert exporter.export_count == 2
        families = [c.contact.field_groups["names"][0].family_name for c in cards]
        assert families == ["Lovelace", "Babbage"]

    def test_group_members(self, exporter, fake_service):
        """Test exporting the members of a group."""
        group = fake_service.add_group("Friends")
        fake_service.add_person(given="Ada", groups=(group,))
        fake_service.add_person(given="Charles")

        cards = parse_vcards(exporter.export(group))

        assert [c.contact.field_groups["names"][0].given_name for c in cards] == [
            "Ada"
        ]

    def test_single_contact(self, exporter, fake_service):
        """Test exporting one contact."""
        fake_service.add_person(given="Ada")
        charles = fake_service.add_person(given="Charles")

        cards = parse_vcards(exporter.export(charles))

        assert len(cards) == 1
        assert exporter.export_count == 1

    def test_single_contact_missing(self, exporter):
        """Test that unknown contacts raise NotFoundError."""
        with pytest.raises(NotFoundError):
            exporter.export("people/c9999")

    def test_nameless_contacts_skipped(self, exporter, fake_service):
        """Test that contacts without name are skipped in bulk exports."""
        fake_service.add_person(given="Ada")
        fake_service.add_person(emails=("anon@example.com",))

        cards = parse_vcards(exporter.export())

        assert len(cards) == 1
        assert exporter.skipped == ["[unset]"]

    def test_nameless_single_contact(self, exporter, fake_service):
        """Test that a single nameless contact fails."""
        anon = fake_service.add_person(emails=("anon@example.com",))
        with pytest.raises(ValidationError):
            exporter.export(anon)

    def test_empty_account(self, exporter):
        """Test exporting without contacts."""
        assert exporter.export() == ""
        assert exporter.export_count == 0


class TestCategories:
    """Tests for CATEGORIES written from memberships."""

    @pytest.fixture
    def member(self, fake_service):
        friends = fake_service.add_group("Friends")
        return fake_service.add_person(
            given="Ada", groups=(friends, MY_CONTACTS_GROUP, STARRED_GROUP)
        )

    def _categories(self, exporter, resource_name):
        return parse_vcards(exporter.export(resource_name))[0].categories

    def test_user_groups_only(self, exporter, member):
        """Test the default mapping of user groups."""
        assert self._categories(exporter, member) == ["Friends"]

    def test_system_groups(self, people_api, groups_api, member):
        """Test including system groups, starred under its own name."""
        exporter = VCardExporter(
            people_api, groups_api, ExportOptions(map_system_groups=True)
        )
        assert self._categories(exporter, member) == [
            "Friends",
            "My Contacts",
            "Starred",
        ]

    def test_starred_category(self, people_api, groups_api, member):
        """Test the category written for starred contacts."""
        exporter = VCardExporter(
            people_api, groups_api, ExportOptions(starred_category="Favorites")
        )
        assert self._categories(exporter, member) == ["Friends", "Favorites"]

    def test_disabled(self, people_api, groups_api, fake_service, member):
        """Test that no categories and no group lookup happen when disabled."""
        exporter = VCardExporter(
            people_api,
            groups_api,
            ExportOptions(map_groups_to_category=False, starred_category="Fav"),
        )

        assert self._categories(exporter, member) == []
        assert all(name != "contactGroups.list" for name, _ in fake_service.calls)


class TestPhotosAndFiles:
    """Tests for photo embedding and file output."""

    def test_photo_embedded(self, exporter, fake_service, png_bytes):
        """Test that custom photos are embedded."""
        fake_service.add_person(
            given="Ada", photos=[{"url": "https://photos.example.com/ada"}]
        )

        cards = parse_vcards(exporter.export())

        assert cards[0].photo_data == png_bytes

    def test_photo_disabled(self, people_api, groups_api, fake_service):
        """Test export_photo=False."""
        fake_service.add_person(
            given="Ada", photos=[{"url": "https://photos.example.com/ada"}]
        )
        exporter = VCardExporter(
            people_api, groups_api, ExportOptions(export_photo=False)
        )

        cards = parse_vcards(exporter.export())

        assert cards[0].photo_data is None
        assert cards[0].photo_url == ""

    def test_export_to_file_charset(
        self, people_api, groups_api, fake_service, tmp_path
    ):
        """Test writing the file in the configured charset."""
        fake_service.add_person(given="Jürgen", family="Müller")
        exporter = VCardExporter(
            people_api, groups_api, ExportOptions(charset="latin-1")
        )
        path = tmp_path / "out.vcf"

        assert exporter.export_to_file(path) == 1

        text = path.read_text(encoding="latin-1")
        assert "Müller" in text
        assert text.startswith("BEGIN:VCARD")
