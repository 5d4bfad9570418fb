"""
Shared fixtures for the gcontact_vcard tests.

FakePeopleService stands in for the googleapiclient People API resource.
It answers the same chained calls (service.people().get(...).execute())
from an in-memory directory of persons and contact groups and raises real
HttpError instances for 400/404/409 answers.
"""

import io
import json
import logging
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError
from PIL import Image

from gcontact_vcard.api.groups_api import ContactGroupsAPI
from gcontact_vcard.api.people_api import PeopleAPI
from gcontact_vcard.utils.logging import ROOT_LOGGER_NAME

SEARCH_PAGE_LIMIT = 30


def make_http_error(status: int, status_str: str = "", message: str = "") -> HttpError:
    """Build an HttpError with a Google style JSON error body."""
    resp = MagicMock()
    resp.status = status
    resp.reason = message or "error"
    content = json.dumps(
        {"error": {"code": status, "message": message, "status": status_str}}
    ).encode("utf-8")
    return HttpError(resp, content)


def make_image_bytes(
    image_format: str = "PNG", size: tuple[int, int] = (8, 8)
) -> bytes:
    """Create a small solid-colour image."""
    output = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(output, format=image_format)
    return output.getvalue()


class FakeRequest:
    """Deferred call returned by the fake resources; execute() runs it."""

    def __init__(self, handler: Callable[[], Any]):
        self._handler = handler

    def execute(self) -> Any:
        return self._handler()


class FakePeopleService:
    """
    In-memory People API service.

    Attributes:
        persons: Stored person dictionaries by resource name, in creation order
        groups: Stored contact group dictionaries by resource name
        calls: (method, kwargs) of every request made
        uploaded_photos: Raw photo bodies by resource name
    """

    def __init__(self) -> None:
        self.persons: dict[str, dict[str, Any]] = {}
        self.groups: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.uploaded_photos: dict[str, str] = {}
        self.search_warmed_up = False
        self._next_id = 1
        for system_id, name in (("myContacts", "My Contacts"), ("starred", "Starred")):
            self.groups[f"contactGroups/{system_id}"] = {
                "resourceName": f"contactGroups/{system_id}",
                "etag": "g-etag-1",
                "name": system_id,
                "formattedName": name,
                "groupType": "SYSTEM_CONTACT_GROUP",
            }

    # ----- helpers for tests -----

    def _new_id(self) -> str:
        value = self._next_id
        self._next_id += 1
        return f"{value:04d}"

    def add_person(
        self,
        given: str = "",
        family: str = "",
        emails: tuple[str, ...] = (),
        phones: tuple[str, ...] = (),
        groups: tuple[str, ...] = (),
        **extra: Any,
    ) -> str:
        """Store a person directly and return its resource name."""
        person: dict[str, Any] = dict(extra)
        if given or family:
            person["names"] = [{"givenName": given, "familyName": family}]
        if emails:
            person["emailAddresses"] = [{"value": e} for e in emails]
        if phones:
            person["phoneNumbers"] = [{"value": p} for p in phones]
        if groups:
            person["memberships"] = [
                {"contactGroupMembership": {"contactGroupResourceName": g}}
                for g in groups
            ]
        return self._store_new_person(person)

    def add_group(self, name: str) -> str:
        resource_name = f"contactGroups/g{self._new_id()}"
        self.groups[resource_name] = {
            "resourceName": resource_name,
            "etag": "g-etag-1",
            "name": name,
            "formattedName": name,
            "groupType": "USER_CONTACT_GROUP",
        }
        return resource_name

    def members_of(self, group_resource_name: str) -> list[str]:
        return [
            resource
            for resource, person in self.persons.items()
            if group_resource_name in _membership_names(person)
        ]

    # ----- storage -----

    def _store_new_person(self, body: dict[str, Any]) -> str:
        person_id = self._new_id()
        resource_name = f"people/c{person_id}"
        person = {k: v for k, v in body.items() if k not in ("resourceName", "etag")}
        person["resourceName"] = resource_name
        person["etag"] = "etag-1"
        person["metadata"] = {
            "sources": [
                {
                    "type": "CONTACT",
                    "id": person_id,
                    "etag": "src-etag-1",
                    "updateTime": "2024-03-01T10:00:00.000Z",
                }
            ]
        }
        _fill_display_names(person)
        self.persons[resource_name] = person
        return resource_name

    def _person(self, resource_name: str) -> dict[str, Any]:
        if resource_name not in self.persons:
            raise make_http_error(404, "NOT_FOUND", "Requested entity was not found.")
        return self.persons[resource_name]

    def _group(self, resource_name: str) -> dict[str, Any]:
        if resource_name not in self.groups:
            raise make_http_error(404, "NOT_FOUND", "Requested entity was not found.")
        return self.groups[resource_name]

    def _group_view(
        self, group: dict[str, Any], max_members: int = 0
    ) -> dict[str, Any]:
        view = dict(group)
        members = self.members_of(group["resourceName"])
        view["memberCount"] = len(members)
        if max_members:
            view["memberResourceNames"] = members[:max_members]
        return view

    def _check_group_name(self, name: str, exclude: str = "") -> None:
        for resource_name, group in self.groups.items():
            if resource_name != exclude and group["name"] == name:
                raise make_http_error(
                    409, "ALREADY_EXISTS", "Contact group name already exists."
                )

    # ----- API surface -----

    def people(self) -> "_PeopleResource":
        return _PeopleResource(self)

    def contactGroups(self) -> "_GroupsResource":  # noqa: N802
        return _GroupsResource(self)


class _PeopleResource:
    def __init__(self, fake: FakePeopleService):
        self.fake = fake

    def connections(self) -> "_ConnectionsResource":
        return _ConnectionsResource(self.fake)

    def searchContacts(self, **kwargs: Any) -> FakeRequest:  # noqa: N802
        fake = self.fake
        fake.calls.append(("searchContacts", kwargs))

        def handler() -> Any:
            query = kwargs.get("query", "").lower()
            if not query:
                fake.search_warmed_up = True
                return {}
            if not fake.search_warmed_up:
                return {}
            limit = min(kwargs.get("pageSize", 10), SEARCH_PAGE_LIMIT)
            matches = [
                {"person": person}
                for person in fake.persons.values()
                if _matches(person, query)
            ]
            return {"results": matches[:limit]} if matches else {}

        return FakeRequest(handler)

    def get(self, **kwargs: Any) -> FakeRequest:
        self.fake.calls.append(("get", kwargs))
        return FakeRequest(lambda: self.fake._person(kwargs["resourceName"]))

    def createContact(self, **kwargs: Any) -> FakeRequest:  # noqa: N802
        fake = self.fake
        fake.calls.append(("createContact", kwargs))

        def handler() -> Any:
            resource_name = fake._store_new_person(kwargs["body"])
            return fake.persons[resource_name]

        return FakeRequest(handler)

    def updateContact(self, **kwargs: Any) -> FakeRequest:  # noqa: N802
        fake = self.fake
        fake.calls.append(("updateContact", kwargs))

        def handler() -> Any:
            person = fake._person(kwargs["resourceName"])
            body = kwargs["body"]
            if body.get("etag") != person["etag"]:
                raise make_http_error(
                    400,
                    "FAILED_PRECONDITION",
                    "Request person.etag is different than the current person.etag.",
                )
            for group in kwargs["updatePersonFields"].split(","):
                if body.get(group):
                    person[group] = body[group]
                else:
                    person.pop(group, None)
            _fill_display_names(person)
            version = int(person["etag"].rsplit("-", 1)[1]) + 1
            person["etag"] = f"etag-{version}"
            return person

        return FakeRequest(handler)

    def deleteContact(self, **kwargs: Any) -> FakeRequest:  # noqa: N802
        fake = self.fake
        fake.calls.append(("deleteContact", kwargs))

        def handler() -> Any:
            fake._person(kwargs["resourceName"])
            del fake.persons[kwargs["resourceName"]]
            return {}

        return FakeRequest(handler)

    def updateContactPhoto(self, **kwargs: Any) -> FakeRequest:  # noqa: N802
        fake = self.fake
        fake.calls.append(("updateContactPhoto", kwargs))

        def handler() -> Any:
            resource_name = kwargs["resourceName"]
            person = fake._person(resource_name)
            fake.uploaded_photos[resource_name] = kwargs["body"]["photoBytes"]
            person["photos"] = [
                {
                    "url": f"https://photos.example.com/{resource_name}",
                    "metadata": {"primary": True},
                }
            ]
            return {"person": person}

        return FakeRequest(handler)

    def deleteContactPhoto(self, **kwargs: Any) -> FakeRequest:  # noqa: N802
        fake = self.fake
        fake.calls.append(("deleteContactPhoto", kwargs))

        def handler() -> Any:
            person = fake._person(kwargs["resourceName"])
            person.pop("photos", None)
            fake.uploaded_photos.pop(kwargs["resourceName"], None)
            return {"person": person}

        return FakeRequest(handler)


class _ConnectionsResource:
    def __init__(self, fake: FakePeopleService):
        self.fake = fake

    def list(self, **kwargs: Any) -> FakeRequest:
        fake = self.fake
        fake.calls.append(("connections.list", kwargs))

        def handler() -> Any:
            start = int(kwargs.get("pageToken") or 0)
            end = start + kwargs["pageSize"]
            persons = list(fake.persons.values())
            response: dict[str, Any] = {"totalItems": len(persons)}
            if persons[start:end]:
                response["connections"] = persons[start:end]
            if end < len(persons):
                response["nextPageToken"] = str(end)
            return response

        return FakeRequest(handler)


class _GroupsResource:
    def __init__(self, fake: FakePeopleService):
        self.fake = fake

    def members(self) -> "_MembersResource":
        return _MembersResource(self.fake)

    def list(self, **kwargs: Any) -> FakeRequest:
        fake = self.fake
        fake.calls.append(("contactGroups.list", kwargs))

        def handler() -> Any:
            start = int(kwargs.get("pageToken") or 0)
            end = start + kwargs.get("pageSize", 1000)
            groups = [fake._group_view(g) for g in fake.groups.values()]
            response: dict[str, Any] = {
                "contactGroups": groups[start:end],
                "totalItems": len(groups),
            }
            if end < len(groups):
                response["nextPageToken"] = str(end)
            return response

        return FakeRequest(handler)

    def get(self, **kwargs: Any) -> FakeRequest:
        fake = self.fake
        fake.calls.append(("contactGroups.get", kwargs))
        return FakeRequest(
            lambda: fake._group_view(
                fake._group(kwargs["resourceName"]), kwargs.get("maxMembers", 0)
            )
        )

    def create(self, **kwargs: Any) -> FakeRequest:
        fake = self.fake
        fake.calls.append(("contactGroups.create", kwargs))

        def handler() -> Any:
            name = kwargs["body"]["contactGroup"]["name"]
            fake._check_group_name(name)
            return fake._group_view(fake.groups[fake.add_group(name)])

        return FakeRequest(handler)

    def update(self, **kwargs: Any) -> FakeRequest:
        fake = self.fake
        fake.calls.append(("contactGroups.update", kwargs))

        def handler() -> Any:
            group = fake._group(kwargs["resourceName"])
            name = kwargs["body"]["contactGroup"]["name"]
            fake._check_group_name(name, exclude=kwargs["resourceName"])
            group["name"] = name
            group["formattedName"] = name
            group["etag"] = "g-etag-2"
            return fake._group_view(group)

        return FakeRequest(handler)

    def delete(self, **kwargs: Any) -> FakeRequest:
        fake = self.fake
        fake.calls.append(("contactGroups.delete", kwargs))

        def handler() -> Any:
            resource_name = kwargs["resourceName"]
            fake._group(resource_name)
            for member in fake.members_of(resource_name):
                if kwargs.get("deleteContacts"):
                    del fake.persons[member]
                else:
                    _remove_membership(fake.persons[member], resource_name)
            del fake.groups[resource_name]
            return {}

        return FakeRequest(handler)


class _MembersResource:
    def __init__(self, fake: FakePeopleService):
        self.fake = fake

    def modify(self, **kwargs: Any) -> FakeRequest:
        fake = self.fake
        fake.calls.append(("contactGroups.members.modify", kwargs))

        def handler() -> Any:
            group_resource_name = kwargs["resourceName"]
            fake._group(group_resource_name)
            body = kwargs["body"]
            not_found = []
            for resource_name in body.get("resourceNamesToAdd", []):
                person = fake.persons.get(resource_name)
                if person is None:
                    not_found.append(resource_name)
                elif group_resource_name not in _membership_names(person):
                    person.setdefault("memberships", []).append(
                        {
                            "contactGroupMembership": {
                                "contactGroupResourceName": group_resource_name
                            }
                        }
                    )
            for resource_name in body.get("resourceNamesToRemove", []):
                person = fake.persons.get(resource_name)
                if person is None:
                    not_found.append(resource_name)
                else:
                    _remove_membership(person, group_resource_name)
            return {"notFoundResourceNames": not_found} if not_found else {}

        return FakeRequest(handler)


def _membership_names(person: dict[str, Any]) -> list[str]:
    return [
        m.get("contactGroupMembership", {}).get("contactGroupResourceName", "")
        for m in person.get("memberships", [])
    ]


def _remove_membership(person: dict[str, Any], group_resource_name: str) -> None:
    person["memberships"] = [
        m
        for m in person.get("memberships", [])
        if m.get("contactGroupMembership", {}).get("contactGroupResourceName")
        != group_resource_name
    ]


def _fill_display_names(person: dict[str, Any]) -> None:
    for name in person.get("names", []):
        if not name.get("displayName"):
            parts = [name.get("givenName", ""), name.get("familyName", "")]
            name["displayName"] = (
                " ".join(p for p in parts if p) or name.get("unstructuredName", "")
            )


def _matches(person: dict[str, Any], query: str) -> bool:
    candidates: list[str] = []
    for name in person.get("names", []):
        candidates.extend(
            name.get(key, "") for key in ("displayName", "givenName", "familyName")
        )
    candidates.extend(e.get("value", "") for e in person.get("emailAddresses", []))
    candidates.extend(o.get("name", "") for o in person.get("organizations", []))
    return any(c.lower().startswith(query) for c in candidates if c)


# ----- fixtures -----


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep config, tokens and log files out of the home directory."""
    monkeypatch.setenv("GCONTACT_VCARD_CONFIG_DIR", str(tmp_path / "config-home"))
    monkeypatch.setenv("GCONTACT_VCARD_LOG_FILE", "none")
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.disabled = False
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def credentials():
    """Valid credentials mock."""
    return MagicMock(valid=True)


@pytest.fixture
def fake_service():
    """Empty in-memory People API service."""
    return FakePeopleService()


@pytest.fixture
def people_api(credentials, fake_service):
    """PeopleAPI wired to the fake service."""
    return PeopleAPI(credentials, service=fake_service)


@pytest.fixture
def groups_api(credentials, fake_service):
    """ContactGroupsAPI wired to the fake service."""
    return ContactGroupsAPI(credentials, service=fake_service)


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")
