"""
gcontact_vcard.api - Google People API clients

Contains the contact and contact group clients built on the Google API
discovery service.
"""

from gcontact_vcard.api.groups_api import ContactGroupsAPI, ListShape
from gcontact_vcard.api.people_api import PeopleAPI

__all__ = ["ContactGroupsAPI", "ListShape", "PeopleAPI"]
