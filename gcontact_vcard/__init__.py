"""
gcontact_vcard - Google Contacts manager with vCard import and export.

Wraps the Google People API for contacts and contact groups and converts
contacts between Google Person JSON, a flat form encoding and vCard text.
"""

__version__ = "0.1.0"
