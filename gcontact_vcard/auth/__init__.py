"""
gcontact_vcard.auth - OAuth2 authentication module
"""

from gcontact_vcard.auth.google_auth import SCOPES, GoogleAuth

__all__ = ["GoogleAuth", "SCOPES"]
