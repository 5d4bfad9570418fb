"""
gcontact_vcard.transfer - vCard import and export runs
"""

from gcontact_vcard.transfer.exporter import ExportOptions, VCardExporter
from gcontact_vcard.transfer.importer import ImportOptions, VCardImporter

__all__ = ["ExportOptions", "ImportOptions", "VCardExporter", "VCardImporter"]
