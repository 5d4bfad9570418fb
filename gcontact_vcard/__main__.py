"""
Entry point for running gcontact_vcard as a module.

Usage:
    python -m gcontact_vcard --help
    python -m gcontact_vcard auth
    python -m gcontact_vcard export -o contacts.vcf
"""

from gcontact_vcard.cli import cli

if __name__ == "__main__":
    cli()
