"""Repository metadata readers feeding the resolver catalog.

- packages_index.py: Debian ``Packages`` index stanzas to PackageRecord
"""

from .packages_index import load_catalog, load_packages_file, parse_packages_text

__all__ = ["load_catalog", "load_packages_file", "parse_packages_text"]
