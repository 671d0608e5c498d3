"""Core constants used across Snapkeep modules.

This module centralizes Maven naming conventions and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".snapkeep")
PACKAGES_DIR_NAME = "packages"
BLOBS_DIR_NAME = "blobs"
INDEX_FILE_NAME = "index.json"
HASH_ALGORITHM = "sha256"

MAVEN_PACKAGE_TYPE = "maven"
SNAPSHOT_SUFFIX = "-SNAPSHOT"
METADATA_FILE_NAME = "maven-metadata.xml"
METADATA_ROOT_ELEMENT = "metadata"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
XML_INDENT = "  "

CHECKSUM_EXTENSIONS = (".md5", ".sha1", ".sha256", ".sha512")
SIGNATURE_EXTENSIONS = (".asc",)

RETENTION_DISABLED = -1
RETENTION_DISABLED_ALIASES = ("off", "disabled", "none")
DEFAULT_LOG_LEVEL = "INFO"

SYSTEM_ACTOR_ID = -2
SYSTEM_ACTOR_NAME = "snapkeep-system"
