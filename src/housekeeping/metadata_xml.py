"""Snapshot ``maven-metadata.xml`` codec.

This module parses and serializes per-version snapshot metadata and
derives build numbers and file names from snapshot values. It is pure
and stateless; storage access lives in the reconciler.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from core.constants import METADATA_ROOT_ELEMENT, XML_DECLARATION, XML_INDENT
from core.errors import SnapkeepParseError
from core.types import SnapshotInfo, SnapshotMetadata, SnapshotVersion, Versioning

_TIMESTAMP_PATTERN = re.compile(r"^\d{8}\.\d{6}$")


def parse_snapshot_metadata(content: bytes) -> SnapshotMetadata:
    """Parse a snapshot metadata document.

    Args:
        content: Raw XML bytes.

    Returns:
        Typed metadata document.

    Raises:
        SnapkeepParseError: If the XML is malformed or lacks an artifactId.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as error:
        raise SnapkeepParseError(f"Malformed maven-metadata.xml: {error}") from error
    if _local_name(root.tag) != METADATA_ROOT_ELEMENT:
        raise SnapkeepParseError(
            f"Unexpected maven-metadata.xml root element '{_local_name(root.tag)}'; "
            f"expected '{METADATA_ROOT_ELEMENT}'."
        )
    artifact_id = _child_text(root, "artifactId")
    if not artifact_id:
        raise SnapkeepParseError("maven-metadata.xml is missing a non-empty artifactId.")
    return SnapshotMetadata(
        artifact_id=artifact_id,
        versioning=_parse_versioning(_child(root, "versioning")),
        group_id=_child_text(root, "groupId"),
        version=_child_text(root, "version"),
        model_version=root.get("modelVersion", ""),
    )


def serialize_snapshot_metadata(metadata: SnapshotMetadata) -> bytes:
    """Serialize a metadata document.

    Output starts with an XML declaration, uses two-space indentation,
    and emits elements in a fixed order. Optional elements are written
    only when non-empty.

    Args:
        metadata: Document to serialize.

    Returns:
        UTF-8 encoded XML bytes ending with a newline.
    """
    root = ET.Element(METADATA_ROOT_ELEMENT)
    if metadata.model_version:
        root.set("modelVersion", metadata.model_version)
    _append_text(root, "groupId", metadata.group_id)
    _append_text(root, "artifactId", metadata.artifact_id, required=True)
    _append_text(root, "version", metadata.version)
    versioning = ET.SubElement(root, "versioning")
    snapshot = ET.SubElement(versioning, "snapshot")
    _append_text(snapshot, "timestamp", metadata.versioning.snapshot.timestamp)
    _append_text(snapshot, "buildNumber", metadata.versioning.snapshot.build_number, required=True)
    _append_text(versioning, "lastUpdated", metadata.versioning.last_updated)
    entries = ET.SubElement(versioning, "snapshotVersions")
    for entry in metadata.versioning.snapshot_versions:
        element = ET.SubElement(entries, "snapshotVersion")
        _append_text(element, "classifier", entry.classifier)
        _append_text(element, "extension", entry.extension, required=True)
        _append_text(element, "value", entry.value, required=True)
        _append_text(element, "updated", entry.updated)
    ET.indent(root, space=XML_INDENT)
    body = ET.tostring(root, encoding="unicode")
    return (XML_DECLARATION + body + "\n").encode("utf-8")


def parse_build_number(value: str) -> int:
    """Extract the build number after the last ``-`` of a snapshot value.

    Args:
        value: Snapshot value, e.g. ``1.0-20240101.120000-7``.

    Returns:
        Non-negative build number.

    Raises:
        SnapkeepParseError: If the value has no numeric build suffix, or
            the suffix is too long to convert.
    """
    _, separator, suffix = value.rpartition("-")
    if not separator:
        raise SnapkeepParseError(f"Invalid snapshot value '{value}': missing '-' separator.")
    if not suffix.isascii() or not suffix.isdigit():
        raise SnapkeepParseError(
            f"Invalid snapshot value '{value}': build suffix '{suffix}' is not a number."
        )
    try:
        return int(suffix)
    except ValueError as error:
        raise SnapkeepParseError(
            f"Invalid snapshot value '{value[:64]}...': build suffix is out of range."
        ) from error


def try_parse_build_number(value: str) -> int | None:
    """Return the build number of a value, or None when it has none."""
    try:
        return parse_build_number(value)
    except SnapkeepParseError:
        return None


def snapshot_timestamp(value: str) -> str | None:
    """Return the ``yyyyMMdd.HHmmss`` segment of a snapshot value, if present."""
    head, separator, _ = value.rpartition("-")
    if not separator:
        return None
    timestamp = head.rpartition("-")[2]
    if _TIMESTAMP_PATTERN.match(timestamp):
        return timestamp
    return None


def expected_file_name(artifact_id: str, entry: SnapshotVersion) -> str:
    """Return the stored file name an entry refers to.

    Example: ``artifact`` with ``{sources, jar, 1.0-20240101.120000-5}``
    maps to ``artifact-1.0-20240101.120000-5-sources.jar``.
    """
    return f"{artifact_id}-{entry.value}{entry.file_ending}"


def max_build_number(entries: tuple[SnapshotVersion, ...]) -> int:
    """Return the highest parseable build number among entries, or 0."""
    builds = [try_parse_build_number(entry.value) for entry in entries]
    return max((build for build in builds if build is not None), default=0)


def document_build_number(metadata: SnapshotMetadata) -> int | None:
    """Return the document's declared build number, or None when unusable."""
    raw_value = metadata.versioning.snapshot.build_number.strip()
    if not raw_value.isascii() or not raw_value.isdigit():
        return None
    try:
        return int(raw_value)
    except ValueError:
        return None


def _parse_versioning(element: ET.Element | None) -> Versioning:
    if element is None:
        return Versioning(
            snapshot=SnapshotInfo(timestamp="", build_number=""),
            snapshot_versions=(),
        )
    snapshot = _child(element, "snapshot")
    entries_element = _child(element, "snapshotVersions")
    entries: list[SnapshotVersion] = []
    if entries_element is not None:
        for item in entries_element:
            if _local_name(item.tag) != "snapshotVersion":
                continue
            entries.append(
                SnapshotVersion(
                    classifier=_child_text(item, "classifier"),
                    extension=_child_text(item, "extension"),
                    value=_child_text(item, "value"),
                    updated=_child_text(item, "updated"),
                )
            )
    return Versioning(
        snapshot=SnapshotInfo(
            timestamp=_child_text(snapshot, "timestamp") if snapshot is not None else "",
            build_number=_child_text(snapshot, "buildNumber") if snapshot is not None else "",
        ),
        snapshot_versions=tuple(entries),
        last_updated=_child_text(element, "lastUpdated"),
    )


def _local_name(tag: str) -> str:
    # Namespaced tags arrive as "{uri}name".
    return tag.rpartition("}")[2]


def _child(parent: ET.Element, name: str) -> ET.Element | None:
    for item in parent:
        if _local_name(item.tag) == name:
            return item
    return None


def _child_text(parent: ET.Element, name: str) -> str:
    item = _child(parent, name)
    if item is None or item.text is None:
        return ""
    return item.text.strip()


def _append_text(parent: ET.Element, name: str, text: str, required: bool = False) -> None:
    if text or required:
        ET.SubElement(parent, name).text = text
