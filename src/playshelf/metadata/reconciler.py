"""Metadata reconciliation between sidecars, the catalog and user edits.

``reconcile`` is pure: it takes the current record, whatever sidecar is on
disk, and optionally a user edit, and decides the new record and where the
result must be persisted. Provenance rules:

- Fields the user edited are never overwritten by a scan.
- An external sidecar is never written; edits to it stay in the catalog.
- A sidecar authored by playshelf is rewritten on every edit.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from playshelf.db.types import (
    EDITABLE_FIELDS,
    MetadataProvenance,
    VideoRecord,
    WriteTarget,
)
from playshelf.metadata.nfo import SidecarMetadata


@dataclass(frozen=True)
class MetadataEdit:
    """A user edit of one or more editable fields.

    Blank strings clear the field.
    """

    values: dict[str, str | None] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = sorted(set(self.values) - set(EDITABLE_FIELDS))
        if unknown:
            raise ValueError(f"Not editable: {', '.join(unknown)}")
        normalized = {}
        for name, value in self.values.items():
            if value is not None:
                value = str(value).strip() or None
            normalized[name] = value
        object.__setattr__(self, "values", normalized)


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of reconciling one video."""

    record: VideoRecord
    write_targets: frozenset[WriteTarget]
    changed_fields: tuple[str, ...]

    @property
    def changed(self) -> bool:
        return bool(self.changed_fields)


_TRACKED = (
    "display_name",
    "metadata_provenance",
    "user_edited_fields",
) + EDITABLE_FIELDS


def _display_name(record: VideoRecord) -> str:
    return record.title or record.stem


def _diff(before: VideoRecord, after: VideoRecord) -> tuple[str, ...]:
    return tuple(
        name for name in _TRACKED if getattr(before, name) != getattr(after, name)
    )


def _apply_sidecar(
    record: VideoRecord, sidecar: SidecarMetadata, *, fill_only: bool
) -> dict[str, str | None]:
    updates = {}
    for name, value in sidecar.values().items():
        if name in record.user_edited_fields:
            continue
        if fill_only and getattr(record, name):
            continue
        if fill_only and value is None:
            continue
        updates[name] = value
    return updates


def _reconcile_scan(
    record: VideoRecord, sidecar: SidecarMetadata | None
) -> ReconciliationResult:
    if sidecar is None:
        updated = record
    else:
        provenance = record.metadata_provenance
        if provenance is MetadataProvenance.NONE:
            provenance = (
                MetadataProvenance.APP_MANAGED
                if sidecar.app_authored
                else MetadataProvenance.EXTERNAL_SIDECAR
            )
        updates = _apply_sidecar(
            record,
            sidecar,
            fill_only=provenance is MetadataProvenance.APP_MANAGED,
        )
        updated = replace(record, metadata_provenance=provenance, **updates)

    updated = replace(updated, display_name=_display_name(updated))
    changed = _diff(record, updated)
    targets = frozenset({WriteTarget.CATALOG}) if changed else frozenset()
    return ReconciliationResult(updated, targets, changed)


def _reconcile_edit(
    record: VideoRecord, sidecar: SidecarMetadata | None, edit: MetadataEdit
) -> ReconciliationResult:
    external_on_disk = sidecar is not None and not sidecar.app_authored
    provenance = record.metadata_provenance

    if external_on_disk:
        # Someone else's file, even if ours was there before
        provenance = MetadataProvenance.EXTERNAL_SIDECAR
    elif provenance is MetadataProvenance.NONE:
        provenance = MetadataProvenance.APP_MANAGED

    if provenance is MetadataProvenance.APP_MANAGED:
        targets = frozenset({WriteTarget.CATALOG, WriteTarget.SIDECAR})
    else:
        targets = frozenset({WriteTarget.CATALOG})

    edited = list(record.user_edited_fields)
    for name in edit.values:
        if name not in edited:
            edited.append(name)
    edited.sort(key=EDITABLE_FIELDS.index)

    updated = replace(
        record,
        metadata_provenance=provenance,
        user_edited_fields=edited,
        **edit.values,
    )
    updated = replace(updated, display_name=_display_name(updated))
    return ReconciliationResult(updated, targets, _diff(record, updated))


def reconcile(
    record: VideoRecord,
    sidecar: SidecarMetadata | None,
    edit: MetadataEdit | None = None,
) -> ReconciliationResult:
    """Decide a video's metadata after a scan or a user edit.

    Args:
        record: The catalogued record (or a freshly built one for new files).
        sidecar: Parsed sidecar found on disk, or None when there is none.
        edit: The user's edit, or None when called from a scan.

    Returns:
        ReconciliationResult with the new record, the persistence targets
        and the names of the fields that changed. A scan that changes
        nothing has no targets.
    """
    if edit is None:
        return _reconcile_scan(record, sidecar)
    return _reconcile_edit(record, sidecar, edit)
