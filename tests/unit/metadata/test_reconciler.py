"""Tests for provenance-aware metadata reconciliation."""

import pytest

from playshelf.db.types import MetadataProvenance, WriteTarget
from playshelf.metadata.nfo import SidecarMetadata
from playshelf.metadata.reconciler import MetadataEdit, reconcile

EXTERNAL = SidecarMetadata(title="Sidecar Title", channel="Chan", tags="x")
OURS = SidecarMetadata(title="Our Title", description="Ours", app_authored=True)


class TestMetadataEdit:
    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValueError, match="views"):
            MetadataEdit({"views": "3"})

    def test_blank_strings_become_none(self) -> None:
        assert MetadataEdit({"title": "  ", "channel": " C "}).values == {
            "title": None,
            "channel": "C",
        }


class TestScanReconciliation:
    def test_no_sidecar_keeps_record(self, make_record) -> None:
        record = make_record("a.mp4")
        result = reconcile(record, None)
        assert not result.changed
        assert result.write_targets == frozenset()
        assert result.record.metadata_provenance is MetadataProvenance.NONE

    def test_first_external_sidecar_is_mirrored(self, make_record) -> None:
        result = reconcile(make_record("a.mp4"), EXTERNAL)

        assert result.record.metadata_provenance is MetadataProvenance.EXTERNAL_SIDECAR
        assert result.record.title == "Sidecar Title"
        assert result.record.display_name == "Sidecar Title"
        assert result.write_targets == {WriteTarget.CATALOG}

    def test_external_mirror_clears_removed_fields(self, make_record) -> None:
        """Fields dropped from an external sidecar are dropped from the catalog."""
        record = make_record(
            "a.mp4",
            title="Sidecar Title",
            description="Old plot",
            metadata_provenance=MetadataProvenance.EXTERNAL_SIDECAR,
        )
        result = reconcile(record, EXTERNAL)
        assert result.record.description is None

    def test_user_edits_survive_scans(self, make_record) -> None:
        record = make_record(
            "a.mp4",
            title="My Title",
            metadata_provenance=MetadataProvenance.EXTERNAL_SIDECAR,
            user_edited_fields=["title"],
        )
        result = reconcile(record, EXTERNAL)
        assert result.record.title == "My Title"
        assert result.record.channel == "Chan"

    def test_app_sidecar_only_fills_gaps(self, make_record) -> None:
        record = make_record(
            "a.mp4",
            title="Catalog Title",
            metadata_provenance=MetadataProvenance.APP_MANAGED,
        )
        result = reconcile(record, OURS)
        assert result.record.title == "Catalog Title"
        assert result.record.description == "Ours"

    def test_new_app_sidecar_is_app_managed(self, make_record) -> None:
        result = reconcile(make_record("a.mp4"), OURS)
        assert result.record.metadata_provenance is MetadataProvenance.APP_MANAGED

    def test_unchanged_scan_has_no_targets(self, make_record) -> None:
        first = reconcile(make_record("a.mp4"), EXTERNAL).record
        second = reconcile(first, EXTERNAL)
        assert not second.changed
        assert second.write_targets == frozenset()


class TestEditReconciliation:
    def test_no_sidecar_becomes_app_managed(self, make_record) -> None:
        result = reconcile(make_record("a.mp4"), None, MetadataEdit({"title": "T"}))
        assert result.record.metadata_provenance is MetadataProvenance.APP_MANAGED
        assert result.write_targets == {WriteTarget.CATALOG, WriteTarget.SIDECAR}
        assert result.record.user_edited_fields == ["title"]
        assert result.changed_fields == (
            "display_name",
            "metadata_provenance",
            "user_edited_fields",
            "title",
        )

    def test_external_sidecar_is_catalog_only(self, make_record) -> None:
        record = make_record(
            "a.mp4", metadata_provenance=MetadataProvenance.EXTERNAL_SIDECAR
        )
        result = reconcile(record, EXTERNAL, MetadataEdit({"title": "T"}))
        assert result.write_targets == {WriteTarget.CATALOG}

    def test_external_stays_external_without_sidecar(self, make_record) -> None:
        """A vanished external sidecar is not claimed by an edit."""
        record = make_record(
            "a.mp4", metadata_provenance=MetadataProvenance.EXTERNAL_SIDECAR
        )
        result = reconcile(record, None, MetadataEdit({"title": "T"}))
        assert result.record.metadata_provenance is MetadataProvenance.EXTERNAL_SIDECAR
        assert WriteTarget.SIDECAR not in result.write_targets

    def test_foreign_sidecar_demotes_app_managed(self, make_record) -> None:
        record = make_record(
            "a.mp4", metadata_provenance=MetadataProvenance.APP_MANAGED
        )
        result = reconcile(record, EXTERNAL, MetadataEdit({"title": "T"}))
        assert result.record.metadata_provenance is MetadataProvenance.EXTERNAL_SIDECAR
        assert result.write_targets == {WriteTarget.CATALOG}

    def test_edited_fields_accumulate_in_order(self, make_record) -> None:
        record = make_record("a.mp4", user_edited_fields=["channel"])
        result = reconcile(record, None, MetadataEdit({"title": "T"}))
        assert result.record.user_edited_fields == ["title", "channel"]
