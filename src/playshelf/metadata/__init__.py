"""Sidecar metadata and technical probing.

Module organization:
- nfo.py: Sidecar discovery, parsing and atomic writing
- reconciler.py: Provenance-aware merge of sidecar, catalog and user edits
- probe.py: Best-effort duration probing with ffprobe
"""

from .nfo import SidecarMetadata, find_sidecar, parse_nfo, write_nfo
from .probe import probe_duration
from .reconciler import MetadataEdit, ReconciliationResult, reconcile

__all__ = [
    "MetadataEdit",
    "ReconciliationResult",
    "SidecarMetadata",
    "find_sidecar",
    "parse_nfo",
    "probe_duration",
    "reconcile",
    "write_nfo",
]
