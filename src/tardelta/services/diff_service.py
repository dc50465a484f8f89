"""Compare two content indexes."""

from loguru import logger

from tardelta.schemas import DiffManifest
from tardelta.services.utils import Index


def compute_diff(old: Index, new: Index, diagnostics: bool = False) -> DiffManifest:
    """
    Classify every path of two indexes as changed, added or removed.

    Paths with equal fingerprints on both sides are unchanged and appear in
    none of the lists.

    Args:
        old: Index of the old archive
        new: Index of the new archive
        diagnostics: Dump the resulting manifest at DEBUG level

    Returns:
        DiffManifest with sorted path lists
    """
    log = logger.bind(phase="diff")

    changed = set()
    added = set()
    for path, new_state in new.items():
        old_state = old.get(path)
        if old_state is None:
            added.add(path)
        elif old_state != new_state:
            changed.add(path)

    removed = {path for path in old if path not in new}

    manifest = DiffManifest(
        changed=sorted(changed), added=sorted(added), removed=sorted(removed)
    )

    log.debug(f"Changes found: {manifest.total_changes}")
    log.debug(f"  Changed: {len(manifest.changed)}")
    log.debug(f"  Added: {len(manifest.added)}")
    log.debug(f"  Removed: {len(manifest.removed)}")
    if diagnostics:
        log.debug(f"Manifest: {manifest.model_dump_json()}")

    return manifest
