"""Tests for writing delta archives."""

import json
import tarfile

from archive_utils import Item, directory, read_archive
from tardelta.archive import ArchiveWriter, open_archive
from tardelta.schemas import MANIFEST_NAME, DiffManifest
from tardelta.services.delta_encoder import encode_delta, manifest_info


def encode(new_path, manifest, out_path) -> int:
    with open_archive(new_path) as reader:
        with ArchiveWriter(out_path) as writer:
            return encode_delta(reader, manifest, writer)


def test_manifest_first_then_changed_and_added(scenario, tmp_path):
    manifest = DiffManifest(changed=["b.txt"], added=["c.txt"], removed=[])
    out = tmp_path / "delta.tar"

    copied = encode(scenario["new"], manifest, out)

    entries = read_archive(out)
    assert copied == 2
    assert [e.name for e in entries] == [MANIFEST_NAME, "b.txt", "c.txt"]
    assert json.loads(entries[0].data) == {
        "changed": ["b.txt"],
        "added": ["c.txt"],
        "removed": [],
    }
    assert entries[1].data == b"WORLD"
    assert entries[2].data == b"new"


def test_manifest_header(scenario, tmp_path):
    manifest = DiffManifest(changed=["b.txt"], added=["c.txt"], removed=[])
    out = tmp_path / "delta.tar"
    encode(scenario["new"], manifest, out)

    with tarfile.open(out) as tar:
        info = tar.getmembers()[0]
    assert info.name == MANIFEST_NAME
    assert info.size == len(manifest.to_bytes())
    assert info.isreg()
    assert info.mtime == 0


def test_removal_only_delta_holds_just_the_manifest(make_archive, tmp_path):
    new = make_archive("new.tar", {"a.txt": "hello"})
    manifest = DiffManifest(changed=[], added=[], removed=["b.txt"])
    out = tmp_path / "delta.tar"

    assert encode(new, manifest, out) == 0
    assert [e.name for e in read_archive(out)] == [MANIFEST_NAME]


def test_headers_copied_unmodified(make_archive, tmp_path):
    new = make_archive(
        "new.tar",
        [
            directory("bin", mode=0o700),
            Item("bin/tool", "#!/bin/sh", mode=0o751, mtime=1234567),
            Item("skip.txt", "unchanged"),
        ],
    )
    manifest = DiffManifest(changed=["bin/tool"], added=["bin"], removed=[])
    out = tmp_path / "delta.tar"

    encode(new, manifest, out)

    entries = {e.name: e for e in read_archive(out)}
    assert set(entries) == {MANIFEST_NAME, "bin", "bin/tool"}
    assert entries["bin"].type == tarfile.DIRTYPE
    assert entries["bin"].mode == 0o700
    assert entries["bin/tool"].mode == 0o751
    assert entries["bin/tool"].mtime == 1234567
    assert entries["bin/tool"].data == b"#!/bin/sh"


def test_entries_follow_new_archive_order(make_archive, tmp_path):
    new = make_archive("new.tar", {"z.txt": "1", "a.txt": "2", "m.txt": "3"})
    manifest = DiffManifest(changed=["a.txt"], added=["z.txt", "m.txt"], removed=[])
    out = tmp_path / "delta.tar"

    encode(new, manifest, out)

    assert [e.name for e in read_archive(out)] == [MANIFEST_NAME, "z.txt", "a.txt", "m.txt"]


def test_manifest_info_defaults():
    info = manifest_info(42)
    assert info.name == MANIFEST_NAME
    assert info.size == 42
    assert info.mode == 0o644
