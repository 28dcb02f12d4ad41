"""Tests for the Debian Packages index reader."""
import gzip
import lzma

import pytest

from repository.packages_index import (
    full_url,
    iter_stanzas,
    load_catalog,
    load_packages_file,
    parse_packages_text,
)
from resolver.errors import CatalogError
from resolver.models import Checksum

BASE = "http://deb.example.org/debian"

SAMPLE = """\
Package: e2fsprogs
Version: 1.47.0-2
Architecture: amd64
Maintainer: Theodore Y. Ts'o <tytso@mit.edu>
Pre-Depends: libblkid1 (>= 2.36), libc6 (>= 2.34)
Depends: logsave | e2fsprogs-l10n (<< 1.45.3-1~)
Provides: ext2-tools (= 1.47.0-2), fsck-backend
Description: ext2/ext3/ext4 file system utilities
 The ext2, ext3 and ext4 file systems are successors of the original ext
 file system.
Filename: pool/main/e/e2fsprogs/e2fsprogs_1.47.0-2_amd64.deb
SHA256: abc123
MD5sum: d41d8cd9

Package: tzdata
Version: 2024a-1
Architecture: all
Filename: pool/main/t/tzdata/tzdata_2024a-1_all.deb

Version: 1.0
Filename: pool/main/n/noname/noname_1.0_all.deb
"""


class TestIterStanzas:
    def test_continuation_lines_dropped(self):
        stanzas = list(iter_stanzas(SAMPLE.splitlines()))
        assert len(stanzas) == 3
        assert stanzas[0]["Description"] == "ext2/ext3/ext4 file system utilities"

    def test_trailing_stanza_without_blank_line(self):
        assert list(iter_stanzas(["Package: a", "Version: 1"])) == [{"Package": "a", "Version": "1"}]


class TestParsePackagesText:
    """Stanza fields mapped onto PackageRecord."""

    def test_fields(self):
        records = parse_packages_text(SAMPLE, BASE)
        assert [r.name for r in records] == ["e2fsprogs", "tzdata"]
        e2fs = records[0]
        assert e2fs.version == "1.47.0-2"
        assert e2fs.architecture == "amd64"
        assert e2fs.maintainer.startswith("Theodore")
        assert e2fs.origin_url == f"{BASE}/pool/main/e/e2fsprogs/e2fsprogs_1.47.0-2_amd64.deb"
        assert e2fs.provides == ("ext2-tools", "fsck-backend")
        assert e2fs.checksums == (Checksum("SHA256", "abc123"), Checksum("MD5", "d41d8cd9"))

    def test_pre_depends_only_in_requires(self):
        e2fs = parse_packages_text(SAMPLE, BASE)[0]
        assert e2fs.requires == ("libblkid1", "libc6", "logsave")
        assert e2fs.requires_raw == ("logsave | e2fsprogs-l10n (<< 1.45.3-1~)",)

    def test_arch_all_is_noarch(self):
        assert parse_packages_text(SAMPLE, BASE)[1].architecture == "noarch"

    def test_full_url(self):
        assert full_url("pool/x.deb", BASE + "/") == f"{BASE}/pool/x.deb"
        assert full_url("https://other/pool/x.deb", BASE) == "https://other/pool/x.deb"
        assert full_url("pool/x.deb", "") == "pool/x.deb"


class TestLoadPackagesFile:
    @pytest.mark.parametrize("suffix", ["", ".gz", ".xz"])
    def test_compressed_variants(self, tmp_path, suffix):
        path = tmp_path / f"Packages{suffix}"
        data = SAMPLE.encode("utf-8")
        if suffix == ".gz":
            path.write_bytes(gzip.compress(data))
        elif suffix == ".xz":
            path.write_bytes(lzma.compress(data))
        else:
            path.write_bytes(data)
        records = load_packages_file(str(path), BASE)
        assert [r.name for r in records] == ["e2fsprogs", "tzdata"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_packages_file(str(tmp_path / "nope"))

    def test_corrupt_gzip(self, tmp_path):
        path = tmp_path / "Packages.gz"
        path.write_bytes(b"not gzip at all")
        with pytest.raises(CatalogError):
            load_packages_file(str(path))

    def test_load_catalog_concatenates(self, tmp_path):
        first = tmp_path / "a"
        first.write_text("Package: a\nVersion: 1\n", encoding="utf-8")
        second = tmp_path / "b"
        second.write_text("Package: b\nVersion: 2\nFilename: pool/b.deb\n", encoding="utf-8")
        catalog = load_catalog([(str(first), ""), (str(second), BASE)])
        assert [r.name for r in catalog] == ["a", "b"]
        assert catalog[1].origin_url == f"{BASE}/pool/b.deb"
