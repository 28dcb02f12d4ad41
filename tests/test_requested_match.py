"""Tests for matching user selectors against the catalog."""
from resolver.models import PackageRecord, RepositoryPriorityEntry
from resolver.priority import PriorityPolicy
from resolver.requested import find_requested_candidates, match_requested

REPO_A = "http://deb.example.org/debian"
REPO_B = "https://mirror.example.net/extra"


def make_pkg(name, version, repo=REPO_A, arch="amd64", provides=()):
    return PackageRecord(
        name=name,
        version=version,
        origin_url=f"{repo}/pool/main/{name}_{version.split(':')[-1]}_{arch}.deb",
        provides=tuple(provides),
    )


class TestMatchRequested:
    """Selector forms accepted for requested packages."""

    def test_exact_name_highest_version(self):
        catalog = [make_pkg("acl", "2.3.1-1"), make_pkg("acl", "2.3.1-3")]
        assert match_requested("acl", catalog).version == "2.3.1-3"

    def test_name_version_with_epoch(self):
        catalog = [make_pkg("qemu-system", "1:8.2.0"), make_pkg("qemu-system", "3:9.1.0")]
        assert match_requested("qemu-system_1:8.2.0", catalog).version == "1:8.2.0"

    def test_name_version_without_epoch(self):
        catalog = [make_pkg("qemu-system", "3:9.1.0"), make_pkg("qemu-system", "3:9.2.0")]
        assert match_requested("qemu-system_9.1.0", catalog).version == "3:9.1.0"

    def test_deb_stem_stops_scan(self):
        target = make_pkg("acct", "6.6.4-5+b1")
        later = make_pkg("acct", "9.9")
        found = find_requested_candidates("acct_6.6.4-5+b1_amd64", [target, later])
        assert found == [target]

    def test_version_suffix_prefix_match(self):
        catalog = [make_pkg("python3-3.11", "3.11.2-1"), make_pkg("python3-dev", "3.11.2-1")]
        assert match_requested("python3-3.11", catalog).name == "python3-3.11"
        found = find_requested_candidates("linux-6", [make_pkg("linux-6-image", "6.1.0")])
        assert [p.name for p in found] == ["linux-6-image"]

    def test_dot_and_underscore_prefix(self):
        found = find_requested_candidates("libfoo", [make_pkg("libfoo.so", "1"), make_pkg("libfoo_x", "1")])
        assert len(found) == 2

    def test_provides(self):
        catalog = [make_pkg("postfix", "3.7", provides=["mail-transport-agent"])]
        assert match_requested("mail-transport-agent", catalog).name == "postfix"

    def test_no_match(self):
        assert match_requested("ghost", [make_pkg("acl", "1")]) is None

    def test_blocked_repository_ignored(self):
        policy = PriorityPolicy.from_entries([RepositoryPriorityEntry(REPO_B, -1)])
        catalog = [make_pkg("acl", "1.0"), make_pkg("acl", "9.0", REPO_B)]
        assert match_requested("acl", catalog, policy).version == "1.0"
        assert match_requested("acl", [make_pkg("acl", "9.0", REPO_B)], policy) is None

    def test_priority_over_version(self):
        policy = PriorityPolicy.from_entries([RepositoryPriorityEntry(REPO_B, 990)])
        catalog = [make_pkg("acl", "9.0"), make_pkg("acl", "1.0", REPO_B)]
        assert match_requested("acl", catalog, policy).origin_url.startswith(REPO_B)
