"""Tests for candidate discovery and single-dependency selection."""
import pytest

from resolver.candidates import CandidateSelector, CatalogIndex, find_candidates
from resolver.errors import CandidateSelectionError
from resolver.models import PackageRecord, RepositoryPriorityEntry
from resolver.priority import PriorityPolicy

REPO_A = "http://deb.example.org/debian"
REPO_B = "https://mirror.example.net/extra"


def make_pkg(name, version, repo=REPO_A, requires=(), provides=()):
    requires = tuple(requires)
    return PackageRecord(
        name=name,
        version=version,
        origin_url=f"{repo}/pool/main/{name}_{version}_amd64.deb",
        requires=tuple(r.split()[0] for r in requires),
        requires_raw=requires,
        provides=tuple(provides),
    )


def make_selector(**priorities):
    repos = {"a": REPO_A, "b": REPO_B}
    return CandidateSelector(
        PriorityPolicy.from_entries(
            RepositoryPriorityEntry(repos[key], value) for key, value in priorities.items()
        )
    )


class TestFindCandidates:
    """Name and Provides lookups."""

    def test_name_match_wins_over_provides(self):
        real = make_pkg("mta", "1.0")
        virtual = make_pkg("postfix", "3.0", provides=["mta"])
        assert find_candidates("mta", [virtual, real]) == [real]

    def test_provides_fallback(self):
        postfix = make_pkg("postfix", "3.0", provides=["mail-transport-agent"])
        exim = make_pkg("exim4", "4.9", provides=["mail-transport-agent"])
        assert find_candidates("mail-transport-agent", [postfix, exim]) == [postfix, exim]

    def test_nothing(self):
        assert find_candidates("ghost", [make_pkg("a", "1")]) == []

    def test_index_keeps_catalog_order(self):
        first = make_pkg("x", "1.0")
        second = make_pkg("x", "2.0", REPO_B)
        index = CatalogIndex([first, second])
        assert index.by_name("x") == [first, second]
        assert len(index) == 2
        assert list(index) == [first, second]


class TestSelect:
    def test_blocked_filtered_and_sorted(self):
        selector = make_selector(b=-1)
        catalog = [make_pkg("x", "1.0"), make_pkg("x", "9.0", REPO_B), make_pkg("x", "2.0")]
        assert [p.version for p in selector.select("x", catalog)] == ["2.0", "1.0"]

    def test_blocked_only_name_match(self):
        assert make_selector(b=-1).select("x", [make_pkg("x", "9.0", REPO_B)]) == []


class TestResolveOne:
    """resolve_one() picks exactly one candidate for a parent's dependency."""

    def test_empty_candidates(self):
        with pytest.raises(CandidateSelectionError, match="no candidates provided"):
            make_selector().resolve_one(make_pkg("app", "1"), [])

    def test_all_blocked(self):
        selector = make_selector(b=-1)
        with pytest.raises(CandidateSelectionError, match="blocked by negative priority"):
            selector.resolve_one(make_pkg("app", "1"), [make_pkg("x", "1.0", REPO_B)])

    def test_blocked_never_returned(self):
        selector = make_selector(b=-1)
        chosen = selector.resolve_one(
            make_pkg("app", "1"), [make_pkg("x", "9.0", REPO_B), make_pkg("x", "1.0")]
        )
        assert chosen.version == "1.0"

    def test_single_candidate(self):
        only = make_pkg("x", "1.0", REPO_B)
        assert make_selector().resolve_one(make_pkg("app", "1"), [only]) is only

    def test_same_repository_higher_version(self):
        parent = make_pkg("app", "1")
        chosen = make_selector().resolve_one(parent, [make_pkg("x", "1.0", REPO_B), make_pkg("x", "2.0")])
        assert chosen.origin_url.startswith(REPO_A)

    def test_other_repository_wins_on_higher_version(self):
        parent = make_pkg("app", "1")
        chosen = make_selector().resolve_one(parent, [make_pkg("x", "1.0"), make_pkg("x", "2.0", REPO_B)])
        assert chosen.version == "2.0"

    def test_other_repository_wins_on_priority(self):
        parent = make_pkg("app", "1")
        chosen = make_selector(b=990).resolve_one(parent, [make_pkg("x", "2.0"), make_pkg("x", "1.0", REPO_B)])
        assert chosen.origin_url.startswith(REPO_B)

    def test_version_constraint_filters(self):
        parent = make_pkg("app", "1", requires=["libfoo (<< 2.0)"])
        candidates = [make_pkg("libfoo", v) for v in ("3.0", "1.0", "2.0")]
        assert make_selector().resolve_one(parent, candidates).version == "1.0"

    def test_version_constraint_unsatisfiable(self):
        parent = make_pkg("app", "1", requires=["libfoo (>= 5.0)"])
        with pytest.raises(CandidateSelectionError, match=r"no candidates satisfy version constraints: >=5\.0"):
            make_selector().resolve_one(parent, [make_pkg("libfoo", "1.0"), make_pkg("libfoo", "2.0")])

    def test_unconstrained_picks_highest(self):
        parent = make_pkg("app", "1", requires=["libfoo"])
        candidates = [make_pkg("libfoo", v) for v in ("1.0", "1.10", "1.9")]
        assert make_selector().resolve_one(parent, candidates).version == "1.10"
