"""Tests for fragment sources."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from reissue_py.core.changelog import DEFAULT_SECTIONS
from reissue_py.core.fragments import (
    DirectoryFragmentSource,
    GitTrailerFragmentSource,
    NullFragmentSource,
    create_fragment_source,
    parse_trailers,
)
from reissue_py.core.version import Segment
from reissue_py.exceptions import FragmentSourceError
from reissue_py.vcs.git import Commit

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def fragment_dir(tmp_path: Path) -> Path:
    """Directory with a mix of valid and invalid fragments."""
    directory = tmp_path / "changelog.d"
    directory.mkdir()
    (directory / "1.added.md").write_text("Support for widgets\n")
    (directory / "2.Fixed.md").write_text("Crash on startup")
    (directory / "3.added.txt").write_text("Another feature")
    (directory / "1.invalid.md").write_text("Should be skipped")
    (directory / "4.security.md").write_text("   \n")
    (directory / "README.md").write_text("Not a fragment")
    return directory


class TestNullFragmentSource:
    """Tests for NullFragmentSource."""

    def test_read_and_clear(self):
        """The null source has nothing and clears nothing."""
        source = NullFragmentSource()
        assert source.read() == {}
        source.clear()


class TestDirectoryFragmentSource:
    """Tests for DirectoryFragmentSource."""

    def test_read(self, fragment_dir: Path):
        """Valid fragments are grouped by capitalized section in file order."""
        entries = DirectoryFragmentSource(fragment_dir).read()

        assert entries == {
            "Added": ["Support for widgets", "Another feature"],
            "Fixed": ["Crash on startup"],
        }

    def test_missing_directory(self, tmp_path: Path):
        """A missing directory yields no fragments."""
        assert DirectoryFragmentSource(tmp_path / "nope").read() == {}

    def test_custom_whitelist(self, fragment_dir: Path):
        """Only whitelisted sections are read, case-insensitively."""
        entries = DirectoryFragmentSource(fragment_dir, valid_sections=["FIXED"]).read()

        assert entries == {"Fixed": ["Crash on startup"]}

    def test_no_whitelist(self, fragment_dir: Path):
        """None accepts every section name."""
        entries = DirectoryFragmentSource(fragment_dir, valid_sections=None).read()

        assert entries["Invalid"] == ["Should be skipped"]

    def test_empty_whitelist(self, fragment_dir: Path):
        """An empty whitelist accepts nothing."""
        assert DirectoryFragmentSource(fragment_dir, valid_sections=[]).read() == {}

    def test_default_sections(self, fragment_dir: Path):
        """The default whitelist is the Keep a Changelog set."""
        assert DirectoryFragmentSource(fragment_dir).valid_sections == list(DEFAULT_SECTIONS)

    def test_clear(self, fragment_dir: Path):
        """Clearing removes fragment-shaped files only."""
        DirectoryFragmentSource(fragment_dir).clear()

        assert sorted(p.name for p in fragment_dir.iterdir()) == ["README.md"]

    def test_clear_missing_directory(self, tmp_path: Path):
        """Clearing a missing directory does nothing."""
        DirectoryFragmentSource(tmp_path / "nope").clear()

    def test_fragment_files(self, fragment_dir: Path):
        """Only fragment-shaped names are listed, whatever their section."""
        names = [p.name for p in DirectoryFragmentSource(fragment_dir).fragment_files()]

        assert names == [
            "1.added.md",
            "1.invalid.md",
            "2.Fixed.md",
            "3.added.txt",
            "4.security.md",
        ]


def _commit(sha: str, message: str) -> Commit:
    return Commit(sha=sha, message=message)


class TestParseTrailers:
    """Tests for parse_trailers."""

    def test_single_trailer(self):
        """A trailer becomes an entry with the commit sha."""
        commits = [_commit("abc1234", "Fix login\n\nFixed: Login with SSO\n")]

        assert parse_trailers(commits, list(DEFAULT_SECTIONS)) == {
            "Fixed": ["Login with SSO (abc1234)"]
        }

    def test_case_insensitive_key(self):
        """Trailer keys are matched case-insensitively and capitalized."""
        commits = [_commit("abc1234", "Subject\n\nADDED: Shouting feature")]

        assert parse_trailers(commits, list(DEFAULT_SECTIONS)) == {
            "Added": ["Shouting feature (abc1234)"]
        }

    def test_continuation_lines(self):
        """Following non-trailer lines are joined with a space."""
        message = "Subject\n\nChanged: The parser now\n  handles tabs\nand spaces\n"
        commits = [_commit("abc1234", message)]

        assert parse_trailers(commits, list(DEFAULT_SECTIONS)) == {
            "Changed": ["The parser now handles tabs and spaces (abc1234)"]
        }

    def test_continuation_stops_at_next_trailer(self):
        """A new trailer line ends the previous entry."""
        message = "Subject\n\nAdded: One\nSigned-off-by: Dev <dev@example.com>\nFixed: Two\n"
        commits = [_commit("abc1234", message)]

        assert parse_trailers(commits, list(DEFAULT_SECTIONS)) == {
            "Added": ["One (abc1234)"],
            "Fixed": ["Two (abc1234)"],
        }

    def test_unknown_sections_ignored(self):
        """Trailers outside the whitelist are skipped."""
        commits = [_commit("abc1234", "Subject\n\nReviewed-by: Someone\nNotes: Skip me\n")]

        assert parse_trailers(commits, list(DEFAULT_SECTIONS)) == {}

    def test_commit_order(self):
        """Entries keep commit order across commits."""
        commits = [
            _commit("aaa1111", "First\n\nAdded: One"),
            _commit("bbb2222", "Second\n\nAdded: Two"),
        ]

        assert parse_trailers(commits, list(DEFAULT_SECTIONS)) == {
            "Added": ["One (aaa1111)", "Two (bbb2222)"]
        }

    def test_url_is_not_a_trailer(self):
        """A line like a URL does not start a new trailer."""
        message = "Subject\n\nFixed: See\nhttps://example.com/issue/1\n"
        commits = [_commit("abc1234", message)]

        assert parse_trailers(commits, list(DEFAULT_SECTIONS)) == {
            "Fixed": ["See https://example.com/issue/1 (abc1234)"]
        }

    def test_no_space_after_colon(self):
        """A trailer value may follow the colon directly."""
        commits = [_commit("abc1234", "Subject\n\nAdded:New thing")]

        assert parse_trailers(commits, ["Added"]) == {"Added": ["New thing (abc1234)"]}


@pytest.fixture
def history(fake_repository):
    """History with two release tags; v1.1.0 was created last."""
    return fake_repository(
        commits=[
            _commit("c000001", "Initial\n\nAdded: Before any tag"),
            _commit("c000002", "Release 1.1.0\n\nAdded: Shipped in 1.1.0"),
            _commit("c000003", "Work\n\nFixed: After the tag\nVersion: minor"),
            _commit("c000004", "More work\n\nSecurity: Patched a hole\nversion: patch"),
        ],
        tags={"v1.1.0": 1, "v2.0.0-old": 0, "nightly": 3},
    )


class TestGitTrailerFragmentSource:
    """Tests for GitTrailerFragmentSource."""

    def test_reads_after_last_tag(self, history):
        """Only commits after the boundary tag are read."""
        entries = GitTrailerFragmentSource(history).read()

        assert entries == {
            "Fixed": ["After the tag (c000003)"],
            "Security": ["Patched a hole (c000004)"],
        }
        assert history.requested_refs == ["v1.1.0"]

    def test_last_tag_is_newest_created(self, history):
        """The boundary is the most recently created matching tag."""
        source = GitTrailerFragmentSource(history)

        assert source.last_tag() == "v1.1.0"
        assert str(source.last_tag_version()) == "1.1.0"

    def test_custom_tag_pattern(self, history):
        """A custom pattern selects a different boundary."""
        source = GitTrailerFragmentSource(history, tag_pattern=r"^v(\d+\.\d+\.\d+)-old$")

        assert source.last_tag() == "v2.0.0-old"
        assert str(source.last_tag_version()) == "2.0.0"
        assert "Added" in source.read()

    def test_no_matching_tag_reads_everything(self, fake_repository):
        """Without a tag every commit is read."""
        repo = fake_repository(commits=[_commit("c000001", "Initial\n\nAdded: Everything")])
        source = GitTrailerFragmentSource(repo)

        assert source.last_tag() is None
        assert source.last_tag_version() is None
        assert source.read() == {"Added": ["Everything (c000001)"]}
        assert repo.requested_refs == [None]

    def test_unavailable_repository(self, history):
        """A missing repository yields nothing instead of failing."""
        history.available = False
        source = GitTrailerFragmentSource(history)

        assert source.read() == {}
        assert source.last_tag() is None
        assert source.read_version_bump() is None

    def test_custom_sections(self, history):
        """The whitelist applies to trailer names."""
        source = GitTrailerFragmentSource(history, valid_sections=["fixed"])

        assert source.read() == {"Fixed": ["After the tag (c000003)"]}

    def test_read_version_bump(self, history):
        """The highest requested bump wins."""
        assert GitTrailerFragmentSource(history).read_version_bump() is Segment.MINOR

    def test_no_version_trailer(self, fake_repository):
        """No Version: trailer means no bump."""
        repo = fake_repository(commits=[_commit("c000001", "Initial\n\nAdded: Thing")])

        assert GitTrailerFragmentSource(repo).read_version_bump() is None

    def test_version_trailer_not_an_entry(self, history):
        """Version: trailers never become changelog entries."""
        source = GitTrailerFragmentSource(history, valid_sections=None)

        assert "Version" not in source.read()

    def test_clear_is_noop(self, history):
        """History is never modified."""
        GitTrailerFragmentSource(history).clear()
        assert len(history.commits) == 4

    def test_invalid_tag_pattern(self, history):
        """An invalid regex is rejected."""
        with pytest.raises(FragmentSourceError, match="Invalid tag pattern"):
            GitTrailerFragmentSource(history, tag_pattern="^v(")

    def test_tag_pattern_without_group(self, history):
        """The pattern must capture the version."""
        with pytest.raises(FragmentSourceError, match="capture group"):
            GitTrailerFragmentSource(history, tag_pattern=r"^v\d+")


class TestCreateFragmentSource:
    """Tests for create_fragment_source."""

    def test_none(self):
        """None disables harvesting."""
        assert isinstance(create_fragment_source(None), NullFragmentSource)

    def test_false(self):
        """False disables harvesting."""
        assert isinstance(create_fragment_source(False), NullFragmentSource)

    def test_git(self, history):
        """The string git selects commit trailers."""
        source = create_fragment_source("git", repository=history)

        assert isinstance(source, GitTrailerFragmentSource)
        assert source.repository is history

    def test_directory(self, tmp_path: Path):
        """Any other path selects a directory."""
        source = create_fragment_source(tmp_path)

        assert isinstance(source, DirectoryFragmentSource)
        assert source.directory == tmp_path

    def test_directory_string_with_sections(self, tmp_path: Path):
        """The whitelist is passed to the directory source."""
        source = create_fragment_source(str(tmp_path), valid_sections=["added"])

        assert isinstance(source, DirectoryFragmentSource)
        assert source.valid_sections == ["Added"]

    @pytest.mark.parametrize("option", [True, 42, "", "   "])
    def test_invalid(self, option):
        """Unsupported options are rejected."""
        with pytest.raises(FragmentSourceError, match="Invalid fragment option"):
            create_fragment_source(option)
