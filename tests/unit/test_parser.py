"""Tests for the changelog parser."""

from __future__ import annotations

from reissue_py.core.changelog import UNRELEASED
from reissue_py.core.parser import parse, parse_version_line

PREAMBLE = (
    "All notable changes to this project will be documented in this file.\n"
    "\n"
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),\n"
    "and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html)."
)


class TestParse:
    """Tests for parse."""

    def test_title_and_preamble(self, changelog_fixture: str):
        """Title and preamble are read from the top of the file."""
        changelog = parse(changelog_fixture)

        assert changelog.title == "Change Log"
        assert changelog.preamble == PREAMBLE

    def test_versions(self, changelog_fixture: str):
        """Versions keep their order and dates."""
        changelog = parse(changelog_fixture)

        assert [(v.version, v.date) for v in changelog.versions] == [
            ("0.1.2", UNRELEASED),
            ("0.1.1", "2017-06-20"),
            ("0.1.0", "2017-06-19"),
        ]
        assert changelog.find("0.1.1").date == "2017-06-20"
        assert changelog.find("9.9.9") is None
        assert changelog.unreleased.version == "0.1.2"

    def test_sections_and_entries(self, changelog_fixture: str):
        """Entries are grouped by section; continuation lines are kept."""
        changelog = parse(changelog_fixture)

        assert changelog.versions[0].changes == {}
        assert changelog.versions[1].changes == {
            "Added": ["New feature", "More things\n  with extra lines"],
            "Fixed": ["Bug fix"],
        }
        assert changelog.versions[2].changes == {"Added": ["Initial release"]}

    def test_empty_text(self):
        """Empty input gives an empty changelog."""
        changelog = parse("")

        assert changelog.title == ""
        assert changelog.preamble == ""
        assert changelog.versions == []

    def test_no_versions(self):
        """Without any version header everything after the title is preamble."""
        changelog = parse("# Changelog\n\nNothing released yet.\n")

        assert changelog.title == "Changelog"
        assert changelog.preamble == "Nothing released yet."
        assert changelog.versions == []

    def test_missing_title(self):
        """A file starting with a version has no title or preamble."""
        changelog = parse("## [1.0.0] - 2024-01-01\n\n### Added\n\n- Thing\n")

        assert changelog.title == ""
        assert changelog.preamble == ""
        assert changelog.versions[0].changes == {"Added": ["Thing"]}

    def test_no_trailing_newline(self):
        """The last entry is kept when the file does not end in a newline."""
        changelog = parse("# Changelog\n\n## [1.0.0] - 2024-01-01\n### Fixed\n- Last entry")

        assert changelog.versions[0].changes == {"Fixed": ["Last entry"]}

    def test_blank_entries_dropped(self):
        """Bullets without text are discarded."""
        changelog = parse("## [1.0.0]\n### Added\n-\n- \n- Real\n")

        assert changelog.versions[0].changes == {"Added": ["Real"]}

    def test_empty_section_kept(self):
        """A section header without entries is kept as an empty list."""
        changelog = parse("## [1.0.0]\n### Removed\n")

        assert changelog.versions[0].changes == {"Removed": []}

    def test_text_outside_section_dropped(self):
        """Text between a version header and the first section is ignored."""
        changelog = parse("## [1.0.0] - 2024-01-01\nStray text\n### Added\n- Thing\n")

        assert changelog.versions[0].changes == {"Added": ["Thing"]}

    def test_unknown_section_names_accepted(self):
        """The parser does not whitelist section names."""
        changelog = parse("## [1.0.0]\n### Performance\n- Faster\n")

        assert changelog.versions[0].changes == {"Performance": ["Faster"]}


class TestParseVersionLine:
    """Tests for parse_version_line."""

    def test_bracketed(self):
        """Brackets around the version are removed."""
        assert parse_version_line("## [1.2.3] - 2024-05-01") == ("1.2.3", "2024-05-01")

    def test_without_brackets(self):
        """Brackets are optional."""
        assert parse_version_line("## 1.2.3 - 2024-05-01") == ("1.2.3", "2024-05-01")

    def test_without_date(self):
        """A missing date means Unreleased."""
        assert parse_version_line("## [1.2.3]") == ("1.2.3", UNRELEASED)

    def test_splits_on_first_separator(self):
        """Only the first separator splits version from date."""
        assert parse_version_line("## [1.2.3] - 2024-05-01 - yanked") == (
            "1.2.3",
            "2024-05-01 - yanked",
        )
