"""Tests for release/changelog.py."""

from __future__ import annotations

from relkit.core.config import DEFAULT_NEXT_SECTION_ALIASES
from relkit.core.result import Err, Ok
from relkit.release.changelog import (
    check_next_section_content,
    extract_latest_notes,
    extract_version_from_heading,
    finalize_next_section,
    has_version_section,
    unreleased_error,
)

from ._fakes import CHANGELOG

ALIASES = DEFAULT_NEXT_SECTION_ALIASES


class TestHeadings:
    def test_version_from_heading(self) -> None:
        assert extract_version_from_heading("## [1.2.3] - 2026-01-10") == "1.2.3"
        assert extract_version_from_heading("## 0.4.0") == "0.4.0"
        assert extract_version_from_heading("## Unreleased") is None
        assert extract_version_from_heading("### 1.2.3") is None
        assert extract_version_from_heading("- bumped to 1.2.3") is None

    def test_has_version_section(self) -> None:
        assert has_version_section(CHANGELOG, "1.2.3") is True
        assert has_version_section(CHANGELOG, "1.2.4") is False


class TestExtractLatestNotes:
    def test_first_versioned_section(self) -> None:
        text = "# Changelog\n\n## [2.0.0]\n- Big change\n\n## [1.0.0]\n- Old\n"
        assert extract_latest_notes(text) == "- Big change"

    def test_skips_unreleased_section(self) -> None:
        assert extract_latest_notes(CHANGELOG) == "- Initial"

    def test_keeps_subsection_headers(self) -> None:
        text = "## 1.1.0\n### Fixed\n- Crash\n"
        assert extract_latest_notes(text) == "### Fixed\n- Crash"

    def test_no_versioned_section(self) -> None:
        assert extract_latest_notes("# Changelog\n\n## Unreleased\n- wip\n") is None

    def test_empty_section(self) -> None:
        assert extract_latest_notes("## [1.0.0]\n\n   \n## [0.9.0]\n- x\n") is None


class TestCheckNextSection:
    def test_ok(self) -> None:
        assert check_next_section_content(CHANGELOG, ALIASES) == "ok"

    def test_missing(self) -> None:
        assert check_next_section_content("## [1.0.0]\n- x\n", ALIASES) == "missing"

    def test_empty(self) -> None:
        assert check_next_section_content("## Unreleased\n\n## [1.0.0]\n", ALIASES) == "empty"

    def test_subsection_headers_only(self) -> None:
        text = "## [Unreleased]\n### Added\n### Fixed\n\n## [1.0.0]\n- x\n"
        assert check_next_section_content(text, ALIASES) == "subsection_headers_only"

    def test_alias_match_is_case_insensitive(self) -> None:
        assert check_next_section_content("## next\n- thing\n", ALIASES) == "ok"
        assert check_next_section_content("## Upcoming\n- thing\n", ["Upcoming"]) == "ok"

    def test_errors_for_statuses(self) -> None:
        assert unreleased_error("ok", ALIASES) is None

        empty = unreleased_error("empty", ALIASES)
        assert empty is not None
        assert empty.kind == "changelog_empty"
        assert empty.message == "Changelog has no unreleased entries"
        assert empty.hint == "Add entries under '## Unreleased' before releasing"

        headers = unreleased_error("subsection_headers_only", ALIASES)
        assert headers is not None
        assert headers.kind == "changelog_headers_only"
        assert headers.message == "Changelog has subsection headers but no items"
        assert headers.hint == empty.hint

        missing = unreleased_error("missing", ALIASES)
        assert missing is not None
        assert missing.kind == "changelog_missing"


class TestFinalizeNextSection:
    def test_renames_section_and_opens_new_one(self) -> None:
        result = finalize_next_section(CHANGELOG, "1.2.4", ALIASES, date="2026-10-19")

        assert isinstance(result, Ok)
        assert result.value == (
            "# Changelog\n"
            "\n"
            "## Unreleased\n"
            "\n"
            "## [1.2.4] - 2026-10-19\n"
            "### Added\n"
            "- Retry tag push\n"
            "\n"
            "## [1.2.3] - 2026-01-10\n"
            "- Initial\n"
        )
        assert extract_latest_notes(result.value) == "### Added\n- Retry tag push"

    def test_without_date(self) -> None:
        result = finalize_next_section("## Next\n- a", "0.2.0", ALIASES)

        assert result == Ok("## Next\n\n## [0.2.0]\n- a")

    def test_existing_version_is_rejected(self) -> None:
        result = finalize_next_section(CHANGELOG, "1.2.3", ALIASES)

        assert isinstance(result, Err)
        assert result.error.kind == "version_exists"

    def test_empty_section_is_rejected(self) -> None:
        result = finalize_next_section("## Unreleased\n\n## [1.0.0]\n- x\n", "1.0.1", ALIASES)

        assert isinstance(result, Err)
        assert result.error.kind == "changelog_empty"

    def test_missing_section_is_rejected(self) -> None:
        result = finalize_next_section("## [1.0.0]\n- x\n", "1.0.1", ALIASES)

        assert isinstance(result, Err)
        assert result.error.kind == "changelog_missing"
