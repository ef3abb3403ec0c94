"""Tests for release orchestration."""

from __future__ import annotations

import pytest

from bumpwright.core.changes import ChangeSource, ChangeType
from bumpwright.core.mode import Mode
from bumpwright.core.package import Package
from bumpwright.core.release import (
    bump_version,
    current_versions,
    get_version,
    last_stable_tag,
    prepare_release,
)
from bumpwright.core.version import ConventionalRule, Rule, StableVersion, Version
from bumpwright.exceptions import (
    InvalidPrereleaseVersionError,
    MissingModuleLineError,
    NoPackagesError,
    NoReleaseError,
    TooManyPackagesError,
)
from bumpwright.project.versioned_file import VersionedFile
from tests.helpers import FakeRepository, make_package, write_changeset


def recorded_version(package):
    return VersionedFile.load(package.versioned_files[0].path).version


class TestCurrentVersions:
    """Tests for current_versions()."""

    def test_file_version_wins(self, tmp_path):
        """The recorded stable version is used even when tags lag behind."""
        package = make_package(tmp_path, "1.5.0")

        result = current_versions(package, ["v1.0.0"])

        assert result.stable == StableVersion(1, 5, 0)
        assert result.prerelease is None

    def test_file_prerelease_takes_stable_from_tags(self, tmp_path):
        """A recorded prerelease keeps the stable version from tags."""
        package = make_package(tmp_path, "1.3.0-rc.1")

        result = current_versions(package, ["v1.2.0", "v1.3.0-rc.0"])

        assert result.stable == StableVersion(1, 2, 0)
        assert str(result.prerelease) == "1.3.0-rc.1"

    def test_stale_file_prerelease_dropped(self, tmp_path):
        """A recorded prerelease older than the released version is ignored."""
        package = make_package(tmp_path, "1.3.0-rc.1")

        result = current_versions(package, ["v1.3.0"])

        assert result.stable == StableVersion(1, 3, 0)
        assert result.prerelease is None

    def test_newer_tag_prerelease_kept(self, tmp_path):
        """A stable file version keeps a newer prerelease from tags."""
        package = make_package(tmp_path, "1.2.0")

        result = current_versions(package, ["v1.2.0", "v1.3.0-rc.0"])

        assert str(result.prerelease) == "1.3.0-rc.0"

    def test_no_tags_no_prerelease_stable(self, tmp_path):
        """Without tags a recorded prerelease sits on top of 0.0.0."""
        package = make_package(tmp_path, "0.1.0-rc.0")

        result = current_versions(package, [])

        assert result.stable == StableVersion(0, 0, 0)
        assert str(result.latest) == "0.1.0-rc.0"

    def test_last_stable_tag(self, tmp_path):
        """The last stable tag is named after the package."""
        package = make_package(tmp_path, "1.0.0", name="first")

        assert last_stable_tag(package, ["first/v1.0.0", "first/v1.1.0-rc.0", "v5.0.0"]) == "first/v1.0.0"
        assert last_stable_tag(package, ["v5.0.0"]) is None


class TestGetVersion:
    """Tests for get_version()."""

    def test_single_package(self, tmp_path):
        """The single package's current version is returned."""
        package = make_package(tmp_path, "2.1.0")

        assert str(get_version([package], []).latest) == "2.1.0"

    def test_no_packages(self):
        """At least one package is needed."""
        with pytest.raises(NoPackagesError):
            get_version([], [])

    def test_too_many_packages(self, tmp_path):
        """Only one package is allowed."""
        packages = [make_package(tmp_path / "a", "1.0.0", name="a"), make_package(tmp_path / "b", "1.0.0", name="b")]

        with pytest.raises(TooManyPackagesError):
            get_version(packages, [])


class TestBumpVersion:
    """Tests for bump_version()."""

    def test_applies_rule(self, tmp_path):
        """An explicit rule is written to the package files."""
        package = make_package(tmp_path, "1.2.3")

        version = bump_version(Rule.minor(), [package], ["v1.2.3"], Mode.apply())

        assert str(version) == "1.3.0"
        assert recorded_version(package) == version

    def test_preview(self, tmp_path):
        """Preview mode describes the bump and leaves files alone."""
        package = make_package(tmp_path, "1.2.3")
        mode = Mode.preview()

        version = bump_version(Rule.pre("rc", ConventionalRule.MAJOR), [package], [], mode)

        assert str(version) == "2.0.0-rc.0"
        assert recorded_version(package) == Version.parse("1.2.3")
        assert mode.recorder.lines[-1] == "Would bump version to 2.0.0-rc.0"

    def test_release_promotes(self, tmp_path):
        """Release turns the recorded prerelease into a stable version."""
        package = make_package(tmp_path, "1.3.0-rc.2")

        version = bump_version(Rule.release(), [package], ["v1.2.0"], Mode.apply())

        assert str(version) == "1.3.0"

    def test_release_without_prerelease(self, tmp_path):
        """Release needs a prerelease."""
        package = make_package(tmp_path, "1.2.0")

        with pytest.raises(InvalidPrereleaseVersionError):
            bump_version(Rule.release(), [package], [], Mode.apply())


class TestPrepareRelease:
    """Tests for prepare_release()."""

    def test_breaking_commit_since_tag(self, tmp_path):
        """A breaking commit after v1.0.0 releases 2.0.0."""
        package = make_package(tmp_path, "1.0.0")
        repo = FakeRepository(tags=["v1.0.0"], commits={"v1.0.0": ["feat!: Breaking change"]})

        (release,) = prepare_release([package], repo, changeset_dir=tmp_path / ".changeset")

        assert repo.queried == ["v1.0.0"]
        assert str(release.previous) == "1.0.0"
        assert str(release.version) == "2.0.0"
        assert release.tag == "v2.0.0"
        assert recorded_version(package) == Version.parse("2.0.0")
        assert "### Breaking Changes" in release.notes
        assert "- Breaking change" in release.notes

    def test_no_tags_reads_all_history(self, tmp_path):
        """Without a stable tag every commit counts."""
        package = make_package(tmp_path, "0.1.0")
        repo = FakeRepository(commits={None: ["fix: a"]})

        (release,) = prepare_release([package], repo, changeset_dir=tmp_path / ".changeset")

        assert repo.queried == [None]
        assert str(release.version) == "0.1.1"

    def test_nothing_to_release(self, tmp_path):
        """Only non-releasable commits means no release."""
        package = make_package(tmp_path, "1.0.0")
        repo = FakeRepository(tags=["v1.0.0"], commits={"v1.0.0": ["chore: tidy", "docs: typo"]})

        with pytest.raises(NoReleaseError):
            prepare_release([package], repo, changeset_dir=tmp_path / ".changeset")
        assert recorded_version(package) == Version.parse("1.0.0")

    def test_nothing_to_release_in_preview(self, tmp_path):
        """Preview mode reports the same outcome."""
        package = make_package(tmp_path, "1.0.0")

        with pytest.raises(NoReleaseError):
            prepare_release([package], FakeRepository(), mode=Mode.preview(), changeset_dir=tmp_path / ".changeset")

    def test_no_packages(self):
        """At least one package is needed."""
        with pytest.raises(NoPackagesError):
            prepare_release([], FakeRepository())

    def test_skip_release_commits_ignored(self, tmp_path):
        """Commits marked to skip release do not count."""
        package = make_package(tmp_path, "1.0.0")
        repo = FakeRepository(tags=["v1.0.0"], commits={"v1.0.0": ["feat: secret [skip release]", "fix: visible"]})

        (release,) = prepare_release([package], repo, changeset_dir=tmp_path / ".changeset")

        assert str(release.version) == "1.0.1"

    def test_changeset_and_commit_merge(self, tmp_path):
        """A major change file outranks a feature commit."""
        changeset_dir = tmp_path / ".changeset"
        changeset = write_changeset(changeset_dir, "big", "default: major", "# Big change\n\nWith details.")
        package = make_package(tmp_path / "pkg", "1.2.3")
        repo = FakeRepository(tags=["v1.2.3"], commits={"v1.2.3": ["feat: small feature"]})

        (release,) = prepare_release([package], repo, changeset_dir=changeset_dir)

        assert str(release.version) == "2.0.0"
        assert [c.source for c in release.changes] == [ChangeSource.COMMIT, ChangeSource.CHANGESET]
        assert "#### Big change" in release.notes
        assert "- small feature" in release.notes
        assert not changeset.exists()

    def test_custom_change_type(self, tmp_path):
        """Custom change types release only with a configured severity."""
        changeset_dir = tmp_path / ".changeset"
        write_changeset(changeset_dir, "cve", "default: security", "# Patch CVE")
        package = make_package(tmp_path / "pkg", "1.0.0")
        repo = FakeRepository(tags=["v1.0.0"])

        (release,) = prepare_release(
            [package],
            repo,
            mode=Mode.preview(),
            changeset_dir=changeset_dir,
            custom_rules={"security": ConventionalRule.PATCH},
        )

        assert str(release.version) == "1.0.1"
        assert "### Security" in release.notes

    def test_custom_change_type_without_severity(self, tmp_path):
        """An unconfigured custom change type does not trigger a release."""
        changeset_dir = tmp_path / ".changeset"
        changeset = write_changeset(changeset_dir, "docs", "default: docs", "# Better docs")
        package = make_package(tmp_path / "pkg", "1.0.0")

        with pytest.raises(NoReleaseError):
            prepare_release([package], FakeRepository(tags=["v1.0.0"]), changeset_dir=changeset_dir)
        assert changeset.exists()

    def test_prerelease_keeps_changesets(self, tmp_path):
        """Prereleases leave change files for the final release."""
        changeset_dir = tmp_path / ".changeset"
        changeset = write_changeset(changeset_dir, "feature", "default: minor", "# Feature")
        package = make_package(tmp_path / "pkg", "1.0.0")
        repo = FakeRepository(tags=["v1.0.0"])

        (release,) = prepare_release([package], repo, changeset_dir=changeset_dir, prerelease_label="rc")

        assert str(release.version) == "1.1.0-rc.0"
        assert release.rule == Rule.pre("rc", ConventionalRule.MINOR)
        assert changeset.exists()

    def test_empty_prerelease_label_is_stable(self, tmp_path):
        """An empty label means a stable release, which consumes change files."""
        changeset_dir = tmp_path / ".changeset"
        changeset = write_changeset(changeset_dir, "feature", "default: minor", "# Feature")
        package = make_package(tmp_path / "pkg", "1.0.0")

        (release,) = prepare_release(
            [package], FakeRepository(tags=["v1.0.0"]), changeset_dir=changeset_dir, prerelease_label=""
        )

        assert str(release.version) == "1.1.0"
        assert release.rule == Rule.minor()
        assert not changeset.exists()

    def test_consecutive_prereleases(self, tmp_path):
        """A second prerelease increments the number."""
        package = make_package(tmp_path, "1.1.0-rc.0")
        repo = FakeRepository(tags=["v1.0.0", "v1.1.0-rc.0"], commits={"v1.0.0": ["feat: a", "fix: b"]})

        (release,) = prepare_release([package], repo, changeset_dir=tmp_path / ".changeset", prerelease_label="rc")

        assert str(release.version) == "1.1.0-rc.1"

    def test_release_after_prerelease(self, tmp_path):
        """A stable release after prereleases uses all commits since the last stable tag."""
        package = make_package(tmp_path, "1.1.0-rc.1")
        repo = FakeRepository(tags=["v1.0.0", "v1.1.0-rc.1"], commits={"v1.0.0": ["feat: a"]})

        (release,) = prepare_release([package], repo, changeset_dir=tmp_path / ".changeset")

        assert str(release.version) == "1.1.0"

    def test_override(self, tmp_path):
        """An override version wins over the derived one."""
        package = make_package(tmp_path, "1.0.0")
        repo = FakeRepository(tags=["v1.0.0"], commits={"v1.0.0": ["fix: a"]})

        (release,) = prepare_release(
            [package], repo, changeset_dir=tmp_path / ".changeset", overrides={None: Version.parse("3.0.0")}
        )

        assert str(release.version) == "3.0.0"
        assert release.rule is None

    def test_override_without_changes(self, tmp_path):
        """An override releases even without changes."""
        package = make_package(tmp_path, "1.0.0")

        (release,) = prepare_release(
            [package], FakeRepository(), changeset_dir=tmp_path / ".changeset", overrides={None: Version.parse("1.5.0")}
        )

        assert str(release.version) == "1.5.0"

    def test_dry_run_matches_real_run(self, tmp_path):
        """Preview and apply decide the same versions."""
        repo = FakeRepository(tags=["v1.0.0"], commits={"v1.0.0": ["feat: a"]})
        preview_package = make_package(tmp_path / "preview", "1.0.0")
        real_package = make_package(tmp_path / "real", "1.0.0")
        mode = Mode.preview()

        (preview,) = prepare_release([preview_package], repo, mode=mode, changeset_dir=tmp_path / ".changeset")
        (real,) = prepare_release([real_package], repo, changeset_dir=tmp_path / ".changeset")

        assert preview.version == real.version
        assert recorded_version(preview_package) == Version.parse("1.0.0")
        assert recorded_version(real_package) == Version.parse("1.1.0")
        assert mode.recorder.lines == [
            f"Would write to {preview_package.versioned_files[0].path}",
            "Would bump package version to 1.1.0",
        ]


class TestPrepareReleaseMultiplePackages:
    """Tests for prepare_release() with several packages."""

    def test_scopes_route_commits(self, tmp_path):
        """Scoped commits only release the packages declaring the scope."""
        first = make_package(tmp_path / "first", "1.0.0", name="first", scopes=["first"])
        second = make_package(tmp_path / "second", "1.0.0", name="second", scopes=["second"])
        repo = FakeRepository(
            tags=["first/v1.0.0", "second/v1.0.0"],
            commits={
                "first/v1.0.0": ["feat(first): new thing", "fix(second): other thing"],
                "second/v1.0.0": ["feat(first): new thing", "fix(second): other thing"],
            },
        )

        releases = prepare_release([first, second], repo, changeset_dir=tmp_path / ".changeset")

        assert [(r.package_name, str(r.version), r.tag) for r in releases] == [
            ("first", "1.1.0", "first/v1.1.0"),
            ("second", "1.0.1", "second/v1.0.1"),
        ]

    def test_package_without_changes_does_not_block(self, tmp_path):
        """Packages without changes are skipped, the rest still release."""
        changeset_dir = tmp_path / ".changeset"
        write_changeset(changeset_dir, "only_first", "first: patch", "# Only first")
        first = make_package(tmp_path / "first", "1.0.0", name="first")
        second = make_package(tmp_path / "second", "2.0.0", name="second")

        releases = prepare_release([first, second], FakeRepository(), changeset_dir=changeset_dir)

        assert [r.package_name for r in releases] == ["first"]
        assert recorded_version(second) == Version.parse("2.0.0")

    def test_named_override(self, tmp_path):
        """Overrides target packages by name."""
        changeset_dir = tmp_path / ".changeset"
        write_changeset(changeset_dir, "both", "first: patch\nsecond: patch", "# Both")
        first = make_package(tmp_path / "first", "1.0.0", name="first")
        second = make_package(tmp_path / "second", "1.0.0", name="second")

        releases = prepare_release(
            [first, second],
            FakeRepository(),
            changeset_dir=changeset_dir,
            overrides={"second": Version.parse("5.0.0")},
        )

        assert [str(r.version) for r in releases] == ["1.0.1", "5.0.0"]

    def test_release_notes_heading(self, tmp_path):
        """Release notes start with the version heading."""
        package = make_package(tmp_path, "1.0.0")
        repo = FakeRepository(commits={None: ["fix: a"]})

        (release,) = prepare_release([package], repo, changeset_dir=tmp_path / ".changeset")

        assert release.notes.startswith("## 1.0.1 (")
        assert [c.change_type for c in release.changes] == [ChangeType.fix()]

    def test_failing_package_leaves_files_untouched(self, tmp_path):
        """When one package cannot be updated, no file changes at all."""
        changeset_dir = tmp_path / ".changeset"
        changeset = write_changeset(changeset_dir, "first_fix", "first: patch", "# First fix")
        first = make_package(tmp_path / "first", "1.0.0", name="first")
        go_mod = tmp_path / "second" / "go.mod"
        go_mod.parent.mkdir()
        go_mod.write_text("go 1.21\n")
        second = Package.new([VersionedFile.load(go_mod)], name="second")
        repo = FakeRepository(tags=["second/v1.0.0"], commits={"second/v1.0.0": ["feat!: x"]})

        with pytest.raises(MissingModuleLineError):
            prepare_release([first, second], repo, changeset_dir=changeset_dir)

        assert recorded_version(first) == Version.parse("1.0.0")
        assert changeset.exists()
        assert go_mod.read_text() == "go 1.21\n"

    def test_skipped_package_keeps_its_change_files(self, tmp_path):
        """Change files that only reach skipped packages are kept."""
        changeset_dir = tmp_path / ".changeset"
        released = write_changeset(changeset_dir, "first_fix", "first: patch", "# First fix")
        kept = write_changeset(changeset_dir, "second_docs", "second: docs", "# Second docs")
        first = make_package(tmp_path / "first", "1.0.0", name="first")
        second = make_package(tmp_path / "second", "1.0.0", name="second")

        releases = prepare_release([first, second], FakeRepository(), changeset_dir=changeset_dir)

        assert [r.package_name for r in releases] == ["first"]
        assert not released.exists()
        assert kept.exists()
