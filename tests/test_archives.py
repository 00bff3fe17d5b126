"""Tests for source-archive access and extraction caching."""

import zipfile
from pathlib import Path

from jspnav.archives import ArchiveAccessLayer


def test_has_entry_and_suffix_lookup(archives: ArchiveAccessLayer, platform_archive: Path):
    assert archives.has_entry(platform_archive, "java.base/java/lang/String.java")
    assert not archives.has_entry(platform_archive, "java/lang/String.java")
    assert archives.find_entry_by_suffix(platform_archive, "java/lang/String.java") == (
        "java.base/java/lang/String.java"
    )
    assert archives.find_entry_by_suffix(platform_archive, "java/lang/Missing.java") is None


def test_missing_archive_is_remembered(archives: ArchiveAccessLayer, temp_dir: Path):
    missing = temp_dir / "nope-sources.jar"
    assert archives.open_archive(missing) is None
    assert not archives.has_entry(missing, "a/B.java")
    assert archives.extract(missing, "a/B.java") is None


def test_corrupt_archive_is_not_an_error(archives: ArchiveAccessLayer, temp_dir: Path):
    broken = temp_dir / "broken-sources.jar"
    broken.write_bytes(b"not a zip file")
    assert archives.open_archive(broken) is None
    # Later becoming valid does not matter: the failure is cached.
    with zipfile.ZipFile(broken, "w") as archive:
        archive.writestr("a/B.java", "class B {}")
    assert not archives.has_entry(broken, "a/B.java")


def test_extract_writes_under_archive_stem(archives: ArchiveAccessLayer, dependency_archive: Path):
    entry = "org/apache/commons/lang3/StringUtils.java"
    path = archives.extract(dependency_archive, entry)
    assert path == archives.extract_dir / "commons-lang3-3.12.0-sources" / "org" / "apache" / "commons" / "lang3" / "StringUtils.java"
    assert "class StringUtils" in path.read_text()


def test_repeat_extraction_does_not_reread_archive(archives, dependency_archive: Path, monkeypatch):
    reads = []
    original_read = zipfile.ZipFile.read

    def counting_read(self, name, pwd=None):
        reads.append(name)
        return original_read(self, name, pwd)

    monkeypatch.setattr(zipfile.ZipFile, "read", counting_read)

    entry = "org/apache/commons/lang3/StringUtils.java"
    first = archives.extract(dependency_archive, entry)
    second = archives.extract(dependency_archive, entry)
    assert first == second
    assert reads == [entry]


def test_deleted_extraction_is_recreated(archives, dependency_archive: Path):
    entry = "org/apache/commons/lang3/StringUtils.java"
    first = archives.extract(dependency_archive, entry)
    first.unlink()
    again = archives.extract(dependency_archive, entry)
    assert again == first
    assert again.is_file()


def test_unsafe_entry_names_are_refused(archives, temp_dir: Path, archive_file):
    jar = archive_file(temp_dir / "evil.jar", {"../escape.java": "class Escape {}"})
    assert archives.extraction_path(jar, "../escape.java") is None
    assert archives.extract(jar, "../escape.java") is None
    assert not (temp_dir / "escape.java").exists()


def test_missing_entry_returns_none(archives, dependency_archive: Path):
    assert archives.extract(dependency_archive, "org/Nope.java") is None


def test_unstatable_archive_counts_as_missing(archives, dependency_archive: Path, monkeypatch):
    real_is_file = Path.is_file

    def is_file(self):
        if self == dependency_archive:
            raise PermissionError(13, "Permission denied")
        return real_is_file(self)

    monkeypatch.setattr(Path, "is_file", is_file)

    assert archives.open_archive(dependency_archive) is None
    assert not archives.has_entry(dependency_archive, "org/apache/commons/lang3/StringUtils.java")
