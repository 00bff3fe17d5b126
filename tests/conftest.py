"""Pytest configuration and fixtures for jspnav tests."""

import shutil
import tempfile
import textwrap
import zipfile
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional

import pytest

from jspnav import config
from jspnav.archives import ArchiveAccessLayer
from jspnav.config_manager import NavigatorSettings
from jspnav.models import DependencyCoordinate, SourceRoot


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def write_pom(
    directory: Path,
    modules: Optional[List[str]] = None,
    deps: Optional[List[DependencyCoordinate]] = None,
    source_directory: Optional[str] = None,
) -> Path:
    """Write a minimal ``pom.xml`` with optional modules and dependencies."""
    directory.mkdir(parents=True, exist_ok=True)
    parts = ["<project>"]
    if source_directory:
        parts.append(f"  <build>\n    <sourceDirectory>{source_directory}</sourceDirectory>\n  </build>")
    if modules:
        parts.append("  <modules>")
        parts.extend(f"    <module>{module}</module>" for module in modules)
        parts.append("  </modules>")
    if deps:
        parts.append("  <dependencies>")
        for dep in deps:
            parts.append(
                "    <dependency>\n"
                f"      <groupId>{dep.group_id}</groupId>\n"
                f"      <artifactId>{dep.artifact_id}</artifactId>\n"
                f"      <version>{dep.version}</version>\n"
                "    </dependency>"
            )
        parts.append("  </dependencies>")
    parts.append("</project>")
    pom = directory / "pom.xml"
    pom.write_text("\n".join(parts), encoding="utf-8")
    return pom


def write_java(source_root: Path, qualified_name: str, body: str) -> Path:
    """Write ``a/b/C.java`` under *source_root* and return its path."""
    path = source_root.joinpath(*qualified_name.split(".")).with_suffix(".java")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(body).lstrip("\n"), encoding="utf-8")
    return path


def write_archive(path: Path, entries: Dict[str, str]) -> Path:
    """Write a zip archive with the given text entries."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, textwrap.dedent(content).lstrip("\n"))
    return path


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path_factory):
    """Point the config file at an empty per-test location."""
    home = tmp_path_factory.mktemp("jspnav-home")
    monkeypatch.setattr(config, "BASE_DIR", home)
    monkeypatch.setattr(config, "CONFIG_FILE", home / "config.toml")
    return home


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def archives(temp_dir: Path) -> Generator[ArchiveAccessLayer, None, None]:
    layer = ArchiveAccessLayer(temp_dir / "extracted")
    yield layer
    layer.close()


@pytest.fixture
def settings(temp_dir: Path) -> NavigatorSettings:
    """Settings whose archive homes all live inside the temp directory."""
    return NavigatorSettings(
        dependency_cache_root=temp_dir / "m2",
        platform_home=temp_dir / "jdk",
        extract_dir=temp_dir / "extracted",
    )


@pytest.fixture
def source_root(temp_dir: Path) -> SourceRoot:
    src = temp_dir / "webapp" / "src" / "main" / "java"
    src.mkdir(parents=True)
    return SourceRoot(module_path=temp_dir / "webapp", source_path=src)


@pytest.fixture
def java_file() -> Callable[[Path, str, str], Path]:
    return write_java


@pytest.fixture
def archive_file() -> Callable[[Path, Dict[str, str]], Path]:
    return write_archive


@pytest.fixture
def pom_file() -> Callable[..., Path]:
    return write_pom


@pytest.fixture
def commons_lang() -> DependencyCoordinate:
    return DependencyCoordinate("org.apache.commons", "commons-lang3", "3.12.0")


@pytest.fixture
def dependency_archive(settings: NavigatorSettings, commons_lang: DependencyCoordinate) -> Path:
    """A ``-sources.jar`` for commons-lang3 in the fake local repository."""
    return write_archive(
        commons_lang.sources_archive(settings.dependency_cache_root),
        {
            "org/apache/commons/lang3/StringUtils.java": """
                package org.apache.commons.lang3;

                public class StringUtils {

                    public static boolean isEmpty(final CharSequence cs) {
                        return cs == null || cs.length() == 0;
                    }

                    public static String join(Object[] array, String separator) {
                        return null;
                    }

                    public static String join(Object[] array, String separator, int startIndex, int endIndex) {
                        return null;
                    }
                }
            """,
        },
    )


@pytest.fixture
def platform_archive(settings: NavigatorSettings) -> Path:
    """A JDK-style ``lib/src.zip`` with module-prefixed entries."""
    return write_archive(
        settings.platform_home / "lib" / "src.zip",
        {
            "java.base/java/lang/String.java": """
                package java.lang;

                public final class String implements CharSequence {

                    public int length() {
                        return 0;
                    }

                    public String substring(int beginIndex) {
                        return this;
                    }

                    public String substring(int beginIndex, int endIndex) {
                        return this;
                    }
                }
            """,
            "java.base/java/util/ArrayList.java": """
                package java.util;

                public class ArrayList<E> {

                    public boolean add(E e) {
                        return true;
                    }

                    public void add(int index, E element) {
                    }
                }
            """,
        },
    )


@pytest.fixture
def sample_webapp() -> Path:
    """Path to the bundled sample Maven webapp."""
    return FIXTURES_DIR / "sample_webapp"
