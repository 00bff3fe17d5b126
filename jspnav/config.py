"""Configuration paths and defaults for jspnav."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

BASE_DIR = Path(os.environ.get("JSPNAV_HOME", str(Path.home() / ".jspnav"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
DEFAULT_EXTRACT_DIR = Path(
    os.environ.get("JSPNAV_EXTRACT_DIR", str(Path(tempfile.gettempdir()) / "jspnav-sources"))
).expanduser()
DEFAULT_DEPENDENCY_CACHE = Path(
    os.environ.get("M2_REPO", str(Path.home() / ".m2" / "repository"))
).expanduser()
DEFAULT_PLATFORM_HOME = os.environ.get("JAVA_HOME") or None

SOURCE_EXTENSION = ".java"
BUILD_FILE_NAME = "pom.xml"

# Probed (in order) when a workspace folder has no build file.
CONVENTIONAL_SOURCE_DIRS = ["src/main/java", "java", "src", ""]
DEFAULT_POM_SOURCE_DIR = "src/main/java"

SCAN_SKIP_DIRS = {"node_modules", ".git", "target", "build", ".idea", ".settings", "bin", ".mvn"}
# Below a source root, directories are packages; only tool metadata is skipped.
SOURCE_SKIP_DIRS = {".git", ".svn", ".idea", ".settings"}
MAX_DISCOVERY_DEPTH = 10

PLATFORM_PREFIXES = [
    "java",
    "javax",
    "jdk",
    "sun",
    "com.sun",
    "org.w3c.dom",
    "org.xml.sax",
    "org.ietf.jgss",
    "org.omg",
]
