"""Shared pytest fixtures and configuration for pytest."""

from collections.abc import Callable
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Scenario A: a config change at the root plus two files under src/
SRC_AND_ROOT_DIFF = """\
diff --git a/src/lib.rs b/src/lib.rs
index 1111111..2222222 100644
--- a/src/lib.rs
+++ b/src/lib.rs
@@ -1,3 +1,3 @@
 pub fn add(a: i32, b: i32) -> i32 {
-    a+b
+    a + b
 }
diff --git a/Cargo.toml b/Cargo.toml
index 3333333..4444444 100644
--- a/Cargo.toml
+++ b/Cargo.toml
@@ -1,2 +1,3 @@
 [package]
 name = "demo"
+version = "0.2.0"
diff --git a/src/main.rs b/src/main.rs
index 5555555..6666666 100644
--- a/src/main.rs
+++ b/src/main.rs
@@ -1,3 +1,4 @@
 fn main() {
+    env_logger::init();
     demo::run();
 }
"""


def read_fixture(name: str) -> str:
    """Read a diff fixture exactly as stored on disk."""
    return (FIXTURES_DIR / name).read_bytes().decode("utf-8")


@pytest.fixture
def fixture_text() -> Callable[[str], str]:
    """Return a loader for files under tests/fixtures."""
    return read_fixture


@pytest.fixture
def src_and_root_diff() -> str:
    return SRC_AND_ROOT_DIFF
