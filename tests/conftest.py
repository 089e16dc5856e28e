"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides shared diff / coverage fixtures.
"""

import os
import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local prcoverage package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of prcoverage modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("prcoverage"):
        del sys.modules[module_name]


SAMPLE_CLOVER = """<?xml version="1.0" encoding="UTF-8"?>
<coverage generated="1700000000">
  <project timestamp="1700000000">
    <package name="App">
      <file name="/builds/acme/shop/src/Cart.php">
        <class name="Cart" namespace="App"/>
        <line num="9" type="method" name="add" count="1"/>
        <line num="10" type="stmt" count="1"/>
        <line num="11" type="stmt" count="0"/>
        <line num="12" type="stmt" count="3"/>
      </file>
    </package>
    <file name="/builds/acme/shop/src/Price.php">
      <line num="5" type="stmt" count="2"/>
    </file>
    <metrics files="2" loc="40" ncloc="30" statements="5" coveredstatements="3"/>
  </project>
</coverage>
"""

SAMPLE_DIFF = """diff --git a/src/Cart.php b/src/Cart.php
index 1111111..2222222 100644
--- a/src/Cart.php
+++ b/src/Cart.php
@@ -9,4 +9,6 @@ class Cart
     public function add(Item $item): void
     {
-        $this->items[] = $item;
+        $this->items[] = $item;
+        $this->total += $item->price;
+        // keep totals in sync
     }
diff --git a/README.md b/README.md
index 3333333..4444444 100644
--- a/README.md
+++ b/README.md
@@ -1,1 +1,2 @@
 # Shop
+Adds carts.
"""


@pytest.fixture
def clover_file(tmp_path: Path) -> Path:
    """Clover report on disk with absolute CI paths."""
    path = tmp_path / "clover.xml"
    path.write_text(SAMPLE_CLOVER)
    return path


@pytest.fixture
def diff_file(tmp_path: Path) -> Path:
    """Unified diff touching Cart.php (lines 11-13 added) and README.md."""
    path = tmp_path / "pr.diff"
    path.write_text(SAMPLE_DIFF)
    return path


@pytest.fixture
def clover_document() -> str:
    return SAMPLE_CLOVER


@pytest.fixture
def diff_text() -> str:
    return SAMPLE_DIFF


@pytest.fixture(autouse=True)
def isolated_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep the developer's global config and PRCOVERAGE env vars out of tests."""
    for key in list(os.environ):
        if key.upper().startswith("PRCOVERAGE"):
            monkeypatch.delenv(key)
    missing = tmp_path_factory.mktemp("global") / "none.yaml"
    monkeypatch.setattr("prcoverage.config.loader.GLOBAL_CONFIG_PATH", missing)
