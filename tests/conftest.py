"""
Pytest configuration shared by unit and integration tests.

pip install -e '.[test]'
pytest -q tests
RUN_INTEGRATION_TESTS=1 pytest -q tests/integration
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))
