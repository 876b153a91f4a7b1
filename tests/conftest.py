"""Global pytest environment isolation for ChadGPT.

Ensures tests never pick up a developer's real API key or config file.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

os.environ["CHADGPT_TESTING"] = "1"
os.environ.pop("ANTHROPIC_API_KEY", None)
os.environ.pop("CHADGPT_CONFIG", None)

# Make `helpers` importable the same way from every test module.
TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))
