"""
Pytest configuration for the cider test suite.

This module configures the Python path so tests can import the ``cider``
package from the src directory without installing it first.
"""
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))
