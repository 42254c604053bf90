"""
Test suite for Printly.

This package contains unit tests for the print area catalogue, quality
validation, mockup composition and watermarking, plus API tests for the
Flask boundary.
"""

import sys
from pathlib import Path

# Add the project root to the Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
