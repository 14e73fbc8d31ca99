"""
Tests for project packaging metadata
"""

import re
import unittest
from pathlib import Path

ROOT = Path(__file__).parent.parent


class TestProjectMetadata(unittest.TestCase):
    """Test the long description shipped with the distribution"""

    def setUp(self):
        self.pyproject = (ROOT / "pyproject.toml").read_text(encoding="utf-8")

    def test_readme_points_to_project_readme(self):
        match = re.search(r'^readme\s*=\s*"([^"]+)"', self.pyproject, re.MULTILINE)
        self.assertIsNotNone(match)
        self.assertEqual(match.group(1), "README.md")
        readme = ROOT / match.group(1)
        self.assertTrue(readme.is_file())
        self.assertTrue(readme.read_text(encoding="utf-8").startswith("# mechinspect"))


if __name__ == "__main__":
    unittest.main()
