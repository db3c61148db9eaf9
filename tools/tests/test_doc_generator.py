import unittest
import os
import shutil
import sys
import tempfile

# Add parent dir to path so we can import doc_generator
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
import doc_generator
import example_registry

CONTRACT = """/// @title FHE Add - Adds encrypted integers
/// @notice Adds two encrypted values.
contract FHEAdd {
    /// @dev Adds.
    function add() public {
    }
}
"""


class TestDocGenerator(unittest.TestCase):

    def setUp(self):
        self.root = tempfile.mkdtemp()
        self.write("contracts/fundamentals/fhe-operations/FHEAdd.sol", CONTRACT)
        self.write("test/fundamentals/fhe-operations/FHEAdd.ts", "// @dev Runs.\nit(\"adds\", async () => {\n});\n")
        self.write("contracts/gaming/EncryptedDice.sol", "contract EncryptedDice {}\n")
        self.write("test/gaming/EncryptedDice.ts", "")
        self.table = {
            "fundamentals": {"name": "Fundamentals", "description": "Core", "items": [
                {"path": "contracts/fundamentals/fhe-operations/FHEAdd.sol", "test": "test/fundamentals/fhe-operations/FHEAdd.ts"},
            ]},
            "gaming": {"name": "Gaming", "description": "Games", "items": [
                {"path": "contracts/gaming/EncryptedDice.sol", "test": "test/gaming/EncryptedDice.ts"},
                {"path": "contracts/gaming/Missing.sol", "test": "test/gaming/Missing.ts"},
            ]},
        }
        self.summary = os.path.join(self.root, "docs", "SUMMARY.md")

    def tearDown(self):
        shutil.rmtree(self.root)

    def write(self, rel, content):
        path = os.path.join(self.root, rel)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f: f.write(content)

    def read(self, rel):
        with open(os.path.join(self.root, rel)) as f: return f.read()

    def test_generate_docs_for_one_example(self):
        example = example_registry.find_example(self.table, "fhe-add")
        doc, entry = doc_generator.generate_docs(self.root, example)
        self.assertEqual(doc["output_path"], "docs/fundamentals/fhe-operations/fhe-add.md")
        page = self.read("docs/fundamentals/fhe-operations/fhe-add.md")
        self.assertTrue(page.startswith("# FHE Add\n"))
        self.assertIn("### 1. Adds.", page)
        self.assertIn("### 1. Runs.", page)
        summary = self.read("docs/SUMMARY.md")
        self.assertTrue(summary.startswith("# Summary\n"))
        self.assertIn("## Fundamentals - Fhe Operations\n\n- [FHE Add](fundamentals/fhe-operations/fhe-add.md)", summary)

    def test_generate_all_docs_reports_failures(self):
        result = doc_generator.generate_all_docs(self.root, self.table)
        self.assertEqual(result["generated"], 2)
        self.assertEqual(result["failed"], ["missing"])
        self.assertTrue(os.path.exists(os.path.join(self.root, "docs", "gaming", "encrypted-dice.md")))
        summary = self.read("docs/SUMMARY.md")
        # No @title tag: the example key is the link text.
        self.assertIn("## Gaming\n\n- [encrypted-dice](gaming/encrypted-dice.md)", summary)

    def test_regeneration_keeps_single_link(self):
        doc_generator.generate_all_docs(self.root, self.table)
        doc_generator.generate_all_docs(self.root, self.table)
        self.assertEqual(self.read("docs/SUMMARY.md").count("](fundamentals/fhe-operations/fhe-add.md)"), 1)

    def test_generate_missing_docs(self):
        example = example_registry.find_example(self.table, "fhe-add")
        doc_generator.generate_docs(self.root, example)
        result = doc_generator.generate_missing_docs(self.root, self.table)
        self.assertEqual(result["generated"], 1)
        self.assertEqual(result["failed"], ["missing"])


if __name__ == "__main__":
    unittest.main()
