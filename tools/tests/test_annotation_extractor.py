import unittest
import os
import sys

# Add parent dir to path so we can import annotation_extractor
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
import annotation_extractor

CONTRACT = """// SPDX-License-Identifier: BSD-3-Clause-Clear
pragma solidity ^0.8.24;

/// @title FHE Add - Adds encrypted integers
/// @notice Shows how to add two encrypted values
/// with FHE.add.
contract FHEAdd is ZamaEthereumConfig {
    /// @dev Adds two values. Then stores the result. Extra sentence. And another.
    function add(uint a) public {
        if (a > 0) {
            x = a;
        }
    }
}"""

TS_TEST = """describe("FHEAdd", function () {
  // @dev Deploys a fresh contract.
  beforeEach(async function () {
    contract = await deploy();
  });

  // @dev Adds encrypted values
  it("adds", async function () {
    expect(1).to.eq(1);
  });
});"""


class TestTruncate(unittest.TestCase):

    def test_keeps_two_sentences(self):
        self.assertEqual(annotation_extractor.truncate_explanation("A. B. C. D."), "A. B.")

    def test_short_text_is_unchanged(self):
        self.assertEqual(annotation_extractor.truncate_explanation("Only one"), "Only one")
        self.assertEqual(annotation_extractor.truncate_explanation("One. Two."), "One. Two.")


class TestExtractAnnotations(unittest.TestCase):

    def test_nested_braces_function(self):
        blocks = annotation_extractor.extract_annotations(CONTRACT, "solidity")
        self.assertEqual(len(blocks), 1)
        block = blocks[0]
        self.assertEqual(block["explanation"], "Adds two values. Then stores the result.")
        self.assertEqual((block["start_line"], block["end_line"]), (9, 13))
        self.assertTrue(block["code_text"].startswith("function add(uint a) public {"))
        self.assertTrue(block["code_text"].endswith("}"))
        self.assertEqual(len(block["code_text"].split("\n")), 5)

    def test_is_deterministic(self):
        first = annotation_extractor.extract_annotations(CONTRACT, "solidity")
        self.assertEqual(first, annotation_extractor.extract_annotations(CONTRACT, "solidity"))

    def test_no_tags_yields_empty_list(self):
        self.assertEqual(annotation_extractor.extract_annotations("contract A {}\n", "solidity"), [])
        self.assertEqual(annotation_extractor.extract_annotations("", "typescript"), [])

    def test_statement_unit(self):
        source = "/// @dev Stores the value.\nvalue = 1;\nother = 2;"
        blocks = annotation_extractor.extract_annotations(source, "solidity")
        self.assertEqual(blocks[0]["code_text"], "value = 1;")
        self.assertEqual((blocks[0]["start_line"], blocks[0]["end_line"]), (2, 2))

    def test_statement_backs_up_before_declaration(self):
        source = "/// @dev Setup.\nuint x\nfunction f() public {}"
        blocks = annotation_extractor.extract_annotations(source, "solidity")
        self.assertEqual(blocks[0]["code_text"], "uint x")
        self.assertEqual(blocks[0]["end_line"], 2)

    def test_block_comment(self):
        source = "/**\n * @dev Emitted on change.\n * @param v new value\n */\nevent Changed(uint v);"
        blocks = annotation_extractor.extract_annotations(source, "solidity")
        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0]["explanation"], "Emitted on change.")
        self.assertEqual(blocks[0]["code_text"], "event Changed(uint v);")
        self.assertEqual((blocks[0]["start_line"], blocks[0]["end_line"]), (5, 5))

    def test_unbalanced_braces_run_to_end(self):
        source = "/// @dev Broken.\nfunction f() public {\n    x = 1;"
        blocks = annotation_extractor.extract_annotations(source, "solidity")
        self.assertEqual((blocks[0]["start_line"], blocks[0]["end_line"]), (2, 3))

    def test_one_line_body_closes_on_its_line(self):
        source = "/// @dev Does nothing.\nfunction f() public {}\nuint y;"
        blocks = annotation_extractor.extract_annotations(source, "solidity")
        self.assertEqual(blocks[0]["code_text"], "function f() public {}")
        self.assertEqual((blocks[0]["start_line"], blocks[0]["end_line"]), (2, 2))

    def test_nested_tag_is_reported_too(self):
        source = "/// @dev Outer.\nfunction f() public {\n    /// @dev Inner.\n    x = 1;\n}"
        blocks = annotation_extractor.extract_annotations(source, "solidity")
        self.assertEqual([b["explanation"] for b in blocks], ["Outer.", "Inner."])
        self.assertEqual((blocks[1]["start_line"], blocks[1]["end_line"]), (4, 4))

    def test_typescript_style(self):
        blocks = annotation_extractor.extract_annotations(TS_TEST, "typescript")
        self.assertEqual([b["explanation"] for b in blocks], ["Deploys a fresh contract.", "Adds encrypted values"])
        self.assertEqual((blocks[0]["start_line"], blocks[0]["end_line"]), (3, 5))
        self.assertEqual((blocks[1]["start_line"], blocks[1]["end_line"]), (8, 10))

    def test_line_markers_are_style_specific(self):
        self.assertEqual(annotation_extractor.extract_annotations("/// @dev x\nfoo();", "typescript"), [])
        self.assertEqual(annotation_extractor.extract_annotations("// @dev x\nfoo();", "solidity"), [])

    def test_unknown_style(self):
        with self.assertRaises(ValueError):
            annotation_extractor.extract_annotations(CONTRACT, "rust")


class TestHeader(unittest.TestCase):

    def test_title_and_notice(self):
        header = annotation_extractor.extract_header(CONTRACT)
        self.assertEqual(header["title"], "FHE Add")
        self.assertEqual(header["summary"], "Adds encrypted integers")
        self.assertEqual(header["notice"], "Shows how to add two encrypted values with FHE.add.")

    def test_contract_name(self):
        self.assertEqual(annotation_extractor.get_contract_name(CONTRACT), "FHEAdd")
        self.assertIsNone(annotation_extractor.get_contract_name("library L {}"))

    def test_block_notice(self):
        source = "/**\n * @title Dice\n * @notice Rolls an\n * encrypted die\n */\ncontract Dice {}"
        header = annotation_extractor.extract_header(source)
        self.assertEqual(header["title"], "Dice")
        self.assertEqual(header["notice"], "Rolls an encrypted die")


if __name__ == "__main__":
    unittest.main()
