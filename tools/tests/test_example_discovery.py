import unittest
import os
import shutil
import sys
import tempfile

# Add parent dir to path so we can import example_discovery
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
import config_store
import example_discovery
import example_registry


class TestExampleDiscovery(unittest.TestCase):

    def setUp(self):
        self.root = tempfile.mkdtemp()
        self.write("contracts/fundamentals/fhe-operations/FHEAdd.sol", "contract FHEAdd {}\n")
        self.write("test/fundamentals/fhe-operations/FHEAdd.ts", "")
        self.write("contracts/gaming/EncryptedDice.sol", "contract EncryptedDice is Config {\n}\n")
        self.write("test/gaming/EncryptedDice.ts", "")
        self.write("contracts/gaming/cards/PokerHand.sol", "contract PokerHand {}\n")
        self.write("test/gaming/PokerHand.ts", "")
        self.write("contracts/gaming/NoTest.sol", "contract NoTest {}\n")
        self.write("contracts/gaming/Helpers.sol", "library Helpers {}\n")
        self.write("test/gaming/Helpers.ts", "")
        self.write("contracts/Top.sol", "contract Top {}\n")
        self.write("test/Top.ts", "")
        self.table = {
            "fundamentals": {
                "name": "Fundamentals",
                "description": "Core",
                "items": [{"path": "contracts/fundamentals/fhe-operations/FHEAdd.sol",
                           "test": "test/fundamentals/fhe-operations/FHEAdd.ts"}],
            },
        }

    def tearDown(self):
        shutil.rmtree(self.root)

    def write(self, rel, content):
        path = os.path.join(self.root, rel)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f: f.write(content)

    def test_discover_examples(self):
        found = example_discovery.discover_examples(self.root)
        self.assertEqual([e["key"] for e in found], ["fhe-add", "encrypted-dice", "poker-hand"])
        dice = found[1]
        self.assertEqual(dice["category"], "gaming")
        self.assertEqual(dice["contract_name"], "EncryptedDice")
        self.assertEqual(dice["item"], {"path": "contracts/gaming/EncryptedDice.sol", "test": "test/gaming/EncryptedDice.ts"})

    def test_test_falls_back_to_category_folder(self):
        found = {e["key"]: e for e in example_discovery.discover_examples(self.root)}
        self.assertEqual(found["poker-hand"]["item"]["test"], "test/gaming/PokerHand.ts")
        self.assertEqual(found["poker-hand"]["category"], "gaming")

    def test_find_new_examples_skips_registered(self):
        new = example_discovery.find_new_examples(self.root, self.table)
        self.assertEqual([e["key"] for e in new], ["encrypted-dice", "poker-hand"])

    def test_register_examples(self):
        config_path = os.path.join(self.root, "categories-config.ts")
        with open(config_path, "w") as f: f.write(config_store.serialize_config(self.table))
        new = example_discovery.find_new_examples(self.root, self.table)
        example_discovery.register_examples(config_path, new)
        table = config_store.load_config(config_path)
        self.assertEqual(list(table), ["fundamentals", "gaming"])
        self.assertEqual(table["gaming"]["name"], "Gaming")
        self.assertEqual(len(table["gaming"]["items"]), 2)
        self.assertEqual(example_discovery.find_new_examples(self.root, table), [])
        self.assertEqual(example_registry.find_example(table, "poker-hand")["category"], "gaming")


if __name__ == "__main__":
    unittest.main()
