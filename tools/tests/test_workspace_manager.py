import unittest
from unittest.mock import patch
import os
import shutil
import sys
import tempfile

# Add parent dir to path so we can import workspace_manager
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
import config_store
import workspace_config
import workspace_manager

TABLE = {
    "fundamentals": {"name": "Fundamentals", "description": "Core", "items": [
        {"path": "contracts/fundamentals/FHEAdd.sol", "test": "test/fundamentals/FHEAdd.ts"},
    ]},
}


class TestWorkspaceConfig(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp)

    def test_root_from_environment(self):
        with patch.dict(os.environ, {"FHEVM_EXAMPLES_ROOT": self.tmp}):
            self.assertEqual(workspace_config.resolve_project_root(), os.path.abspath(self.tmp))

    def test_load_env_keeps_existing_values(self):
        with open(os.path.join(self.tmp, ".env"), "w") as f:
            f.write("# comment\nFHEVM_TEST_A=from-file\nFHEVM_TEST_B=\"quoted\"\n")
        with patch.dict(os.environ, {"FHEVM_TEST_A": "from-env"}):
            self.assertTrue(workspace_config.load_env(self.tmp))
            self.assertEqual(os.environ["FHEVM_TEST_A"], "from-env")
            self.assertEqual(os.environ["FHEVM_TEST_B"], "quoted")
        self.assertFalse(workspace_config.load_env(os.path.join(self.tmp, "nope")))

    def test_text_helpers(self):
        path = os.path.join(self.tmp, "a", "b", "c.txt")
        workspace_config.write_text(path, "hello")
        self.assertEqual(workspace_config.read_text(path), "hello")
        with self.assertRaises(FileNotFoundError) as ctx:
            workspace_config.read_text(os.path.join(self.tmp, "missing.txt"))
        self.assertIn("missing.txt", str(ctx.exception))


class TestWorkspaceManager(unittest.TestCase):

    def setUp(self):
        self.root = tempfile.mkdtemp()
        self.config = workspace_config.config_path(self.root)
        workspace_config.write_text(self.config, config_store.serialize_config(TABLE))
        self.patcher = patch.object(workspace_config, "PROJECT_ROOT", self.root)
        self.patcher.start()

    def tearDown(self):
        self.patcher.stop()
        shutil.rmtree(self.root)

    def test_check_config(self):
        self.assertEqual(workspace_manager.main(["check-config"]), 0)

    def test_check_config_duplicate_fails(self):
        text = workspace_config.read_text(self.config).replace("  fundamentals: {", "  fundamentals: {\n  },\n  'fundamentals': {", 1)
        workspace_config.write_text(self.config, text)
        self.assertEqual(workspace_manager.main(["check-config"]), 1)

    def test_missing_config(self):
        os.remove(self.config)
        self.assertEqual(workspace_manager.main(["list"]), 1)

    def test_list(self):
        self.assertEqual(workspace_manager.main(["list"]), 0)
        self.assertEqual(workspace_manager.main(["list", "--category", "fundamentals"]), 0)

    def test_unknown_example_is_fatal(self):
        self.assertEqual(workspace_manager.main(["example", "nope"]), 1)
        self.assertEqual(workspace_manager.main(["docs", "nope"]), 1)

    @patch("example_discovery.find_new_examples", return_value=[])
    def test_discover_nothing_new(self, mock_find):
        self.assertEqual(workspace_manager.main(["discover"]), 0)
        mock_find.assert_called_once()

    @patch("project_runner.validate_generated")
    def test_validate_exit_status(self, mock_validate):
        mock_validate.return_value = [{"project": "fhevm-example-fhe-add", "type": "example", "compiled": True, "tests_passed": False, "error": "Tests failed"}]
        self.assertEqual(workspace_manager.main(["validate"]), 1)
        mock_validate.return_value = [{"project": "fhevm-example-fhe-add", "type": "example", "compiled": True, "tests_passed": True, "error": None}]
        self.assertEqual(workspace_manager.main(["validate"]), 0)

    @patch("example_scaffolder.create_category")
    @patch("example_scaffolder.create_example")
    def test_refresh_regenerates_existing_projects(self, mock_example, mock_category):
        out = os.path.join(self.root, workspace_config.OUTPUT_DIR)
        for name in ("fhevm-example-fhe-add", "fhevm-examples-fundamentals", "scratch"):
            os.makedirs(os.path.join(out, name))
        self.assertEqual(workspace_manager.main(["refresh"]), 0)

        mock_example.assert_called_once()
        args, kwargs = mock_example.call_args
        self.assertEqual(args[2], "fhe-add")
        self.assertEqual(str(args[3]), os.path.join(out, "fhevm-example-fhe-add"))
        self.assertTrue(kwargs["override"])
        mock_category.assert_called_once()
        args, kwargs = mock_category.call_args
        self.assertEqual(args[2], "fundamentals")
        self.assertTrue(kwargs["override"])

    @patch("example_scaffolder.create_example")
    def test_refresh_failure_exit_status(self, mock_example):
        os.makedirs(os.path.join(self.root, workspace_config.OUTPUT_DIR, "fhevm-example-fhe-add"))
        mock_example.side_effect = workspace_manager.example_scaffolder.ScaffoldError("Contract not found")
        self.assertEqual(workspace_manager.main(["refresh"]), 1)

    def test_refresh_without_projects(self):
        self.assertEqual(workspace_manager.main(["refresh"]), 0)

    def test_help(self):
        self.assertEqual(workspace_manager.main(["help"]), 0)
        self.assertEqual(workspace_manager.main([]), 0)


if __name__ == "__main__":
    unittest.main()
