import json
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner

from pygridconfig.cli import main

DATA_DIR = Path(__file__).parent / "data"
JSON_SOURCE = str(DATA_DIR / "test.json")
YAML_SOURCE = str(DATA_DIR / "test.yaml")


class TestCli(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner()
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.settings_path = Path(self.tmp_dir.name) / "settings.toml"
        self.settings_path.write_text("timeout = 12\n\n[display]\nlimit = 0\n", encoding="utf-8")
        self.env = {"GRIDCFG_TIMEOUT": None, "GRIDCFG_DISPLAY_LIMIT": None}

    def tearDown(self):
        self.tmp_dir.cleanup()

    def invoke(self, *args):
        return self.runner.invoke(main, ["--settings", str(self.settings_path), *args], env=self.env)

    def test_keys(self):
        result = self.invoke("keys", JSON_SOURCE)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.split(), [
            "a.x", "a.y", "b.bar", "b.foo", "c.x.one", "c.x.two", "c.y.i", "c.y.j", "d.baz",
        ])

    def test_keys_with_prefix_and_alias(self):
        result = self.invoke("ls", YAML_SOURCE, "c.x")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.split(), ["c.x.one", "c.x.two"])

    def test_get(self):
        result = self.invoke("get", JSON_SOURCE, "c.x.one")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output), [1, 2, 3])

    def test_get_default(self):
        result = self.invoke("get", JSON_SOURCE, "a.z", "--default", "z")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.strip(), '"z"')

    def test_get_through_leaf_fails(self):
        result = self.invoke("get", JSON_SOURCE, "a.x.deeper")
        self.assertEqual(result.exit_code, 1)

    def test_show(self):
        result = self.invoke("show", JSON_SOURCE)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("c.x.one", result.output)
        self.assertIn("'alpha'", result.output)

    def test_show_limit(self):
        result = self.invoke("show", JSON_SOURCE, "--limit", "2")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("showing", result.output)
        self.assertNotIn("d.baz", result.output)

    def test_show_prefix(self):
        result = self.invoke("show", JSON_SOURCE, "--prefix", "b")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("b.foo", result.output)
        self.assertNotIn("a.x", result.output)

    def test_show_prefix_naming_a_leaf_fails(self):
        result = self.invoke("show", JSON_SOURCE, "--prefix", "a.x")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("not a group", result.output)
        self.assertEqual(self.invoke("keys", JSON_SOURCE, "a.x").exit_code, 1)

    def test_settings_file_with_wrong_shape(self):
        self.settings_path.write_text("display = 5\n", encoding="utf-8")
        result = self.invoke("show", JSON_SOURCE)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("a.x", result.output)

    def test_unfold_json(self):
        result = self.invoke("unfold", YAML_SOURCE, "c.x.one", "d.baz", "--json")
        self.assertEqual(result.exit_code, 0, result.output)
        variants = json.loads(result.output)
        self.assertEqual(len(variants), 6)
        self.assertEqual(
            [(v["c"]["x"]["one"], v["d"]["baz"]) for v in variants],
            [(1, "alpha"), (1, "bravo"), (2, "alpha"), (2, "bravo"), (3, "alpha"), (3, "bravo")],
        )

    def test_unfold_all_json(self):
        result = self.invoke("unfold", JSON_SOURCE, "--all", "--json")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(len(json.loads(result.output)), 18)

    def test_unfold_all_with_keys_fails(self):
        result = self.invoke("unfold", JSON_SOURCE, "a.x", "--all")
        self.assertEqual(result.exit_code, 1)

    def test_unfold_tables(self):
        result = self.invoke("unfold", JSON_SOURCE, "d.baz")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.count("Configuration"), 2)

    def test_missing_source(self):
        result = self.invoke("show", str(DATA_DIR / "missing.json"))
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Could not load", result.output)

    def test_formats(self):
        result = self.invoke("formats")
        self.assertEqual(result.exit_code, 0, result.output)
        for name in ["json", "toml", "yaml"]:
            self.assertIn(name, result.output)

    def test_config_get(self):
        result = self.invoke("config", "get", "timeout")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.output.strip(), "12")

    def test_config_list(self):
        result = self.invoke("config", "list")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Current Settings", result.output)


if __name__ == '__main__':
    unittest.main()
