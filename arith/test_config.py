"""
設定管理 (config.ini) のユニットテスト
"""
import logging
import os
import tempfile
import unittest

from arith.config import ArithConfig, Constants, to_yes_no
from arith.environment import Constant
from arith.errors import ReadOnlyNameError


class TestArithConfig(unittest.TestCase):
    """設定値の既定と変更"""

    def setUp(self):
        self.config = ArithConfig()

    def test_defaults(self):
        self.assertEqual(self.config.env["Echo"], "Yes")
        self.assertEqual(self.config.env["Log"], "No")
        self.assertEqual(self.config.env["MaxDepth"], Constants.DEFAULT_MAX_DEPTH)
        self.assertTrue(self.config.echo)
        self.assertFalse(self.config.protect_builtins)

    def test_to_yes_no(self):
        for value in ["1", "on", "TRUE", "yes", '"Yes"']:
            self.assertEqual(to_yes_no(value), "Yes")
        for value in ["0", "off", "False", "no"]:
            self.assertEqual(to_yes_no(value), "No")
        with self.assertRaises(AttributeError):
            to_yes_no("maybe")

    def test_boolean_setter(self):
        self.assertEqual(self.config.set("Echo", "off"), "Echo mode: No")
        self.assertFalse(self.config.echo)
        self.config.set("ProtectBuiltins", "on")
        self.assertTrue(self.config.protect_builtins)

    def test_max_depth(self):
        self.assertEqual(self.config.set("MaxDepth", "50"), "MaxDepth: 50")
        self.assertEqual(self.config.env["MaxDepth"], 50)
        for value in ["0", "-1", str(Constants.MAX_DEPTH_LIMIT + 1), "deep"]:
            with self.assertRaises(AttributeError):
                self.config.set("MaxDepth", value)
        self.assertEqual(self.config.env["MaxDepth"], 50)

    def test_unknown_key(self):
        with self.assertRaises(AttributeError):
            self.config.set("Color", "red")

    def test_new_environment(self):
        env = self.config.new_environment()
        self.assertIsInstance(env.lookup("pi"), Constant)
        env.assign("pi", 3.0)

        self.config.set("ProtectBuiltins", "Yes")
        env = self.config.new_environment()
        with self.assertRaises(ReadOnlyNameError):
            env.assign("pi", 3.0)

    def test_apply_log_mode(self):
        root = logging.getLogger()
        level = root.level
        try:
            self.config.set("Log", "Yes")
            self.config.apply_log_mode()
            self.assertEqual(root.level, logging.DEBUG)
            self.config.set("Log", "No")
            self.config.apply_log_mode()
            self.assertEqual(root.level, logging.CRITICAL)
        finally:
            root.setLevel(level)


class TestLoad(unittest.TestCase):
    """config.ini の読み込み"""

    def _write(self, text):
        fd, path = tempfile.mkstemp(suffix=".ini")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_load(self):
        path = self._write('[ENV]\nEcho = "No"\nMaxDepth = 120\nProtectBuiltins = "Yes"\n')
        config = ArithConfig.load(path)
        self.assertFalse(config.echo)
        self.assertEqual(config.env["MaxDepth"], 120)
        self.assertTrue(config.protect_builtins)
        # 書かれていない項目は既定値
        self.assertEqual(config.env["Log"], "No")

    def test_missing_file(self):
        config = ArithConfig.load(os.path.join(tempfile.gettempdir(), "no-such-arith.ini"))
        self.assertEqual(config.env, ArithConfig().env)

    def test_missing_section(self):
        path = self._write("[OTHER]\nEcho = No\n")
        self.assertTrue(ArithConfig.load(path).echo)

    def test_invalid_value(self):
        path = self._write("[ENV]\nMaxDepth = 100000\n")
        with self.assertRaises(AttributeError):
            ArithConfig.load(path)


if __name__ == "__main__":
    unittest.main()
