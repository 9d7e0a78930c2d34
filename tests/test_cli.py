import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from mutation_core.cli import main, parse_placement

CONFIG_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "config.json")


def _run(argv):
    buf = io.StringIO()
    with redirect_stdout(buf):
        code = main(argv)
    return code, buf.getvalue()


class TestCli(unittest.TestCase):
    def test_given_placement_text_when_parsing_then_type_and_origin(self):
        self.assertEqual(parse_placement("3@4,5"), (3, (4, 5)))
        self.assertEqual(parse_placement("0@ 1 2"), (0, (1, 2)))
        with self.assertRaises(ValueError):
            parse_placement("nonsense")

    def test_given_bundled_config_when_listing_then_catalog_printed(self):
        code, out = _run(["--config", CONFIG_PATH, "--list"])
        self.assertEqual(code, 0)
        self.assertIn("Glasscorn", out)
        self.assertIn("3x3", out)

    def test_given_placements_and_ticks_when_run_then_board_score_and_code_printed(self):
        # Two wheat and two carrots around (1, 1) satisfy Ashwreath.
        args = ["--config", CONFIG_PATH, "--seed", "3", "--ticks", "1"]
        for text in ("0@0,0", "0@0,1", "1@0,2", "1@1,0"):
            args += ["--place", text]
        code, out = _run(args)
        self.assertEqual(code, 0)
        self.assertIn("Board code:", out)
        self.assertIn("Wheat: base", out)
        self.assertIn("Tick 1: spawned", out)

    def test_given_export_code_when_imported_then_board_reproduced(self):
        _, out = _run(["--config", CONFIG_PATH, "--place", "0@2,2", "--place", "5@6,6"])
        board_code = out.strip().splitlines()[-1].split("Board code:", 1)[1].strip()
        code, out2 = _run(["--config", CONFIG_PATH, "--import", board_code])
        self.assertEqual(code, 0)
        self.assertTrue(out2.strip().endswith(board_code))

    def test_given_bad_inputs_when_run_then_nonzero_exit(self):
        code, out = _run(["--config", os.path.join("missing", "config.json")])
        self.assertEqual(code, 2)
        self.assertIn("error:", out)

        code, out = _run(["--config", CONFIG_PATH, "--import", "***"])
        self.assertEqual(code, 1)

        code, out = _run(["--config", CONFIG_PATH, "--place", "garbage"])
        self.assertEqual(code, 2)

        code, out = _run(["--config", CONFIG_PATH, "--spawn-probability", "2"])
        self.assertEqual(code, 2)

    def test_given_non_finite_modifier_when_run_then_error_exit(self):
        code, out = _run(["--config", CONFIG_PATH, "--fortune", "nan"])
        self.assertEqual(code, 2)
        self.assertIn("finite", out)
        code, _ = _run(["--config", CONFIG_PATH, "--chips", "inf", "--place", "0@0,0"])
        self.assertEqual(code, 2)

    def test_given_invalid_json_config_when_run_then_error(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "config.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            code, out = _run(["--config", path])
            self.assertEqual(code, 2)
            self.assertIn("invalid JSON", out)

            with open(path, "w", encoding="utf-8") as f:
                json.dump({"cards": [{"name": "Solo"}]}, f)
            code, out = _run(["--config", path])
            self.assertEqual(code, 0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
