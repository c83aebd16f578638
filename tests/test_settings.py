"""Tests for environment-driven settings."""

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from forknet.settings import Settings, load_env


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = Settings.from_env({})
        self.assertEqual(settings.state_dir, Path.cwd())
        self.assertEqual(settings.fork_bin, "anvil")
        self.assertEqual(settings.glue_cmd, "forknet-glue")

    def test_overrides_and_paths(self) -> None:
        settings = Settings.from_env(
            {
                "FORKNET_STATE_DIR": "/tmp/forks-state",
                "FORKNET_FORK_BIN": "/opt/bin/anvil",
                "FORKNET_GLUE_CMD": "node glue.js",
            }
        )
        self.assertEqual(settings.forks_file, Path("/tmp/forks-state/runningForks.json"))
        self.assertEqual(settings.glue_config_file, Path("/tmp/forks-state/glueConfig.json"))
        self.assertEqual(settings.glue_pid_file, Path("/tmp/forks-state/glue.pid"))
        self.assertEqual(settings.fork_log_file("base"), Path("/tmp/forks-state/.forks/base.log"))
        self.assertEqual(settings.glue_log_file, Path("/tmp/forks-state/.forks/glue.log"))
        self.assertEqual(settings.fork_bin, "/opt/bin/anvil")
        self.assertEqual(settings.glue_cmd, "node glue.js")

    def test_load_env_finds_dotenv_in_working_directory(self) -> None:
        previous_cwd = os.getcwd()
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / ".env").write_text("MOONBEAM_RPC=https://from-cwd\n")
            with mock.patch.dict(os.environ, {}, clear=False):
                os.environ.pop("MOONBEAM_RPC", None)
                os.chdir(tmpdir)
                try:
                    load_env()
                finally:
                    os.chdir(previous_cwd)
                self.assertEqual(os.environ.get("MOONBEAM_RPC"), "https://from-cwd")

    def test_load_env_does_not_override(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            env_path = Path(tmpdir) / ".env"
            env_path.write_text("ZORA_RPC=https://from-file\nBASE_RPC=https://base-file\n")
            with mock.patch.dict(os.environ, {"ZORA_RPC": "https://from-env"}, clear=False):
                os.environ.pop("BASE_RPC", None)
                load_env(env_path)
                self.assertEqual(os.environ["ZORA_RPC"], "https://from-env")
                self.assertEqual(os.environ["BASE_RPC"], "https://base-file")


if __name__ == "__main__":
    unittest.main()
