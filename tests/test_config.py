import os
import tempfile
import unittest
from unittest.mock import patch

from simpsigs.core import config as config_module
from simpsigs.core.config import Config

from helpers import isolate_config


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.work_dir = isolate_config(self)

    def test_defaults(self):
        config = Config()

        self.assertEqual(config.get("trust_anchor_pattern"), "simp-gpgkeys*.rpm")
        self.assertEqual(config.get("tools.gpg"), "gpg2")
        self.assertIn(r"^koji-centos", config.trusted_build_hosts())

    def test_defaults_are_not_shared(self):
        Config().set("tools.gpg", "gpg")
        self.assertEqual(Config().get("tools.gpg"), "gpg2")

    def test_file_config(self):
        with tempfile.NamedTemporaryFile("w", suffix=".toml", delete=False) as f:
            f.write('timeout = 10\n[tools]\ngpg = "gpg"\n[build_hosts]\ntrusted_patterns = ["^builder$"]\n')
        self.addCleanup(os.remove, f.name)

        config = Config(config_path=f.name)

        self.assertEqual(config.get("timeout"), 10)
        self.assertEqual(config.get("tools.gpg"), "gpg")
        self.assertEqual(config.get("tools.rpm"), "rpm")
        self.assertEqual(config.trusted_build_hosts(), ["^builder$"])

    def test_unreadable_file_config(self):
        with tempfile.NamedTemporaryFile("w", suffix=".toml", delete=False) as f:
            f.write("this is = = not toml\n")
        self.addCleanup(os.remove, f.name)

        config = Config(config_path=f.name)
        self.assertEqual(config.get("timeout"), 300)

    def test_project_config_in_working_directory(self):
        (self.work_dir / "simpsigs.toml").write_text("timeout = 7\n")

        self.assertEqual(Config().get("timeout"), 7)

    def test_user_config_overrides_project_config(self):
        (self.work_dir / "simpsigs.toml").write_text("timeout = 7\n")
        user_config = config_module.USER_CONFIG_PATH
        self.assertTrue(str(user_config).startswith(str(self.work_dir)))
        user_config.parent.mkdir(parents=True)
        user_config.write_text('timeout = 9\n[tools]\nrpm = "/opt/rpm"\n')

        config = Config()

        self.assertEqual(config.get("timeout"), 9)
        self.assertEqual(config.get("tools.rpm"), "/opt/rpm")

    def test_machine_environment_is_not_read(self):
        self.assertFalse([k for k in os.environ if k.startswith("SIMPSIGS_")])
        self.assertEqual(Config().get("tools.gpg"), "gpg2")

    def test_env_config(self):
        env = {
            "SIMPSIGS_TIMEOUT": "60",
            "SIMPSIGS_DISABLE_VALIDATORS": "BuildHost, Other",
            "SIMPSIGS_TRUSTED_BUILD_HOSTS": r"\.example\.com$",
            "SIMPSIGS_GPG": "/usr/bin/gpg",
        }
        with patch.dict(os.environ, env):
            config = Config()

        self.assertEqual(config.get("timeout"), 60)
        self.assertEqual(config.get("disable_validators"), ["BuildHost", "Other"])
        self.assertEqual(config.trusted_build_hosts(), [r"\.example\.com$"])
        self.assertEqual(config.get("tools.gpg"), "/usr/bin/gpg")

    def test_invalid_env_timeout_is_ignored(self):
        with patch.dict(os.environ, {"SIMPSIGS_TIMEOUT": "soon"}):
            self.assertEqual(Config().get("timeout"), 300)

    def test_is_validator_enabled(self):
        config = Config()
        self.assertTrue(config.is_validator_enabled("BuildHost"))

        config.set("disable_validators", ["BuildHost"])
        self.assertFalse(config.is_validator_enabled("BuildHost"))

        config.set("enable_validators", ["Signature"])
        self.assertTrue(config.is_validator_enabled("Signature"))
        self.assertFalse(config.is_validator_enabled("Other"))


if __name__ == '__main__':
    unittest.main()
