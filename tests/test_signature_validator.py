import unittest

from simpsigs.core.config import Config
from simpsigs.core.models import CandidatePackage
from simpsigs.validators.signature_validator import SignatureValidator

from helpers import SIMP_IDENTITY, SIMP_KEY, isolate_config


class TestSignatureValidator(unittest.TestCase):

    def setUp(self):
        isolate_config(self)
        self.config = Config()
        self.trust_map = {SIMP_KEY: SIMP_IDENTITY}

    def _package(self, key_id):
        return CandidatePackage(
            absolute_path="/repo/foo-1.0-1.noarch.rpm",
            name_version_release="foo-1.0-1",
            signature_key_id=key_id,
            build_host="build1.simp.dev",
        )

    def test_known_key(self):
        """A package signed by a trusted key records the key's identity."""
        validator = SignatureValidator(self._package(SIMP_KEY), self.trust_map, self.config)
        result = validator.validate()

        self.assertEqual(result["errors"], [])
        self.assertEqual(result["info"]["owning_identity"], SIMP_IDENTITY)

    def test_key_lookup_ignores_case(self):
        validator = SignatureValidator(self._package(SIMP_KEY.lower()), self.trust_map, self.config)
        validator.validate()
        self.assertEqual(validator.errors, [])

    def test_unknown_key(self):
        validator = SignatureValidator(self._package("ffff0000"), self.trust_map, self.config)
        validator.validate()

        self.assertEqual(validator.errors, ["Unknown Key => FFFF0000"])
        self.assertNotIn("owning_identity", validator.info)

    def test_not_signed(self):
        validator = SignatureValidator(self._package(None), self.trust_map, self.config)
        validator.validate()
        self.assertEqual(validator.errors, ["Not Signed"])


if __name__ == '__main__':
    unittest.main()
