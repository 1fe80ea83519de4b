"""Checks that a package is signed by a key from the trust anchor.

The key ID comes from the package's signature header. A package without one
is not signed; a package whose key ID is missing from the trust map is signed
by an unknown key. When the key is known, its identity is recorded as the
owner of the package.
"""
from ..core.base_validator import BaseValidator


class SignatureValidator(BaseValidator):
    """Matches the package's signing key against the trust map."""

    name = "Signature"
    order = 10
    description = "Checks that the package is signed by a trusted GPG key."

    def _validate(self) -> None:
        key_id = self.package.signature_key_id
        if not key_id:
            self.add_error("Not Signed")
            return

        key_id = key_id.upper()
        identity = self.trust_map.get(key_id)
        if identity is None:
            self.add_error(f"Unknown Key => {key_id}")
            return

        self.add_info("owning_identity", identity)
