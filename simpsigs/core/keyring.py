"""Builds the trust map from the keys shipped in the trust-anchor RPM.

The trust anchor is the single `simp-gpgkeys*.rpm` in the target directory.
Its payload carries one `RPM-GPG-KEY*` file per vendor. Every primary key and
subkey in such a file is trusted and bound to the identity of the file's
first user ID.
"""
import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from .exceptions import ConfigurationError
from .models import TrustedKey, TrustMap
from ..utils.rpm import PackageInspector

logger = logging.getLogger(__name__)

# Positions in gpg's colon-delimited listing (see gpg's doc/DETAILS).
KEY_ID_FIELD = 4
USER_ID_FIELD = 9


def find_trust_anchor(target_dir: str, pattern: str = "simp-gpgkeys*.rpm") -> str:
    """Locates the one trust-anchor RPM below `target_dir`.

    Args:
        target_dir (str): The directory to search recursively.
        pattern (str): The glob matching the trust-anchor file name.

    Returns:
        str: The absolute path of the trust-anchor RPM.

    Raises:
        ConfigurationError: If no file, or more than one file, matches.
    """
    matches = sorted(str(p.resolve()) for p in Path(target_dir).rglob(pattern) if p.is_file())

    if not matches:
        raise ConfigurationError(f"Could not find simp-gpgkeys RPM at {target_dir}")
    if len(matches) > 1:
        raise ConfigurationError(
            f"Found {len(matches)} RPMs matching '{pattern}' at {target_dir}, expected one: "
            + ", ".join(matches)
        )

    logger.info(f"Using trust anchor {matches[0]}")
    return matches[0]


def _identity_from_uid(record: List[str]) -> Optional[str]:
    if len(record) > USER_ID_FIELD and record[USER_ID_FIELD]:
        return record[USER_ID_FIELD]
    populated = [f for f in record if f]
    return populated[-1] if len(populated) > 1 else None


def parse_key_listing(listing: str) -> List[TrustedKey]:
    """Parses the colon-delimited output of gpg for one key file.

    The identity is taken from the first `uid` record. Every `pub` and `sub`
    record contributes its key ID, so subkeys share the identity of their
    primary key.

    Args:
        listing (str): The output of `gpg --with-key-data <key file>`.

    Returns:
        List[TrustedKey]: The trusted keys, or an empty list if the listing
        has no usable user ID.
    """
    records = [line.strip().split(":") for line in listing.splitlines() if line.strip()]

    identity = None
    for record in records:
        if record[0] == "uid":
            identity = _identity_from_uid(record)
            break

    if not identity:
        return []

    keys = []
    for record in records:
        if record[0] in ("pub", "sub") and len(record) > KEY_ID_FIELD and record[KEY_ID_FIELD]:
            keys.append(TrustedKey(key_id=record[KEY_ID_FIELD].upper(), identity=identity))
    return keys


def build_trust_map(keys: List[TrustedKey]) -> TrustMap:
    return {key.key_id: key.identity for key in keys}


def extract_trust_map(anchor: str, inspector: PackageInspector, key_pattern: str = "RPM-GPG-KEY*") -> TrustMap:
    """Unpacks the trust-anchor RPM and builds the trust map from its keys.

    The payload is unpacked into a temporary directory that is removed before
    this function returns, whether or not it succeeds.

    Args:
        anchor (str): The path of the trust-anchor RPM.
        inspector (PackageInspector): The tooling used to unpack the RPM and
            list the keys.
        key_pattern (str): The glob matching the key files in the payload.

    Returns:
        TrustMap: Key ID to identity, for every key found.

    Raises:
        ConfigurationError: If the payload holds no key files or no usable
            keys, since no package could validate against an empty map.
    """
    keys: List[TrustedKey] = []

    with tempfile.TemporaryDirectory(prefix="simpsigs-") as temp_dir:
        inspector.unpack(anchor, temp_dir)

        key_files = sorted(p for p in Path(temp_dir).rglob(key_pattern) if p.is_file())
        if not key_files:
            raise ConfigurationError(f"No '{key_pattern}' files found in {anchor}")

        for key_file in key_files:
            file_keys = parse_key_listing(inspector.inspect_keys(str(key_file)))
            if not file_keys:
                logger.warning(f"No user ID or keys found in {key_file.name}, skipping")
                continue
            logger.info(f"Trusting {len(file_keys)} key(s) from {key_file.name} for {file_keys[0].identity}")
            keys.extend(file_keys)

    trust_map = build_trust_map(keys)
    if not trust_map:
        raise ConfigurationError(f"No usable GPG keys found in {anchor}")
    return trust_map
