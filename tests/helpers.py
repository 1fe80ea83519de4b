"""Shared fakes for the simpsigs tests."""
import os
import tempfile
import unittest
from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import patch

from simpsigs.utils.rpm import PackageInspector

SIMP_IDENTITY = "SIMP Project <releng@simp-project.org>"
SIMP_KEY = "ABCD1234ABCD1234"
SIMP_SUBKEY = "1111222233334444"
CENTOS_IDENTITY = "CentOS-7 Key (CentOS 7 Official Signing Key) <security@centos.org>"
CENTOS_KEY = "24C6A8A7F4A80EB5"
PUPPET_IDENTITY = "Puppet, Inc. Release Key <release@puppet.com>"
PUPPET_KEY = "7F438280EF8D349F"


def key_listing(identity: str, *key_ids: str) -> str:
    """Builds gpg colon output for one primary key and its subkeys."""
    lines = [f"pub:-:4096:1:{key_ids[0]}:1500000000:::-:::scESC:"]
    lines.append(f"uid:-::::1500000000::0123456789ABCDEF::{identity}:")
    for key_id in key_ids[1:]:
        lines.append(f"sub:-:4096:1:{key_id}:1500000000::::::e:")
    return "\n".join(lines) + "\n"


def rpm_query(nvr: str, key_id: Optional[str] = None, host: str = "build1.simp.dev") -> str:
    """Builds the output of the rpm metadata query for one package."""
    if key_id:
        signature = f"RSA/SHA256, Mon Jan  1 00:00:00 2018, Key ID {key_id.lower()} (none)"
    else:
        signature = "(none) (none)"
    return f"{nvr}|{signature}|{host}\n"


class FakeInspector(PackageInspector):
    """Serves canned key listings and metadata instead of running rpm and gpg.

    `key_files` maps a path inside the trust-anchor payload to the gpg listing
    of that file; `unpack` writes the listing as the file's content, and
    `inspect_keys` reads it back. `metadata` maps an RPM file name to its
    query output.
    """

    def __init__(self, key_files: Optional[Dict[str, str]] = None, metadata: Optional[Dict[str, str]] = None) -> None:
        self.key_files = key_files or {}
        self.metadata = metadata or {}
        self.unpacked_into: List[str] = []
        self.queried: List[str] = []

    def unpack(self, package: str, dest: str) -> None:
        self.unpacked_into.append(dest)
        for relative_path, listing in self.key_files.items():
            key_file = Path(dest) / relative_path
            key_file.parent.mkdir(parents=True, exist_ok=True)
            key_file.write_text(listing)

    def inspect_keys(self, key_file: str) -> str:
        return Path(key_file).read_text()

    def query_metadata(self, package: str) -> str:
        self.queried.append(package)
        return self.metadata.get(Path(package).name, "")


def default_key_files() -> Dict[str, str]:
    return {
        "etc/pki/rpm-gpg/RPM-GPG-KEY-SIMP-6": key_listing(SIMP_IDENTITY, SIMP_KEY, SIMP_SUBKEY),
        "etc/pki/rpm-gpg/RPM-GPG-KEY-CentOS-7": key_listing(CENTOS_IDENTITY, CENTOS_KEY),
        "etc/pki/rpm-gpg/RPM-GPG-KEY-puppet": key_listing(PUPPET_IDENTITY, PUPPET_KEY),
        "etc/pki/rpm-gpg/README": "not a key",
    }


def make_repo(root: Path, *rpm_names: str, anchor: str = "SIMP/noarch/simp-gpgkeys-3.1.0-0.noarch.rpm") -> Path:
    """Creates empty RPM files (and the trust anchor) below `root`."""
    for name in (anchor,) + rpm_names:
        if not name:
            continue
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")
    return root


def isolate_config(test: unittest.TestCase) -> Path:
    """Keeps `Config` from reading the machine's config files and environment.

    Moves into an empty working directory, points the user config at a file
    that does not exist, and drops every `SIMPSIGS_*` variable for the
    duration of `test`. Returns the working directory.
    """
    tmp = tempfile.TemporaryDirectory()
    test.addCleanup(tmp.cleanup)
    work_dir = Path(tmp.name)

    user_config = patch("simpsigs.core.config.USER_CONFIG_PATH", work_dir / "home" / "config.toml")
    user_config.start()
    test.addCleanup(user_config.stop)

    clean_env = {k: v for k, v in os.environ.items() if not k.startswith("SIMPSIGS_")}
    env = patch.dict(os.environ, clean_env, clear=True)
    env.start()
    test.addCleanup(env.stop)

    test.addCleanup(os.chdir, os.getcwd())
    os.chdir(work_dir)
    return work_dir
