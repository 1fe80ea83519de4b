"""Wraps the external tools used to look inside RPMs and GPG key files.

The validation pipeline only talks to a `PackageInspector`. `RpmInspector`
implements it by shelling out to `rpm`, `rpm2cpio`, `cpio` and `gpg`; tests
substitute an inspector that serves canned output.

Every call is one-shot. A missing binary, a non-zero exit status, or a timeout
is logged and turned into empty output, which the callers read as "no keys"
or "no signature".
"""
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.config import Config

logger = logging.getLogger(__name__)

# Fields returned by `query_metadata`, in order.
FIELD_SEPARATOR = "|"
QUERY_FORMAT = (
    "%{NAME}-%{VERSION}-%{RELEASE}"
    + FIELD_SEPARATOR
    + "%{SIGPGP:pgpsig} %{SIGGPG:pgpsig}"
    + FIELD_SEPARATOR
    + "%{BUILDHOST}\\n"
)


class PackageInspector(ABC):
    """The capabilities the pipeline needs from package and key tooling."""

    @abstractmethod
    def unpack(self, package: str, dest: str) -> None:
        """Extracts the file payload of `package` into the directory `dest`."""

    @abstractmethod
    def inspect_keys(self, key_file: str) -> str:
        """Returns the colon-delimited gpg listing for `key_file`."""

    @abstractmethod
    def query_metadata(self, package: str) -> str:
        """Returns `NVR|SIGPGP SIGGPG|BUILDHOST` for `package`."""


class RpmInspector(PackageInspector):
    """A `PackageInspector` backed by the rpm and gpg command-line tools.

    Attributes:
        rpm (str): The `rpm` executable.
        rpm2cpio (str): The `rpm2cpio` executable.
        cpio (str): The `cpio` executable.
        gpg (str): The `gpg` executable (`gpg2` on EL7).
        timeout (Optional[int]): Seconds allowed per command.
    """

    def __init__(self, rpm: str = "rpm", rpm2cpio: str = "rpm2cpio", cpio: str = "cpio",
                 gpg: str = "gpg2", timeout: Optional[int] = 300) -> None:
        self.rpm = rpm
        self.rpm2cpio = rpm2cpio
        self.cpio = cpio
        self.gpg = gpg
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: "Config") -> "RpmInspector":
        """Builds an inspector from the `tools` and `timeout` settings."""
        return cls(
            rpm=config.get("tools.rpm", "rpm"),
            rpm2cpio=config.get("tools.rpm2cpio", "rpm2cpio"),
            cpio=config.get("tools.cpio", "cpio"),
            gpg=config.get("tools.gpg", "gpg2"),
            timeout=config.get("timeout"),
        )

    def unpack(self, package: str, dest: str) -> None:
        """Runs `rpm2cpio <package> | cpio -idm` inside `dest`.

        Failures are only logged: a payload that did not unpack surfaces
        later as a keyring without key files.
        """
        logger.debug(f"Unpacking {package} into {dest}")
        try:
            producer = subprocess.Popen(
                [self.rpm2cpio, package],
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning(f"Could not run '{self.rpm2cpio}' on {package}: {e}")
            return

        try:
            subprocess.run(
                [self.cpio, "-idm", "--quiet"],
                stdin=producer.stdout,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                cwd=dest,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Could not unpack {package}: {e}")
        finally:
            producer.stdout.close()
            if producer.poll() is None:
                producer.kill()
            producer.wait()

    def inspect_keys(self, key_file: str) -> str:
        return self._run([self.gpg, "-q", "--with-subkey-fingerprints", "--with-key-data", key_file])

    def query_metadata(self, package: str) -> str:
        return self._run([self.rpm, "-qp", "--qf", QUERY_FORMAT, package])

    def _run(self, cmd: List[str]) -> str:
        """Runs a command and returns its stdout, or "" on any failure."""
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=True,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            logger.warning(f"Command '{cmd[0]}' exited with status {e.returncode} for {cmd[-1]}")
            return e.stdout or ""
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Could not run '{cmd[0]}' on {cmd[-1]}: {e}")
            return ""
