"""Checks that a package was built on trusted build infrastructure.

The build host recorded in the RPM must match one of the configured patterns,
which cover the SIMP build hosts and the upstream distributions SIMP ships
packages from (EPEL/Fedora, Puppet, CentOS, PostgreSQL). This check does not
depend on the signature check: a package can fail both.
"""
import re
from typing import List, Pattern

from ..core.base_validator import BaseValidator
from ..core.models import CandidatePackage, TrustMap
from ..core.config import Config


class BuildHostValidator(BaseValidator):
    """Matches the package's build host against the trusted host patterns."""

    name = "BuildHost"
    order = 20
    description = "Checks that the package was built on a trusted build host."

    def __init__(self, package: CandidatePackage, trust_map: TrustMap, config: Config) -> None:
        super().__init__(package, trust_map, config)
        self.patterns: List[Pattern[str]] = [re.compile(p) for p in config.trusted_build_hosts()]

    def _validate(self) -> None:
        build_host = self.package.build_host
        if not any(pattern.search(build_host) for pattern in self.patterns):
            self.add_error(f"Invalid Build Host: {build_host}")
