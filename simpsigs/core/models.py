"""Data types shared by the validation pipeline.

A run produces a `TrustMap` from the trust-anchor RPM, turns every discovered
RPM into a `CandidatePackage`, and classifies each one into a
`ClassificationResult`.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

# Key ID (uppercase hex) -> identity of the key file it came from.
TrustMap = Dict[str, str]


class PackageStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"


class PackageType(str, Enum):
    """Who a validly signed package belongs to."""

    SIMP = "simp"
    OTHER = "other"
    SIMP_DEP = "simp_dep"


@dataclass(frozen=True)
class TrustedKey:
    """A signing key (primary or subkey) and the identity bound to it."""

    key_id: str
    identity: str


@dataclass(frozen=True)
class CandidatePackage:
    """An RPM found under the target directory, with its queried metadata.

    Attributes:
        absolute_path (str): The resolved path of the RPM file.
        name_version_release (str): The package's `NAME-VERSION-RELEASE`.
        signature_key_id (Optional[str]): The uppercase key ID from the
            signature header, or None if the package is not signed.
        build_host (str): The host name recorded when the RPM was built.
    """

    absolute_path: str
    name_version_release: str
    signature_key_id: Optional[str]
    build_host: str


@dataclass
class ClassificationResult:
    """The verdict for one `CandidatePackage`."""

    package: CandidatePackage
    reasons: List[str] = field(default_factory=list)
    owning_identity: Optional[str] = None
    package_type: Optional[PackageType] = None

    @property
    def status(self) -> PackageStatus:
        return PackageStatus.INVALID if self.reasons else PackageStatus.VALID

    @property
    def is_valid(self) -> bool:
        return self.status is PackageStatus.VALID

    @property
    def name(self) -> str:
        return self.package.name_version_release
