"""Renders classification results and decides the exit status.

A report is built as data first (used for `--json`) and as text lines, so the
CLI only has to pick one and print it.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .models import ClassificationResult, PackageType, TrustMap

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_PACKAGES = 2


class ReportMode(str, Enum):
    INVALID = "invalid"
    VALID = "valid"
    UNUSED_KEYS = "unused_keys"
    SIMP_PKGS = "simp_pkgs"
    SIMP_DEP_PKGS = "simp_dep_pkgs"
    OTHER_PKGS = "other_pkgs"

    @classmethod
    def choices(cls) -> List[str]:
        return [mode.value for mode in cls]


REPORT_DESCRIPTIONS = {
    ReportMode.INVALID: "Invalid RPMs",
    ReportMode.VALID: "Valid RPMs",
    ReportMode.UNUSED_KEYS: "GPG keys that do not match any package",
    ReportMode.SIMP_PKGS: "List SIMP Packages",
    ReportMode.SIMP_DEP_PKGS: "List SIMP Dependency Packages",
    ReportMode.OTHER_PKGS: "List Other Vendor Packages",
}

_PACKAGE_TYPE_MODES = {
    ReportMode.SIMP_PKGS: PackageType.SIMP,
    ReportMode.SIMP_DEP_PKGS: PackageType.SIMP_DEP,
    ReportMode.OTHER_PKGS: PackageType.OTHER,
}


@dataclass
class Report:
    """A rendered report.

    Attributes:
        lines (List[str]): The text report, one entry per output line.
        data (Any): The same content as plain data, for JSON output.
        exit_code (int): The process exit status that goes with the report.
    """

    lines: List[str] = field(default_factory=list)
    data: Any = None
    exit_code: int = EXIT_OK


def quiet_exit_code(results: List[ClassificationResult]) -> int:
    """Returns 1 if any package is invalid, 0 otherwise."""
    return EXIT_ERROR if any(not r.is_valid for r in results) else EXIT_OK


def invalid_packages(results: List[ClassificationResult]) -> Dict[str, List[str]]:
    """Groups the reasons of invalid packages by package name."""
    grouped: Dict[str, List[str]] = {}
    for result in sorted(results, key=lambda r: r.name):
        if result.is_valid:
            continue
        reasons = grouped.setdefault(result.name, [])
        reasons.extend(r for r in result.reasons if r not in reasons)
    return grouped


def valid_packages(results: List[ClassificationResult]) -> Dict[str, Dict[str, List[str]]]:
    """Groups valid packages by the identity that signed them."""
    grouped: Dict[str, Dict[str, List[str]]] = {}
    for result in sorted(results, key=lambda r: (r.owning_identity or "", r.name)):
        if not result.is_valid or not result.owning_identity:
            continue
        entry = grouped.setdefault(result.owning_identity, {"keys": [], "rpms": []})
        key_id = result.package.signature_key_id
        if key_id and key_id not in entry["keys"]:
            entry["keys"].append(key_id)
        if result.name not in entry["rpms"]:
            entry["rpms"].append(result.name)
    return grouped


def unused_keys(results: List[ClassificationResult], trust_map: TrustMap) -> Dict[str, str]:
    """Returns the trust map entries whose identity owns no valid package."""
    used_identities = {r.owning_identity for r in results if r.is_valid and r.owning_identity}
    return {
        key_id: identity
        for key_id, identity in sorted(trust_map.items())
        if identity not in used_identities
    }


def packages_of_type(results: List[ClassificationResult], package_type: PackageType) -> List[str]:
    return sorted({r.name for r in results if r.is_valid and r.package_type is package_type})


def build_report(mode: ReportMode, results: List[ClassificationResult], trust_map: TrustMap) -> Report:
    """Builds the report of the requested type.

    Only the `invalid` report fails the run: it exits with 2 when any package
    is invalid. Every other report exits with 0.

    Args:
        mode (ReportMode): The report type.
        results (List[ClassificationResult]): One result per package.
        trust_map (TrustMap): The trust map the results were built from.

    Returns:
        Report: The text lines, the equivalent data, and the exit status.
    """
    mode = ReportMode(mode)

    if mode is ReportMode.INVALID:
        invalid = invalid_packages(results)
        if not invalid:
            return Report(lines=["No invalid RPMs found!"], data={})
        lines = ["Invalid RPMs:"]
        for name, reasons in invalid.items():
            lines.append(f"* {name}:")
            lines.extend(f"  * {reason}" for reason in reasons)
        return Report(lines=lines, data=invalid, exit_code=EXIT_INVALID_PACKAGES)

    if mode is ReportMode.VALID:
        valid = valid_packages(results)
        lines = []
        for identity, entry in valid.items():
            lines.append(f"* {identity} {', '.join(entry['keys'])}")
            lines.append("")
            lines.extend(f"  - {rpm}" for rpm in entry["rpms"])
            lines.append("")
        return Report(lines=lines, data=valid)

    if mode is ReportMode.UNUSED_KEYS:
        unused = unused_keys(results, trust_map)
        if not unused:
            return Report(lines=["All Keys Used"], data={})
        lines = ["Unused Keys:"]
        lines.extend(f"  * {key_id} => {identity}" for key_id, identity in unused.items())
        return Report(lines=lines, data=unused)

    names = packages_of_type(results, _PACKAGE_TYPE_MODES[mode])
    return Report(lines=names, data=names)
