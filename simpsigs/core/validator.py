"""Handles the core validation pipeline for simpsigs.

This module orchestrates one validation run:
1.  Locating the trust-anchor RPM and building the trust map from its keys.
2.  Finding every RPM below the target directory.
3.  Querying each RPM's metadata and running the enabled validators on it.
4.  Collecting one `ClassificationResult` per RPM.

Nothing is kept between runs; the trust map and the results are returned to
the caller.
"""

import os
import pkgutil
import inspect
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Type

from .base_validator import BaseValidator
from .config import Config
from .keyring import extract_trust_map, find_trust_anchor
from .models import CandidatePackage, ClassificationResult, PackageType, TrustMap
from .scanner import check_target_dir, find_packages
from ..utils.rpm import FIELD_SEPARATOR, PackageInspector, RpmInspector
from .. import validators as validators_package

# Initialize a logger for this module.
logger = logging.getLogger(__name__)

KEY_ID_PATTERN = re.compile(r"Key ID (\S+)")

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class ValidationRun:
    """Everything a report needs from one run."""

    target_dir: str
    trust_anchor: str
    trust_map: TrustMap
    results: List[ClassificationResult]


def discover_validators() -> List[Type[BaseValidator]]:
    """Discovers all validator classes within the `simpsigs.validators` package.

    Returns:
        List[Type[BaseValidator]]: The discovered validator classes, sorted by
        their `order` attribute.
    """
    validators = set()
    path = os.path.dirname(validators_package.__file__)

    for _, name, _ in pkgutil.iter_modules([path]):
        try:
            module = __import__(f"simpsigs.validators.{name}", fromlist=["*"])
            for _, item in inspect.getmembers(module, inspect.isclass):
                if issubclass(item, BaseValidator) and item is not BaseValidator:
                    validators.add(item)
        except ImportError as e:
            logger.warning(f"Could not import validator module {name}: {e}")
    return sorted(validators, key=lambda v: (v.order, v.name))


def parse_metadata(path: str, query_output: str) -> CandidatePackage:
    """Turns the output of a metadata query into a `CandidatePackage`.

    Missing fields degrade rather than fail: the file name stands in for the
    package name, and a missing signature field means the package is unsigned.

    Args:
        path (str): The absolute path of the RPM.
        query_output (str): `NVR|SIGPGP SIGGPG|BUILDHOST` as returned by the
            inspector.

    Returns:
        CandidatePackage: The parsed package.
    """
    line = query_output.strip().splitlines()[0] if query_output.strip() else ""
    fields = line.split(FIELD_SEPARATOR, 2)
    fields += [""] * (3 - len(fields))
    name, signature, build_host = (f.strip() for f in fields)

    if not name:
        name = Path(path).name
        logger.warning(f"Could not read metadata of {path}, using the file name")

    match = KEY_ID_PATTERN.search(signature)
    key_id = match.group(1).upper() if match else None

    return CandidatePackage(
        absolute_path=path,
        name_version_release=name,
        signature_key_id=key_id,
        build_host=build_host,
    )


def package_type_for(identity: str, config: Config) -> PackageType:
    """Tells SIMP packages, upstream vendor packages, and SIMP dependencies apart.

    Args:
        identity (str): The identity of the key that signed the package.
        config (Config): Supplies `identities.simp_pattern` and
            `identities.vendor_pattern`.

    Returns:
        PackageType: `SIMP` for the project's own key, `OTHER` for a known
        vendor, and `SIMP_DEP` for everything else.
    """
    if re.search(config.get("identities.simp_pattern"), identity):
        return PackageType.SIMP
    if re.search(config.get("identities.vendor_pattern"), identity):
        return PackageType.OTHER
    return PackageType.SIMP_DEP


def classify_package(
    package: CandidatePackage,
    trust_map: TrustMap,
    config: Config,
    validator_classes: Optional[List[Type[BaseValidator]]] = None,
) -> ClassificationResult:
    """Runs the enabled validators against one package.

    Args:
        package (CandidatePackage): The package to classify.
        trust_map (TrustMap): The trusted key IDs.
        config (Config): The application's configuration object.
        validator_classes (Optional[List[Type[BaseValidator]]]): The
            validators to consider. Defaults to every discovered validator.

    Returns:
        ClassificationResult: The verdict, with reasons in validator order.
    """
    if validator_classes is None:
        validator_classes = discover_validators()

    result = ClassificationResult(package=package)
    for validator_class in validator_classes:
        if not config.is_validator_enabled(validator_class.name):
            continue
        outcome = validator_class(package, trust_map, config).validate()
        result.reasons.extend(outcome["errors"])
        if outcome["info"].get("owning_identity"):
            result.owning_identity = outcome["info"]["owning_identity"]

    if result.is_valid and result.owning_identity:
        result.package_type = package_type_for(result.owning_identity, config)

    logger.debug(f"{package.name_version_release}: {result.status.value} {result.reasons}")
    return result


def classify_packages(
    paths: List[str],
    trust_map: TrustMap,
    config: Config,
    inspector: PackageInspector,
    progress: Optional[ProgressCallback] = None,
) -> List[ClassificationResult]:
    """Queries and classifies every package in `paths`."""
    validator_classes = discover_validators()
    results = []
    for i, path in enumerate(paths):
        if progress:
            progress(i + 1, len(paths), path)
        package = parse_metadata(path, inspector.query_metadata(path))
        results.append(classify_package(package, trust_map, config, validator_classes))
    return results


def validate_directory(
    target_dir: str,
    config: Config,
    inspector: Optional[PackageInspector] = None,
    progress: Optional[ProgressCallback] = None,
) -> ValidationRun:
    """Validates every RPM below `target_dir` against its trust anchor.

    This is the main entry point of the pipeline. The trust map is built
    first, so a missing trust anchor stops the run before any package is
    scanned.

    Args:
        target_dir (str): The SIMP directory to validate.
        config (Config): The application's configuration object.
        inspector (Optional[PackageInspector]): The tooling used to read RPMs
            and keys. Defaults to an `RpmInspector` built from `config`.
        progress (Optional[ProgressCallback]): Called with the position, the
            total and the path before each package is classified.

    Returns:
        ValidationRun: The trust map and one result per package.

    Raises:
        ConfigurationError: If the run cannot start.
    """
    inspector = inspector or RpmInspector.from_config(config)
    target_dir = check_target_dir(target_dir)
    logger.info(f"Validating RPMs under {target_dir}")

    anchor = find_trust_anchor(target_dir, config.get("trust_anchor_pattern"))
    trust_map = extract_trust_map(anchor, inspector, config.get("key_file_pattern"))

    paths = find_packages(target_dir, config.get("package_pattern"))
    results = classify_packages(paths, trust_map, config, inspector, progress)

    return ValidationRun(target_dir=target_dir, trust_anchor=anchor, trust_map=trust_map, results=results)
