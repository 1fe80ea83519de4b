"""
Base validator class that all package checks inherit from.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Any, TYPE_CHECKING

from .models import CandidatePackage, TrustMap

if TYPE_CHECKING:
    from .config import Config

logger = logging.getLogger(__name__)


class BaseValidator(ABC):
    """Abstract base class for all package validators.

    All validators must inherit from this class and implement the `_validate`
    method. Each validator looks at one `CandidatePackage` and records the
    reasons, if any, why the package must not be trusted. Reasons are
    findings, not exceptions: a package with reasons is simply invalid.

    Attributes:
        name (str): The display name of the validator, also used to enable
            or disable it through the configuration.
        order (int): Validators run in ascending order, which fixes the order
            of the reasons in a result.
        description (str): A brief explanation of what the validator checks.
    """

    name: str = "UnnamedValidator"
    order: int = 100
    description: str = "No description provided"

    def __init__(self, package: CandidatePackage, trust_map: TrustMap, config: "Config") -> None:
        """Initializes the validator with the package and run-wide data.

        Args:
            package (CandidatePackage): The package being validated.
            trust_map (TrustMap): The key IDs trusted for this run.
            config (Config): The application's configuration object.
        """
        self.package = package
        self.trust_map = trust_map
        self.config = config
        self.errors: List[str] = []
        self.info: Dict[str, Any] = {}

    def validate(self) -> Dict[str, Any]:
        """Performs the validation check and returns the results.

        Wraps `_validate` so that a validator that crashes marks the package
        invalid instead of aborting the whole run.

        Returns:
            Dict[str, Any]: A dictionary containing the validation results.
        """
        try:
            self._validate()
        except Exception as e:
            logger.error(f"Validator {self.name} failed on {self.package.absolute_path}: {e}")
            self.add_error(f"Validator {self.name} failed: {str(e)}")
        return self.result()

    @abstractmethod
    def _validate(self) -> None:
        """Implements the check, reporting through `add_error` and `add_info`."""
        raise NotImplementedError("Subclasses must implement _validate()")

    def result(self) -> Dict[str, Any]:
        return {
            "errors": self.errors,
            "info": self.info,
        }

    def add_error(self, message: str) -> None:
        """Adds a reason why the package is invalid.

        Args:
            message (str): The reason, as it will appear in the report.
        """
        self.errors.append(message)

    def add_info(self, key: str, value: Any) -> None:
        """Adds informational data to the validation results.

        Args:
            key (str): The key for the informational data.
            value (Any): The value of the informational data.
        """
        self.info[key] = value
