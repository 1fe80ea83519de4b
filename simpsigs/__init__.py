"""simpsigs: RPM signature validation for SIMP repositories.

This package provides a command-line tool that checks every RPM in a SIMP
directory (as extracted from an ISO or a tarball) against the GPG keys shipped
in the `simp-gpgkeys` RPM and against a list of trusted build hosts.
"""

__version__ = "0.4.0"
__license__ = "Apache-2.0"

__all__ = ["__version__", "__license__"]
