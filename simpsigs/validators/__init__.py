"""The checks run against every package.

Each module in this package holds one or more classes that inherit from
`simpsigs.core.base_validator.BaseValidator`; the core validation engine
discovers and runs them.
"""
from .build_host_validator import BuildHostValidator
from .signature_validator import SignatureValidator
