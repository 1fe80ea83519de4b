"""Utility modules for the simpsigs application.

This package holds the wrappers around the external rpm and gpg tooling that
the validation pipeline treats as black boxes.
"""
