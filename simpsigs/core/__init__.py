"""Core components for the simpsigs application.

This package contains the building blocks of the validation pipeline: the
data model, the key extractor, the package scanner, the classifier that runs
the validators, and the report emitter.
"""
