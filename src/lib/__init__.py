"""
rucksack library: tokenizer, grammar, interpreter and bundle builder
"""

from .bundle import BundleBuilder, BundleError, BundlePlan
from .errors import (
    CollaboratorError,
    FilesystemError,
    GrammarViolation,
    ManifestError,
    TokenizeError,
    UnknownKey,
    ValueConstraint,
)
from .interpreter import ManifestSession, manifest_run
from .tokenizer import Tokenizer
from .log import LOG, state_connectToLogger

__all__ = [
    "BundleBuilder",
    "BundleError",
    "BundlePlan",
    "CollaboratorError",
    "FilesystemError",
    "GrammarViolation",
    "ManifestError",
    "TokenizeError",
    "UnknownKey",
    "ValueConstraint",
    "ManifestSession",
    "manifest_run",
    "Tokenizer",
    "LOG",
    "state_connectToLogger",
]
