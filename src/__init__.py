"""
rucksack - Asset bundle manifest interpreter

Turns a declarative manifest of texture pages, files and glob rules into
build actions for a bundle builder, in one streaming pass.
"""

__version__ = "1.0.0"

from .lib import BundlePlan, ManifestSession, Tokenizer, manifest_run, LOG, state_connectToLogger

__all__ = ["BundlePlan", "ManifestSession", "Tokenizer", "manifest_run", "LOG", "state_connectToLogger", "__version__"]
