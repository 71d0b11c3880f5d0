"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the bundle pipeline (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, manifest, bundleFile, prefix
        - env_check: manifestFile, bundleOutputFile, runConfig, envOK
        - manifest_interpret: plan, runResult
        - plan_write: (writes bundleOutputFile)
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the manifest
        outputdir: Directory the build plan is written to
        verbosity: Logging verbosity level (1-3)
        manifest: Manifest filename relative to inputdir, or "-" for stdin
        bundleFile: Build plan filename within outputdir
        prefix: Root prefix for relative manifest paths
        envOK: Environment validation passed
        manifestFile: Resolved manifest path (None when reading stdin)
        bundleOutputFile: Resolved build plan path
        runConfig: RunConfig for the interpreter
        plan: BundlePlan that received the build actions
        runResult: RunResult of the interpretation
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    manifest: str = field(default="-")
    bundleFile: Optional[str] = field(default=None)
    prefix: Optional[str] = field(default=None)

    # Pipeline state
    envOK: bool = field(default=False)
    manifestFile: Optional[Path] = field(default=None)
    bundleOutputFile: Path = field(default=Path("/"))
    runConfig: Optional[Any] = field(default=None)  # RunConfig at runtime
    plan: Optional[Any] = field(default=None)  # BundlePlan at runtime
    runResult: Optional[Any] = field(default=None)  # RunResult at runtime

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (manifest, bundleFile, prefix, ...)
            inputdir: Directory containing the manifest
            outputdir: Directory for the build plan

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Only keep options that are ProgramState fields
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            manifest_interpret,
            plan_write,
            results_report
        )
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
