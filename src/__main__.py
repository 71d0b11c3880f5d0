#!/usr/bin/env python3
"""
rucksack - Asset bundle manifest interpreter

Reads a manifest describing texture pages, named files and glob-driven file
sets, checks it against the manifest grammar in a single streaming pass,
and writes the resulting build actions as a build plan for the bundle
packer.

Manifest example:
    {
      textures: {
        ui: {
          maxWidth: 1024, pow2: true,
          images: {
            ok:     {path: "img/ok.png", anchor: "topleft"},
            cursor: {path: "img/cursor.png", anchor: {x: 3, y: 5}},
          },
        },
      },
      files: {
        credits: {path: "text/credits.txt"},
      },
      globFiles: [
        {glob: "sfx/*.ogg", prefix: "sfx/"},
      ],
    }

Usage:
    rucksack inputdir/ outputdir/ --manifest assets.json

Examples:
    # Paths in the manifest are relative to the current directory
    rucksack . build/ --manifest assets.json

    # Resolve manifest paths against another root, custom plan filename
    rucksack . build/ --manifest assets.json --prefix assets/ --bundleFile game.json

    # Manifest from stdin, with event trace
    cat assets.json | rucksack . build/ --manifest - -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from . import __version__
from .config import appsettings
from .lib import BundlePlan, LOG, manifest_run, state_connectToLogger
from .lib.diagnostics import diagnostic_render, sourceLine_read
from .models import ProgramState, RunConfig, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="rucksack - interpret an asset manifest into a bundle build plan",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--manifest", required=True, type=str, help="Manifest file (relative to inputdir), or - for stdin"
)

parser.add_argument(
    "--bundleFile",
    default=None,
    type=str,
    help=f"Build plan filename within outputdir (default: {appsettings.bundle_file})",
)

parser.add_argument(
    "--prefix",
    default=None,
    type=str,
    help=f"Assets are loaded relative to this path (default: {appsettings.root_prefix})",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - manifestFile: Resolved manifest path (None for stdin)
            - bundleOutputFile: Build plan path inside outputdir
            - runConfig: Interpreter settings
            - envOK: True if environment is valid

    Exits:
        1 if the manifest file does not exist
    """

    state = inputstate.copy()

    if appsettings.debug_mode:
        state.verbosity = max(state.verbosity, 3)
        state_connectToLogger(state)

    LOG("Checking environment...", level=2)

    if state.manifest == "-":
        state.manifestFile = None
        LOG("Manifest: <stdin>", level=2)
    else:
        manifest_file = state.inputdir / state.manifest
        if not manifest_file.is_file():
            print(f"Unable to open input file: {manifest_file}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
        state.manifestFile = manifest_file
        LOG(f"Manifest: {manifest_file}", level=2)

    state.bundleOutputFile = state.outputdir / (state.bundleFile or appsettings.bundle_file)
    LOG(f"Build plan: {state.bundleOutputFile}", level=2)

    state.runConfig = RunConfig.config_createFromSettings(root_prefix=state.prefix)
    LOG(f"Root prefix: {state.runConfig.root_prefix}", level=2)

    state.envOK = True
    return state


def manifest_interpret(inputstate: ProgramState) -> ProgramState:
    """
    Stream the manifest through the interpreter into a BundlePlan.

    Args:
        inputstate: Program state with manifestFile and runConfig set

    Returns:
        ProgramState with added fields:
            - plan: BundlePlan holding every committed action
            - runResult: RunResult of the interpretation

    Exits:
        1 if the manifest cannot be read or interpretation fails; the
        diagnostic is written to stderr as "line L, col C: message"
    """

    state = inputstate.copy()

    LOG("Interpreting manifest...", level=1)

    state.plan = BundlePlan(root_prefix=state.runConfig.root_prefix)
    try:
        if state.manifestFile is None:
            state.runResult = manifest_run(sys.stdin.buffer, state.plan, state.runConfig)
        else:
            with state.manifestFile.open("rb") as stream:
                state.runResult = manifest_run(stream, state.plan, state.runConfig)
    except OSError as e:
        print(f"Error reading manifest: {e}", file=sys.stderr)
        sys.exit(1)

    result = state.runResult
    if not result.ok:
        source_line = None
        if state.verbosity >= 2 and state.manifestFile is not None and result.line:
            source_line = sourceLine_read(state.manifestFile, result.line)
        print(
            diagnostic_render(result.error, source_line, color=sys.stderr.isatty()),
            file=sys.stderr,
        )
        sys.exit(1)

    LOG(f"Committed {result.pages_added} pages and {result.files_added} files", level=2)
    return state


def plan_write(inputstate: ProgramState) -> ProgramState:
    """
    Write the build plan into the output directory.

    Exits:
        1 if the plan cannot be written
    """

    state = inputstate.copy()

    if state.plan is None:
        print("Error: No build plan available", file=sys.stderr)
        sys.exit(1)

    try:
        state.plan.plan_write(state.bundleOutputFile)
    except OSError as e:
        print(f"Unable to write build plan: {e}", file=sys.stderr)
        sys.exit(1)

    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display a summary of the run.

    Returns:
        ProgramState unchanged (terminal pipeline stage)
    """
    state: ProgramState = inputstate.copy()
    if not state.runResult or not state.runResult.ok:
        print("Error: Interpretation failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Manifest interpreted", level=1)
    LOG(f"  Pages: {state.runResult.pages_added}", level=1)
    LOG(f"  Files: {state.runResult.files_added}", level=1)
    LOG(f"  Plan:  {state.bundleOutputFile}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="rucksack - asset bundle manifest interpreter",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - interpret a manifest and write its build plan.

    Orchestrates the pipeline:
        1. env_check: Validate paths, build the run configuration
        2. manifest_interpret: Stream the manifest into a BundlePlan
        3. plan_write: Write the plan to outputdir
        4. results_report: Display results to user

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, manifest_interpret, plan_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
