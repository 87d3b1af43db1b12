#!/usr/bin/env python3
"""
texguard - LaTeX expression sanitizer

Reads one user-submitted LaTeX math expression, neutralizes the directives
that could make a typesetting run read or write files or loop forever, and
writes the LaTeX wrapper document a renderer would typeset.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Usage:
    texguard inputdir/ outputdir/ --inputFile expression.tex

    Two files are written to outputdir/, both named by the expression's
    cache key: <key>.tex (the wrapper document) and <key>.json (the
    rendering flags and sanitizing report).

Examples:
    # Basic sanitizing
    texguard . output/ --inputFile expression.tex

    # Expression copied from a URL query string
    texguard . output/ --inputFile query.txt --urlencoded

    # Verbose output, with the sanitized expression highlighted
    texguard . output/ --inputFile expression.tex -vv
"""

import json
import sys
from pathlib import Path
from urllib.parse import unquote_plus
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import Compiler, __version__, LOG, state_connectToLogger
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="texguard - sanitize user-submitted LaTeX math before typesetting",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="File holding the expression (relative to inputdir)"
)

parser.add_argument(
    "--urlencoded",
    action="store_true",
    default=False,
    help="Expression is URL-encoded (+ for blanks and %%xx escapes)",
)

parser.add_argument(
    "--outputSubdir",
    default=".",
    type=str,
    help="Subdirectory within outputdir for the results",
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
            - inputSourceFile: Resolved path to the expression file
            - resultOutputdir: Created output directory path
            - envOK: True if environment is valid

    Exits:
        1 if the input file is not found
    """

    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile

    if not input_file.exists():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    state.resultOutputdir = state.outputdir / state.outputSubdir
    state.resultOutputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.resultOutputdir}", level=2)

    state.envOK = True
    return state


def expression_read(inputstate: ProgramState) -> ProgramState:
    """
    Read the expression, URL-decoding it if asked to.

    Args:
        inputstate: Program state with inputSourceFile path set

    Returns:
        ProgramState with added field:
            - expression: Raw expression text

    Exits:
        1 if the file cannot be read
    """

    state = inputstate.copy()

    LOG("Reading expression...", level=1)

    try:
        expression = state.inputSourceFile.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)

    if state.urlencoded:
        expression = unquote_plus(expression)
        LOG("Decoded URL-encoded expression", level=2)

    state.expression = expression.strip()
    LOG(f"Read {len(state.expression)} characters from {state.inputSourceFile.name}", level=2)
    return state


def expression_sanitize(inputstate: ProgramState) -> ProgramState:
    """
    Sanitize the expression and build its wrapper document.

    Args:
        inputstate: Program state with expression set

    Returns:
        ProgramState with added field:
            - compileResult: CompileResult for the expression

    Exits:
        1 if expression is None or the configuration cannot be loaded
    """

    state = inputstate.copy()

    if state.expression is None:
        print("Error: No expression available", file=sys.stderr)
        sys.exit(1)

    try:
        compiler = Compiler(state.expression, verbosity=state.verbosity)
        state.compileResult = compiler.compile()
    except Exception as e:
        print(f"Sanitizing error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)
    finally:
        # the compile connected its own context
        state_connectToLogger(state)

    LOG(f"{state.compileResult.illegal_count} directive(s) neutralized", level=2)
    return state


def results_write(inputstate: ProgramState) -> ProgramState:
    """
    Write <cache_key>.tex and <cache_key>.json to the output directory.

    The .tex file is only written for a renderable result.

    Args:
        inputstate: Program state with compileResult populated

    Returns:
        ProgramState with added fields:
            - texFile: Path of the wrapper document, or None
            - reportFile: Path of the JSON report
    """

    state = inputstate.copy()
    result = state.compileResult
    if result is None:
        print("Error: Sanitizing failed", file=sys.stderr)
        sys.exit(1)

    if result.renderable:
        state.texFile = state.resultOutputdir / f"{result.cache_key}.tex"
        state.texFile.write_text(result.wrapper, encoding="utf-8")
        LOG(f"Wrote {state.texFile}", level=2)

    state.reportFile = state.resultOutputdir / f"{result.cache_key}.json"
    state.reportFile.write_text(json.dumps(result.summary_make(), indent=2), encoding="utf-8")
    LOG(f"Wrote {state.reportFile}", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display sanitizing results to user.

    Args:
        inputstate: Program state with compileResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)
    """
    state: ProgramState = inputstate.copy()
    result = state.compileResult

    if state.verbosity >= 3:
        from pygments import highlight
        from pygments.formatters import TerminalFormatter
        from .lib.lexer import MathTexLexer

        LOG("Sanitized expression:\n" + highlight(result.expression, MathTexLexer(), TerminalFormatter()), level=3)

    if result.renderable:
        LOG("\n✓ Expression sanitized", level=1)
        LOG(f"  Wrapper: {state.texFile}", level=1)
    else:
        LOG(f"\n✗ Not renderable: {result.reason}", level=1)
    LOG(f"  Report: {state.reportFile}", level=1)
    LOG(f"  Neutralized: {result.illegal_count}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="texguard - LaTeX expression sanitizer",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - sanitize one expression file.

    Orchestrates the pipeline:
        1. env_check: Validate paths and environment
        2. expression_read: Read (and URL-decode) the expression
        3. expression_sanitize: Preprocess, validate, apply driver directives
        4. results_write: Write the wrapper and JSON report
        5. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the expression file
        outputdir: Directory where results will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, expression_read, expression_sanitize, results_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
