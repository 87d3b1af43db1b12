"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from functools import reduce
from pathlib import Path
from argparse import Namespace
from typing import Optional, Type, TypeVar, Callable, TYPE_CHECKING
from dataclasses import dataclass, field

# Forward reference for type hint - avoid circular import
if TYPE_CHECKING:
    from ..lib.compiler import CompileResult


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the sanitizing pipeline (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, urlencoded, outputSubdir
        - env_check: inputSourceFile, resultOutputdir, envOK
        - expression_read: expression
        - expression_sanitize: compileResult
        - results_write: texFile, reportFile
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the expression file
        outputdir: Base output directory
        verbosity: Logging verbosity level (1-3)
        inputFile: Expression filename (relative to inputdir)
        urlencoded: Input is URL-encoded (+ and %xx escapes)
        outputSubdir: Subdirectory within outputdir for results
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the expression file
        resultOutputdir: Final output directory (outputdir + outputSubdir)
        expression: Raw expression text as read (and URL-decoded)
        compileResult: Result of the sanitizing compile
        texFile: Path of the written wrapper document
        reportFile: Path of the written JSON report
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    urlencoded: bool = field(default=False)
    outputSubdir: str = field(default=".")

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    resultOutputdir: Path = field(default=Path("/"))
    expression: Optional[str] = field(default=None)
    compileResult: Optional["CompileResult"] = field(default=None)
    texFile: Optional[Path] = field(default=None)
    reportFile: Optional[Path] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (inputFile, urlencoded, etc.)
            inputdir: Directory containing the expression file
            outputdir: Directory for results

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        # Only keep options that are ProgramState fields
        valid_fields = {f.name for f in dataclasses.fields(cls)}
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
            expression_read,
            expression_sanitize,
            results_write,
            results_report
        )

    This reads left-to-right instead of the inside-out
        results_report(results_write(expression_sanitize(...)))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
