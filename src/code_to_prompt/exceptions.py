from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CodeToPromptError(Exception):
    """Base exception for errors in the code_to_prompt package."""


@dataclass(frozen=True)
class NoInputPathsError(CodeToPromptError):
    """Raised when neither the command line nor stdin provided any path."""

    message: str = "No input paths provided. Use --help for usage or `code-to-prompt init` to create a config."

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ConflictingOptionsError(CodeToPromptError):
    """Raised when two mutually exclusive options are both enabled."""

    first: str
    second: str

    def __str__(self) -> str:
        return f"{self.first} and {self.second} are mutually exclusive."


@dataclass(frozen=True)
class ConfigFileError(CodeToPromptError):
    """Raised when the configuration file cannot be created."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"Error initializing configuration file at {self.path}: {self.reason}"


@dataclass(frozen=True)
class OutputDestinationError(CodeToPromptError):
    """Raised when the output file location is not writable."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"Cannot write output to {self.path}: {self.reason}"


@dataclass(frozen=True)
class ClipboardError(CodeToPromptError):
    """Raised when the buffered output could not be copied to the clipboard."""

    reason: str

    def __str__(self) -> str:
        return f"Could not copy output to clipboard: {self.reason}"
