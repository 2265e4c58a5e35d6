from __future__ import annotations

import html
from collections.abc import Callable

from code_to_prompt.config import OutputFormat, guess_language

Writer = Callable[[str], None]
Printer = Callable[[Writer, str, str, OutputFormat, bool], None]


def add_line_numbers(content: str) -> str:
    """Prefix every line of `content` with its right-aligned 1-based number.

    The column is as wide as the largest line number and is followed by
    two spaces. A trailing newline yields a final, numbered empty line.

    Args:
        content (str): the text to annotate

    Returns:
        str: the annotated text
    """
    lines = content.split("\n")
    width = len(str(len(lines)))
    return "\n".join(f"{i:>{width}}  {line}" for i, line in enumerate(lines, start=1))


def markdown_fence(content: str) -> str:
    """Return a backtick fence long enough not to occur inside `content`."""
    fence = "```"
    while fence in content:
        fence += "`"
    return fence


def print_default(writer: Writer, file_path: str, content: str, *, line_numbers: bool = False) -> None:
    """Emit a file as its path, a `---` rule, the content and a closing rule."""
    writer(file_path)
    writer("---")
    writer(add_line_numbers(content) if line_numbers else content)
    writer("")
    writer("---")


def print_as_markdown(writer: Writer, file_path: str, content: str, *, line_numbers: bool = False) -> None:
    """Emit a file as its path followed by a fenced code block.

    The fence language is derived from the extension, and the fence is
    lengthened until it cannot be closed early by backticks in the content.
    """
    fence = markdown_fence(content)
    writer(file_path)
    writer(f"{fence}{guess_language(file_path)}")
    writer(add_line_numbers(content) if line_numbers else content)
    writer(fence)
    writer("")


class DocumentPrinter:
    """Dispatch a file to the printer for the requested format.

    Each instance owns the running `<document index="N">` counter of the
    XML format, so separate runs number their documents independently.

    Attributes:
        index: Index given to the next XML document.
    """

    def __init__(self, start: int = 1) -> None:
        self.index = start

    def print_as_xml(self, writer: Writer, file_path: str, content: str, *, line_numbers: bool = False) -> None:
        """Emit a file as a `<document>` element with escaped content."""
        writer(f'<document index="{self.index}">')
        writer(f"<source>{file_path}</source>")
        writer("<document_content>")
        body = add_line_numbers(content) if line_numbers else content
        writer(html.escape(body, quote=False))
        writer("</document_content>")
        writer("</document>")
        self.index += 1

    def __call__(
        self,
        writer: Writer,
        file_path: str,
        content: str,
        fmt: OutputFormat = OutputFormat.DEFAULT,
        line_numbers: bool = False,  # noqa: FBT001, FBT002
    ) -> None:
        if fmt == OutputFormat.CXML:
            self.print_as_xml(writer, file_path, content, line_numbers=line_numbers)
        elif fmt == OutputFormat.MARKDOWN:
            print_as_markdown(writer, file_path, content, line_numbers=line_numbers)
        else:
            print_default(writer, file_path, content, line_numbers=line_numbers)
