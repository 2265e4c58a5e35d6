import pytest

from code_to_prompt.config import file_extension, guess_language, is_binary_file


@pytest.mark.unit
@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("image.png", True),
        ("IMAGE.PNG", True),
        ("archive.tar.gz", True),
        ("data.sqlite", True),
        ("dir/font.woff2", True),
        ("main.py", False),
        ("README", False),
        (".png", False),
        ("notes.png.txt", False),
    ],
)
def test_is_binary_file(path: str, expected: bool) -> None:  # noqa: FBT001
    assert is_binary_file(path) is expected


def test_file_extension() -> None:
    assert file_extension("archive.tar.gz") == ".gz"
    assert file_extension(".bashrc") == ""
    assert file_extension("src/Makefile") == ""


def test_guess_language() -> None:
    assert guess_language("src/app.py") == "python"
    assert guess_language("conf.yml") == "yaml"
    assert guess_language("script.sh") == "bash"
    assert guess_language("notes.txt") == ""
