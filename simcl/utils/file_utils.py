def get_column(file: str, index: int) -> int:
    """Zero-based column of ``index``, counted from the last newline before it."""
    return index - (file.rfind("\n", 0, index) + 1)


def get_line(file: str, line: int) -> str:
    # Only "\n" ends a line, matching the lexer's line counting
    lines = file.split("\n")
    if 1 <= line <= len(lines):
        return lines[line - 1]
    return ""
