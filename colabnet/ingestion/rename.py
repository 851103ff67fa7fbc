"""
Rename notation handling for `git log --stat` file names.

Git abbreviates renames in stat output either as a brace segment
(``src/{old => new}/mod.py``) or as a bare arrow (``old.py => new.py``).
Both forms are collapsed to the post-rename path.
"""

RENAME_ARROW = "=>"


def normalize_filename(fname: str) -> str:
    """
    Canonicalize a stat file name to its post-rename form.

    Args:
        fname: File name as printed in the stat column.

    Returns:
        The new path for rename notation, otherwise ``fname`` unchanged.

    Raises:
        ValueError: If a brace segment is not closed.
        IndexError: If a brace segment carries no arrow.
    """
    if RENAME_ARROW not in fname:
        return fname

    if "{" not in fname:
        return fname.split(RENAME_ARROW)[1].strip()

    prefix, _, rest = fname.partition("{")
    inner, closed, suffix = rest.partition("}")
    if not closed:
        raise ValueError(f"Unbalanced braces in rename: {fname}")

    # text around the braces is kept verbatim, so "lib/{v1 => }/api.py"
    # becomes "lib//api.py"
    return prefix + inner.split(RENAME_ARROW)[1].strip() + suffix
