"""Wrap long lines with a trailing backslash, as a stdin-to-stdout filter."""

from __future__ import annotations

import argparse
import sys

__all__ = ["wrap_lines", "main"]


def wrap_lines(text: str, width: int = 71) -> str:
    """Break lines longer than ``width`` characters with a backslash-newline.

    Tabs after the first character are turned into spaces. A character is
    never split off when it is the last one before a line ending.
    """
    if width < 1:
        raise ValueError("width must be positive")
    if not text:
        return ""
    chars = text[0] + text[1:].replace("\t", " ")
    out: list[str] = []
    col = 0
    for index, ch in enumerate(chars):
        following = chars[index + 1] if index + 1 < len(chars) else None
        if col < width or ch == "\n" or following in ("\n", "\r"):
            out.append(ch)
        else:
            out.append("\\\n")
            out.append(ch)
            col = 0
        col += 1
        if ch == "\n":
            col = 0
    return "".join(out)


def main(argv: list[str] | None = None) -> int:
    """Filter standard input to standard output."""
    parser = argparse.ArgumentParser(description="Wrap long lines with a backslash.")
    parser.add_argument("-w", "--width", type=int, default=71, help="maximum line width")
    args = parser.parse_args(argv)
    sys.stdout.write(wrap_lines(sys.stdin.read(), args.width))
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())