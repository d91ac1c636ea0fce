"""File utilities for benefits2ofx.

Handles writing generated OFX documents to disk or stdout.
"""

import logging
import sys
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)


def write_output(
    text: str,
    output: Path | str | None = None,
    stdout: TextIO | None = None,
) -> Path | None:
    """Write ``text`` to a file, or to stdout when no file is given.

    The file is created or truncated and its parent directories are created
    as needed.

    Args:
        text: Document to write
        output: Target file path, or None for stdout
        stdout: Stream used instead of ``sys.stdout``

    Returns:
        Path | None: Resolved path of the written file, or None for stdout

    Examples:
        >>> write_output("<OFX/>", "exports/caju-2024-01.ofx")
        PosixPath('/home/me/exports/caju-2024-01.ofx')
    """
    if output is None:
        stream = stdout or sys.stdout
        stream.write(text)
        stream.flush()
        return None

    target = Path(output).expanduser().resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    logger.debug(f"Wrote {len(text)} characters to {target}")
    return target
