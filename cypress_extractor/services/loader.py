import glob
import os
from pathlib import Path
from typing import Iterable, List, Optional

from cypress_extractor.core.errors import PathResolutionError
from cypress_extractor.core.logging import logger
from cypress_extractor.core.utils import safe_decode
from cypress_extractor.services.js_ast import ParsedSource, parse_source


VALID_EXTENSIONS = (".js", ".ts")
DIRECTORY_PATTERN = "**/*.js"


def load_text(text: str, filename: Optional[str] = None) -> Optional[ParsedSource]:
    """
    Parse source text, or return None for scripts that start with an
    interpreter directive (#!/usr/bin/env node); those are not test files.

    Raises SourceParseError for invalid JavaScript.
    """
    if text.startswith("#!"):
        logger.info(f"Skipping {filename or '<text>'}: starts with an interpreter directive")
        return None
    return parse_source(text, filename=filename)


def load_source(path: str) -> Optional[ParsedSource]:
    text = safe_decode(Path(path).read_bytes())
    return load_text(text, filename=str(path))


def resolve_paths(paths: Iterable[str]) -> List[str]:
    """
    Expand files and directories into a sorted list of source files.

    Files must end in .js or .ts; directories contribute every **/*.js
    below them (hidden entries excluded).
    """
    resolved = set()

    for p in dict.fromkeys(paths):
        if not os.path.exists(p):
            raise PathResolutionError(f'"{p}" does not exist')

        if os.path.isfile(p):
            if not p.endswith(VALID_EXTENSIONS):
                raise PathResolutionError(
                    f'unsupported file "{p}". Expecting *.js or *.ts'
                )
            resolved.add(p)

        elif os.path.isdir(p):
            for name in glob.glob(DIRECTORY_PATTERN, root_dir=p, recursive=True):
                resolved.add(os.path.join(p, name))

        else:
            raise PathResolutionError(f'"{p}" is neither a file nor a directory')

    return sorted(resolved)
