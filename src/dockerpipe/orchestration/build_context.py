"""
Build-context descriptor management.

The installation check guarantees a Dockerfile exists for the server build
before any image is built. An existing file is never rewritten.
"""

import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

DOCKERFILE_TEMPLATE = """FROM ubuntu:bionic

ARG DEBIAN_FRONTEND=noninteractive

COPY Builds/EdgegapServer /root/build/

WORKDIR /root/

RUN chmod +x /root/build/ServerBuild

ENTRYPOINT [ "/root/build/ServerBuild", "-batchmode", "-nographics"]
"""


def ensure_dockerfile(
    path: Union[str, Path] = Path("Dockerfile"),
    content: str = DOCKERFILE_TEMPLATE,
) -> bool:
    """
    Write the Dockerfile template if no file exists at ``path``.

    The file is opened in exclusive-create mode, so a file created by someone
    else between the check and the write is left untouched.

    Args:
        path: Where the descriptor lives
        content: Text to write when the file is absent

    Returns:
        True if the file was written, False if it already existed
    """
    path = Path(path)
    if path.exists():
        logger.debug(f"Build descriptor already present: {path}")
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "x", encoding="utf-8", newline="\n") as f:
            f.write(content)
    except FileExistsError:
        logger.debug(f"Build descriptor appeared concurrently: {path}")
        return False

    logger.info(f"Wrote build descriptor template to {path}")
    return True
