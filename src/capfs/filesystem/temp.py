"""Self-capping temporary directories."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
from typing import Optional

from ..config import get_config
from ..exceptions import InvalidArgumentError, InvalidStateError, NotFoundError
from ..validation import assert_type
from .virtual import VirtualDirectory

logger = logging.getLogger(__name__)


class TempDirectory(VirtualDirectory):
    """
    A freshly created directory under the system temp location that caps itself.

    Children are plain VirtualDirectory and VirtualFile entries sharing this
    directory as their cap. The tree is removed with ``remove()``, or on exit
    when used as an async context manager:

        async with TempDirectory("run") as scratch:
            await scratch.get_file("out.json").write("{}")
    """

    def __init__(self, name: Optional[str] = None):
        """
        Args:
            name: Prefix for the directory name; defaults to the configured
                ``temp_prefix``
        """
        assert_type(name, Optional[str], name="name")
        prefix = name if name is not None else get_config().temp_prefix
        if os.sep in prefix or "/" in prefix or prefix in (os.curdir, os.pardir):
            raise InvalidArgumentError(
                f"Temporary directory name must be a plain name, got '{prefix}'",
                context={"name": name},
            )

        try:
            real_path = tempfile.mkdtemp(prefix=f"{prefix}-")
        except OSError as e:
            raise InvalidStateError(
                f"Unable to create temporary directory '{prefix}-*': {e.strerror or e}",
                cause=e,
            ) from e

        super().__init__(real_path)
        logger.debug(f"Created temporary directory {real_path}")

    @classmethod
    def from_cwd(cls) -> "TempDirectory":
        raise InvalidStateError(
            "TempDirectory cannot be created from the working directory",
            suggestion="Use VirtualDirectory.from_cwd() to cap the working directory.",
        )

    async def remove(self) -> None:
        """
        Delete the directory and everything below it.

        Raises:
            NotFoundError: If the directory no longer exists
            InvalidStateError: If it cannot be removed
        """
        if not await self.exists():
            raise NotFoundError(f"No such directory '{self.real.path}'", path=self.real.path)

        try:
            await asyncio.to_thread(shutil.rmtree, self.real.path)
        except OSError as e:
            raise InvalidStateError(
                f"Unable to remove temporary directory '{self.real.path}': {e.strerror or e}",
                path=self.real.path,
                cause=e,
            ) from e

        logger.debug(f"Removed temporary directory {self.real.path}")

    async def __aenter__(self) -> "TempDirectory":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if await self.exists():
            await self.remove()
