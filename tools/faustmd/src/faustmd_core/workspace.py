from __future__ import annotations

import logging
import os
import random
import tempfile
from pathlib import Path
from types import TracebackType

from .common import WorkspaceError

_logger = logging.getLogger(__name__)

SCRATCH_ALPHABET = "0123456789abcdefghijklmnopqrstuv"
DEFAULT_PREFIX = "faust"
DEFAULT_SUFFIX_LENGTH = 6

_rng = random.Random()


def random_suffix(length: int = DEFAULT_SUFFIX_LENGTH, rng: random.Random | None = None) -> str:
    source = rng or _rng
    return "".join(source.choice(SCRATCH_ALPHABET) for _ in range(length))


def make_scratch_dir(
    parent: Path,
    prefix: str = DEFAULT_PREFIX,
    suffix_length: int = DEFAULT_SUFFIX_LENGTH,
    rng: random.Random | None = None,
) -> Path:
    while True:
        candidate = parent / f"{prefix}{random_suffix(suffix_length, rng)}"
        try:
            os.mkdir(candidate, 0o700)
        except FileExistsError:
            continue
        except OSError as exc:
            raise WorkspaceError(f"Unable to create scratch directory '{candidate}': {exc}") from exc
        return candidate


class ScratchWorkspace:
    """Exclusively owned temporary directory for one compiler run.

    Files registered with ``track`` are unlinked on exit, then the directory
    itself is removed once it is empty. Teardown runs on every exit path.
    """

    def __init__(
        self,
        parent: Path | None = None,
        prefix: str = DEFAULT_PREFIX,
        suffix_length: int = DEFAULT_SUFFIX_LENGTH,
        rng: random.Random | None = None,
    ) -> None:
        self.parent = parent if parent is not None else Path(tempfile.gettempdir())
        self.prefix = prefix
        self.suffix_length = suffix_length
        self._rng = rng
        self._path: Path | None = None
        self._tracked: list[Path] = []

    @property
    def path(self) -> Path:
        if self._path is None:
            raise WorkspaceError("Scratch workspace is not active.")
        return self._path

    def track(self, path: Path) -> Path:
        self._tracked.append(path)
        return path

    def __enter__(self) -> ScratchWorkspace:
        self._path = make_scratch_dir(self.parent, self.prefix, self.suffix_length, self._rng)
        _logger.debug("created scratch workspace %s", self._path)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        if self._path is None:
            return
        workdir = self._path
        self._path = None

        for path in self._tracked:
            _unlink_quietly(path)
        self._tracked = []

        # The compiler may leave other artifacts next to the ones we asked for.
        try:
            leftovers = [entry for entry in workdir.iterdir() if not entry.is_dir() or entry.is_symlink()]
        except OSError as exc:
            _logger.warning("unable to list scratch workspace %s: %s", workdir, exc)
            leftovers = []
        for entry in leftovers:
            _unlink_quietly(entry)

        try:
            workdir.rmdir()
        except FileNotFoundError:
            pass
        except OSError as exc:
            _logger.warning("unable to remove scratch workspace %s: %s", workdir, exc)


def _unlink_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        _logger.warning("unable to remove scratch file %s: %s", path, exc)
