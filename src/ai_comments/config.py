from __future__ import annotations
from dataclasses import dataclass, field
import os
from typing import List, Optional, Tuple

from .utils import DEFAULT_EXTENSIONS, DEFAULT_SKIP_DIRS
from .wrappers import WrapperSpec, resolve_wrappers

_TRUE = {"1", "true", "True", "yes", "Y"}


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name, "")
    items = tuple(x.strip() for x in raw.split(",") if x.strip())
    return items or default


def _env_extensions() -> Tuple[str, ...]:
    exts = _env_list("AIC_EXTENSIONS", DEFAULT_EXTENSIONS)
    return tuple(e if e.startswith(".") else "." + e for e in exts)


@dataclass
class ScanConfig:
    """Repository scan settings.

    Every field defaults from an AIC_* environment variable; pipelines then
    override individual fields from their command-line flags.
    """
    extensions: Tuple[str, ...] = field(default_factory=_env_extensions)
    skip_dirs: Tuple[str, ...] = field(default_factory=lambda: _env_list("AIC_SKIP_DIRS", DEFAULT_SKIP_DIRS))
    wrapper_names: Tuple[str, ...] = field(default_factory=lambda: _env_list("AIC_WRAPPERS", ()))
    workers: int = field(default_factory=lambda: int(os.getenv("AIC_WORKERS", "4")))
    progress: bool = field(default_factory=lambda: os.getenv("AIC_PROGRESS", "1") in _TRUE)

    def wrappers(self) -> List[WrapperSpec]:
        return resolve_wrappers(self.wrapper_names)

    def with_overrides(
        self,
        extensions: Optional[str] = None,
        wrappers: Optional[str] = None,
        workers: Optional[int] = None,
        progress: Optional[bool] = None,
    ) -> "ScanConfig":
        """Apply comma-separated CLI overrides; None keeps the current value."""
        if extensions:
            self.extensions = tuple(
                e if e.startswith(".") else "." + e
                for e in (x.strip() for x in extensions.split(",")) if e
            )
        if wrappers:
            self.wrapper_names = tuple(x.strip() for x in wrappers.split(",") if x.strip())
        if workers is not None:
            self.workers = max(1, int(workers))
        if progress is not None:
            self.progress = progress
        return self
