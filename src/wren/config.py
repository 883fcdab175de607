"""Application configuration.

One frozen value handed to ``App``. Checked on construction, so a bad
setting fails where it is written rather than on the first request.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from wren.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Settings for one wren application. Immutable after creation.

    Usage::

        config = AppConfig(template_dir="views", default_layout="layout.html")

    Attributes:
        debug: Put exception details into error bodies; reload templates.
        template_dir: Where ``<controller>/<action>.html`` templates live.
        component_dirs: Further template directories (shared layouts,
            partials), searched after ``template_dir``.
        template_suffix: Suffix of conventional template names.
        autoescape, trim_blocks, lstrip_blocks: Passed to kida.
        default_layout: Layout template for controllers that set none.
        max_content_length: Largest accepted request body, in bytes (413).
        log_level: Level for the ``wren`` logger, applied at freeze.
    """

    debug: bool = False

    template_dir: str | Path = "templates"
    component_dirs: tuple[str | Path, ...] = ()
    template_suffix: str = ".html"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    default_layout: str | None = None

    max_content_length: int = 16 * 1024 * 1024

    log_level: str = "info"

    def __post_init__(self) -> None:
        if not self.template_suffix.startswith("."):
            msg = f"template_suffix must start with '.', got {self.template_suffix!r}"
            raise ConfigurationError(msg)
        if self.max_content_length < 0:
            msg = f"max_content_length cannot be negative, got {self.max_content_length}"
            raise ConfigurationError(msg)
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            msg = f"Unknown log_level {self.log_level!r}"
            raise ConfigurationError(msg)
