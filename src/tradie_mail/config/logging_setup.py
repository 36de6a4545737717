from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO", logs_dir: Optional[Path] = None) -> None:
    """Configure root logging for the CLI and the API. Optionally also log to logs_dir/tradie_mail.log."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if logs_dir is not None:
        logs_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(logs_dir / "tradie_mail.log", encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    # The OpenAI client logs every HTTP request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
