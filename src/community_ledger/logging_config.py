import logging
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_level(level: Optional[str]) -> int:
    name = (level or "INFO").strip().upper()
    if name not in LEVEL_NAMES:
        raise ValueError(f"log level must be one of {', '.join(LEVEL_NAMES)} (got {level!r})")
    return getattr(logging, name)


def configure_logging(level: str = "INFO", file_path: Optional[str] = None) -> None:
    """
    Console output at `level`; with `file_path`, a UTF-8 log file that also keeps the DEBUG trail
    (per-month ledger and verdict decisions) so a disputed restriction can be traced afterwards.
    """
    console_level = resolve_level(level)

    console = logging.StreamHandler()
    console.setLevel(console_level)
    handlers: list[logging.Handler] = [console]
    root_level = console_level

    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        audit = logging.FileHandler(path, encoding="utf-8")
        audit.setLevel(logging.DEBUG)
        handlers.append(audit)
        root_level = logging.DEBUG

    logging.basicConfig(
        level=root_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,  # the CLI configures once from env, then again from the loaded config
    )
