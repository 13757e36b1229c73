"""Entrypoint for the crypto price TUI."""
from __future__ import annotations

from .config import load_config
from .logging_config import configure_logging
from .ui import CryptoBoardApp


def main() -> None:
    config = load_config()
    configure_logging(config.log_level, config.log_file)
    CryptoBoardApp(config).run()


if __name__ == "__main__":
    main()
