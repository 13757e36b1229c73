"""Module entrypoint for the crypto price TUI.

Run:
  python -m cryptoboard
"""

from __future__ import annotations

from .main import main


if __name__ == "__main__":
    main()
