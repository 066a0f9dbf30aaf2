"""Main entry point for the streaming-ga package."""

from __future__ import annotations

from .cli import app

if __name__ == "__main__":
    app(prog_name="streaming-ga")
