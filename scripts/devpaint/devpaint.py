#!/usr/bin/env python3
"""Thin entrypoint for the devpaint dashboard."""

from __future__ import annotations

from paint_core.app import main


if __name__ == "__main__":
    raise SystemExit(main())
