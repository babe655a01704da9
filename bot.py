#!/usr/bin/env python3
"""Run the watchdog bot: ``python bot.py`` (configuration via environment)."""

from tele_watchdog.main import run

if __name__ == "__main__":
    run()
