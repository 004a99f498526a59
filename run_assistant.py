#!/usr/bin/env python3
"""
Runner script for the Wake Word Assistant.

This script provides a simple way to run the assistant; every option of the
wake-word-assistant command is accepted.

Usage:
    python run_assistant.py -w assistant -m base.en
"""

import sys

from wake_word_assistant.cli import main


if __name__ == '__main__':
    sys.exit(main())
