#!/usr/bin/env python3
"""Print the meeting time of every configured rule without sending anything."""

import sys

from meeting_notifier.probe import run_sunset_probe

if __name__ == '__main__':
    sys.exit(run_sunset_probe())
