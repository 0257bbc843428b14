"""
Time sources used by chainlog.

Both are looked up through this module at call time, so tests can swap them:

    monkeypatch.setattr(chainlog.clock, "now", lambda: fixed)
"""

import time
from datetime import datetime

# Wall clock for log line timestamps
now = datetime.now

# Monotonic nanoseconds for since() checkpoints
monotonic = time.monotonic_ns
