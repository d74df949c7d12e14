import os
import tempfile

# wavetone configures file logging on import; keep it out of the home directory.
os.environ.setdefault("WAVETONE_LOG_DIR", tempfile.mkdtemp(prefix="wavetone-logs-"))
