# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file),
see src/omnifocus_bridge/config.py. This file keeps the repo self-documenting.
"""

ENV_VARS = {
    # App / logging
    "OFB_APP_NAME": "App display name (default: omnifocus-bridge).",
    "OFB_LOG_LEVEL": "Logging level (default: INFO).",
    "OFB_DATA_DIR": "Local data directory for the log file (default: .local/omnifocus-bridge).",
    # Front end
    "OFB_FRONTEND": "mcp (stdio server, default) or console (interactive /commands).",
    # OmniFocus access
    "OFB_PROVIDER": "auto (probe OmniFocus, default), pro (AppleScript) or standard (URL + SQLite).",
    "OFB_OSASCRIPT_BIN": "AppleScript interpreter (default: osascript).",
    "OFB_OPEN_BIN": "URL launcher used for omnifocus:///add (default: open).",
    "OFB_DATABASE_PATH": (
        "OmniFocus SQLite database (default: the OmniFocus 4 group container under ~/Library)."
    ),
    "OFB_DETECTION_TIMEOUT_SECONDS": "How long the version probe may take (default: 5).",
    # Initial provider config
    "OFB_DIRECT_SQL_ACCESS": "Allow direct SQLite update/complete on Standard (true/false, default: true).",
    "OFB_TASK_LIMIT": "Max tasks returned by a query, 1..10000 (default: 500).",
}
