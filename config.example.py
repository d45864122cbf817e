# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKDESK_APP_NAME": "App display name (default: taskdesk).",
    "TASKDESK_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Remote API
    "TASKDESK_API_BASE_URL": "Task API base URL (default: http://localhost:5000/api).",
    "TASKDESK_HTTP_CONNECT_TIMEOUT_SECONDS": "Connect timeout for API calls (default: 5).",
    "TASKDESK_HTTP_READ_TIMEOUT_SECONDS": "Read timeout for API calls (default: 15).",
    # Paths (gitignored)
    "TASKDESK_DATA_DIR": "Local data directory for logs and the session (default: .local/taskdesk).",
    "TASKDESK_SESSION_PATH": "Saved session token file (default: <data_dir>/session.json).",
}
