# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Only the demo CLI reads it; library callers pass TaskOptions explicitly or opt in with
TaskOptions.from_settings(get_settings()).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKPOLICY_APP_NAME": "App display name (default: taskpolicy).",
    "TASKPOLICY_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKPOLICY_LOG_DIR": "Directory for the debug log file (default: .local/taskpolicy).",
    "TASKPOLICY_LOG_TO_FILE": "Also write full DEBUG logs to <log_dir>/taskpolicy.log (true/false).",
    # Task defaults
    "TASKPOLICY_DEFAULT_POLICY": (
        "Policy used by TaskOptions.from_settings(): concurrent, drop, keep_last, restartable, queue."
    ),
    "TASKPOLICY_DEBOUNCE_SECONDS": "Default debounce delay in seconds (empty => none).",
    # Demo CLI
    "TASKPOLICY_DEMO_POLICIES": "Comma/space separated policies to demonstrate (default: all).",
    "TASKPOLICY_DEMO_INVOCATIONS": "Rapid invocations per policy (default: 3).",
    "TASKPOLICY_DEMO_STEP_SECONDS": "Duration of one demo task step in seconds (default: 0.1).",
}
