"""
Configuration for the voting core and its Flask service.

Every value can be overridden through an environment variable so the
same code runs in tests (small groups) and in a demo deployment.
"""

import os

# Group parameters preset used by Election.create: "toy", "test" or "default"
PARAMS_PRESET = os.environ.get("HOMOVOTE_PARAMS", "default")

DEFAULT_ELECTION_NAME = "Sample Election"
DEFAULT_CHOICES = ["Yes", "No"]

# Server configuration
SERVER_HOST = os.environ.get("HOMOVOTE_HOST", "127.0.0.1")
SERVER_PORT = int(os.environ.get("HOMOVOTE_PORT", "5000"))

# Client configuration
SERVER_URL = os.environ.get("HOMOVOTE_SERVER_URL", f"http://{SERVER_HOST}:{SERVER_PORT}")
HTTP_TIMEOUT = float(os.environ.get("HOMOVOTE_HTTP_TIMEOUT", "5"))

# Logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = os.environ.get("HOMOVOTE_LOG_LEVEL", "INFO")
