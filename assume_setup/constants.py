"""
Assume Setup Constants
Global configuration constants for the application
"""

import os

VERSION = "1.1.0"
PROG_NAME = "assume-setup"

# Config store location
DEFAULT_CONFIG_FILE = os.path.join(os.path.expanduser("~"), ".aws", "setup")
CONFIG_FILE_ENVVAR = "ASSUME_SETUP_CONFIG"
LOG_LEVEL_ENVVAR = "ASSUME_SETUP_LOG_LEVEL"

# Profile whose credentials and role list are used when none is given
DEFAULT_PROFILE = "default"

# YAML field names, kept compatible with files written by earlier releases
PROFILE_FIELD = "profile"
SESSION_NAME_FIELD = "session_name"
ROLE_LIST_FIELD = "assume_role_list"
ROLE_KEY_FIELD = "key"
ROLE_ARN_FIELD = "role_arn"

# STS limits for AssumeRole
DEFAULT_DURATION_SECONDS = 3600
MIN_DURATION_SECONDS = 900
MAX_DURATION_SECONDS = 43200

# Variables written to the clipboard, in order
CREDENTIAL_ENV_VARS = [
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
]

# RoleSessionName accepted by STS
SESSION_NAME_PATTERN = r"[\w+=,.@-]{2,64}"
