"""
Assume Setup - AWS IAM assume-role shortcuts

This package keeps named role ARNs per AWS profile in a YAML file and
exchanges them for temporary credentials through AWS STS.
"""

__version__ = "1.1.0"

from . import clipboard
from . import config_store
from . import constants
from . import prompts
from . import sts_client

__all__ = [
    "clipboard",
    "config_store",
    "constants",
    "prompts",
    "sts_client",
]
