"""
paths.py
========
Single source of truth for all absolute paths in the project.

Every module imports from here instead of computing paths individually.
This guarantees correct resolution regardless of the working directory
from which the user runs `python app.py`.
"""

import os

# The directory that contains THIS file (phasevote/)
_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

# The project root is always one level above phasevote/
PROJECT_ROOT = os.path.dirname(_PACKAGE_DIR)

# Key paths
CONFIG_PATH      = os.path.join(PROJECT_ROOT, "config.json")
ADMIN_DIR        = os.path.join(PROJECT_ROOT, "admin")
ADMIN_KEY_PATH   = os.path.join(ADMIN_DIR, "admin_private_key.pem.enc")
ADMIN_PUB_PATH   = os.path.join(ADMIN_DIR, "admin_public_key.pem")
VOTERS_CSV       = os.path.join(PROJECT_ROOT, "data", "voters.csv")
CANDIDATES_CSV   = os.path.join(PROJECT_ROOT, "data", "candidates.csv")
AUDIT_LOG_PATH   = os.path.join(PROJECT_ROOT, "data", "audit_log.json")
