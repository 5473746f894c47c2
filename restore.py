#!/usr/bin/env python3
"""
Wazuh Restore System - Main Entry Point

This script is a wrapper for the restore system located in wazuh_restore/restore/
"""

import sys
from wazuh_restore.restore.__main__ import main

if __name__ == '__main__':
    sys.exit(main())
