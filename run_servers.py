"""
Main entry point for running the MCP server from a source checkout.

Equivalent to the installed `mcp-gmail-postgres` command:
    python run_servers.py stdio
    python run_servers.py http --port 3000
    python run_servers.py gmail-token
    python run_servers.py check
"""

import os
import sys

# Add src/ to path so the package imports without installation
src_root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if src_root not in sys.path:
    sys.path.insert(0, src_root)

from mcp_gmail_postgres.cli import main


if __name__ == "__main__":
    main()
