"""
Launch script for the Bucket List Streamlit Web UI.

Usage: python run_web.py [extra streamlit options]
"""

import subprocess
import sys
from pathlib import Path

PORT = "8501"


def main() -> int:
    """Start the Streamlit server for bucket_list/webapp.py and return its exit code."""
    webapp_path = Path(__file__).parent / "bucket_list" / "webapp.py"

    command = [
        sys.executable, "-m", "streamlit", "run",
        str(webapp_path),
        "--server.port", PORT,
        "--browser.gatherUsageStats", "false",
        *sys.argv[1:],
    ]
    return subprocess.run(command).returncode


if __name__ == "__main__":
    sys.exit(main())
