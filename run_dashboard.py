#!/usr/bin/env python3
"""Direct launcher for the Portfolio Dashboard.

This script launches Streamlit on ``portfolio_dashboard/dashboard.py`` with
the project root on the import path.
"""

import sys
import subprocess
import os
from pathlib import Path

# Get the project root and portfolio_dashboard directory
project_root = Path(__file__).parent.resolve()
dashboard_path = project_root / "portfolio_dashboard" / "dashboard.py"

if __name__ == "__main__":
    # Add project root to path for imports in the Streamlit subprocess
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(project_root), env.get("PYTHONPATH")]))
    raise SystemExit(subprocess.run([
        sys.executable, "-m", "streamlit", "run",
        str(dashboard_path)
    ], env=env).returncode)
