#!/usr/bin/env python3
"""Direct launcher for the Finance Tracker Streamlit app."""

import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()
app_path = project_root / "finance_tracker" / "dashboard.py"

if __name__ == "__main__":
    env = dict(os.environ)
    # Make the package importable for the Streamlit script runner
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(project_root), env.get("PYTHONPATH")]))
    subprocess.run([sys.executable, "-m", "streamlit", "run", str(app_path)], env=env)
