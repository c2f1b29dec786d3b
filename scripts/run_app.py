#!/usr/bin/env python
"""
Run the Streamlit order pricing page.

Usage:
    python scripts/run_app.py [--port 8501]
"""
import argparse
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Run the order pricing page")
    parser.add_argument("--port", default="8501")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    page = project_root / 'src' / 'order_pricing' / 'ui' / 'app_streamlit.py'

    if not page.exists():
        print(f"ERROR: Streamlit page not found at {page}")
        sys.exit(1)

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(page), '--server.port', str(args.port)]
    print(f"Starting Streamlit: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nPage stopped.")


if __name__ == "__main__":
    main()
