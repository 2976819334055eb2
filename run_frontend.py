"""Start the CustomerHub dashboard. Use from project root: python run_frontend.py [--port N]"""
import argparse
import os
import subprocess
import sys

parser = argparse.ArgumentParser(description=__doc__)
parser.add_argument("--port", type=int, default=int(os.environ.get("CUSTOMERHUB_UI_PORT", "8501")))
parser.add_argument("--api-url", default=os.environ.get("CUSTOMERHUB_API_URL", "http://localhost:8000"))
args = parser.parse_args()

env = dict(os.environ, CUSTOMERHUB_API_URL=args.api_url)
app_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "frontend", "streamlit_app.py")
sys.exit(subprocess.call(
    [sys.executable, "-m", "streamlit", "run", app_path, f"--server.port={args.port}"],
    env=env,
))
