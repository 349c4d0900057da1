"""
Vercel entry point for the BI Triage Agent API
"""
import sys
import os

# Application packages live under src/
src_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

# Set environment variables for serverless
os.environ.setdefault("ENVIRONMENT", "production")
os.environ.setdefault("KNOWLEDGE_BASE_PATH", os.path.join(os.path.dirname(src_dir), "knowledge_base.yaml"))

from mangum import Mangum
from main import app

# Lambda handler for ASGI app; lifespan runs so storage and seed data are set up
handler = Mangum(app, lifespan="auto")
