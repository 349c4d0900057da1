import os
from pathlib import Path

# Configure the app for in-process tests before anything imports `config`.
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault(
    "KNOWLEDGE_BASE_PATH",
    str(Path(__file__).resolve().parent.parent / "knowledge_base.yaml"),
)
