#!/usr/bin/env python3
"""
Setup verification script for the Job Application Assistant
Checks the server's model credentials, the installed packages, and that the
client can reach a generation endpoint and keep its history file.
"""

import importlib.util
import os
import sys
from pathlib import Path

# Distribution name -> import name
REQUIRED_PACKAGES = {
    "fastapi": "fastapi",
    "uvicorn": "uvicorn",
    "openai": "openai",
    "python-dotenv": "dotenv",
    "python-multipart": "multipart",
    "httpx": "httpx",
    "loguru": "loguru",
    "PyMuPDF": "fitz",
    "python-docx": "docx",
}

REQUIRED_FILES = [
    "app_fastapi.py",
    "generate_cover_letter.py",
    "score_fit.py",
    "chunk_decoder.py",
    "generation_session.py",
    "history_store.py",
    "job_assistant.py",
]


def check_api_key(root: Path = Path(".")):
    """OPENAI_API_KEY from the process environment, else from root/.env"""
    from dotenv import dotenv_values

    env_file = root / ".env"
    api_key = os.getenv("OPENAI_API_KEY")
    source = "environment"
    if not api_key and env_file.exists():
        api_key = dotenv_values(env_file).get("OPENAI_API_KEY")
        source = str(env_file)

    if not api_key:
        print("❌ OPENAI_API_KEY is not set")
        print(f"   Export it or add OPENAI_API_KEY=... to {env_file}")
        return False

    # Template value left in .env
    if api_key.startswith("your_") or len(api_key) < 10:
        print(f"❌ OPENAI_API_KEY from {source} looks like a placeholder")
        return False

    print(f"✅ OPENAI_API_KEY is set ({source})")
    return True


def check_dependencies(packages=REQUIRED_PACKAGES):
    """Check if required packages are installed"""
    missing = [name for name, module in packages.items() if importlib.util.find_spec(module) is None]

    if missing:
        print(f"❌ Missing required packages: {', '.join(missing)}")
        print("   Please run: pip install -e .")
        return False

    print("✅ All required packages are installed")
    return True


def check_files(root: Path = Path("."), required_files=REQUIRED_FILES):
    """Check if required files exist"""
    missing = [file for file in required_files if not (root / file).exists()]

    if missing:
        print(f"❌ Missing required files: {', '.join(missing)}")
        return False

    print("✅ All required files are present")
    return True


def check_generate_url(url: str):
    """The client posts to this URL; it must be an absolute http(s) URL"""
    import httpx

    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        print(f"❌ GENERATE_URL is not a valid URL: {url!r} ({e})")
        return False

    if parsed.scheme not in ("http", "https") or not parsed.host:
        print(f"❌ GENERATE_URL must be an http(s) URL with a host, got {url!r}")
        return False

    print(f"✅ Cover letters will be requested from {url}")
    return True


def check_history_path(path: Path):
    """The history file must be readable if present and its directory writable"""
    if path.exists() and not path.is_file():
        print(f"❌ History path {path} exists but is not a file")
        return False

    directory = path.parent
    # HistoryStore creates missing parents on first save; check the nearest existing one
    while not directory.exists() and directory != directory.parent:
        directory = directory.parent

    if not directory.is_dir() or not os.access(directory, os.W_OK | os.X_OK):
        print(f"❌ Cannot write the application history under {directory}")
        return False
    if path.exists() and not os.access(path, os.R_OK):
        print(f"❌ History file {path} is not readable")
        return False

    print(f"✅ Application history will be kept in {path}")
    return True


def main(root: Path = Path(".")):
    """Run all checks"""
    print("🔍 Checking setup...")
    print("-" * 50)

    ok = check_files(root) and check_dependencies()
    if ok:
        # config loads .env on import, so it needs python-dotenv in place first
        import config

        checks = [
            ("Server", lambda: check_api_key(root)),
            ("Client endpoint", lambda: check_generate_url(config.GENERATE_URL)),
            ("History", lambda: check_history_path(root / config.HISTORY_PATH)),
        ]
        for name, check_func in checks:
            print(f"\n[{name}]")
            # Keep going after a failure
            ok = check_func() and ok

    print("\n" + "=" * 50)
    if not ok:
        print("❌ Some checks failed. Please fix the issues above.")
        return 1

    print("✅ Setup looks good.")
    print("\n  python app_fastapi.py                                      # start the server")
    print("  python job_assistant.py generate --job job.txt --cv cv.pdf  # generate a cover letter")
    return 0


if __name__ == "__main__":
    sys.exit(main())
