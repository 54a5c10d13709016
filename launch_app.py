"""Bootstrap a local venv, install the project and serve the roster API."""

from __future__ import annotations

import argparse
import hashlib
import os
import subprocess
import sys
import venv
from pathlib import Path
from typing import List, Optional


PROJECT_ROOT = Path(__file__).resolve().parent
APP_DIR = PROJECT_ROOT / "app"
VENV_DIR = PROJECT_ROOT / ".venv"
# Either file changing triggers a reinstall.
DEPENDENCY_FILES = (PROJECT_ROOT / "pyproject.toml", APP_DIR / "requirements.txt")
INSTALL_MARKER = VENV_DIR / ".staffsync.installed"


def venv_python() -> Path:
    if os.name == "nt":
        return VENV_DIR / "Scripts" / "python.exe"
    return VENV_DIR / "bin" / "python"


def dependency_signature() -> str:
    digest = hashlib.sha256()
    for path in DEPENDENCY_FILES:
        if not path.exists():
            raise FileNotFoundError(f"Dependency file not found: {path}")
        digest.update(path.read_bytes())
    return digest.hexdigest()


def prepare_environment() -> Path:
    python_exec = venv_python()
    if not python_exec.exists():
        print(f"[launcher] Creating virtual environment at {VENV_DIR}...")
        venv.EnvBuilder(with_pip=True).create(VENV_DIR)

    signature = dependency_signature()
    if INSTALL_MARKER.exists() and INSTALL_MARKER.read_text().strip() == signature:
        print("[launcher] Dependencies satisfied.")
        return python_exec

    print("[launcher] Installing StaffSync into the virtual environment...")
    subprocess.check_call([str(python_exec), "-m", "pip", "install", "--upgrade", "pip"])
    subprocess.check_call([str(python_exec), "-m", "pip", "install", "-e", str(PROJECT_ROOT)])
    INSTALL_MARKER.write_text(signature)
    return python_exec


def serve_command(python_exec: Path, host: str, port: str, reload: bool) -> List[str]:
    command = [
        str(python_exec),
        "-m",
        "uvicorn",
        "api:app",
        "--app-dir",
        str(APP_DIR),
        "--host",
        host,
        "--port",
        port,
    ]
    if reload:
        command.append("--reload")
    return command


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run the StaffSync roster API.")
    parser.add_argument("--host", default=os.environ.get("STAFFSYNC_HOST", "127.0.0.1"))
    parser.add_argument("--port", default=os.environ.get("STAFFSYNC_PORT", "8000"))
    parser.add_argument("--reload", action="store_true", help="restart on source changes")
    args = parser.parse_args(argv)

    python_exec = prepare_environment()
    print(f"[launcher] Serving on http://{args.host}:{args.port}")
    return subprocess.call(serve_command(python_exec, args.host, str(args.port), args.reload))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except subprocess.CalledProcessError as exc:
        print(f"[launcher] Command failed with exit code {exc.returncode}", file=sys.stderr)
        sys.exit(exc.returncode)
    except OSError as exc:
        print(f"[launcher] {exc}", file=sys.stderr)
        sys.exit(1)
