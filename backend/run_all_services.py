#!/usr/bin/env python3
"""
Unified runner for all backend services.

Starts the four domain services, waits until each answers `/health`, then
starts the gateway in front of them. Ctrl+C stops everything.

    python run_all_services.py                # all services
    python run_all_services.py auth gateway   # a subset
"""

import os
import subprocess
import sys
import threading
import time
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv
import httpx

BACKEND_DIR = Path(__file__).parent.absolute()
HEALTH_TIMEOUT_SECONDS = 30.0

# Ports match the gateway's default upstream URLs
SERVICES = {
    "auth": {
        "name": "auth-service",
        "module": "services.auth_service:app",
        "port": 3001,
        "description": "Auth Service - Accounts, tokens and integrations",
    },
    "meta": {
        "name": "meta-service",
        "module": "services.meta_service:app",
        "port": 3002,
        "description": "Meta Service - Meta ad metric snapshots",
    },
    "spotify": {
        "name": "spotify-service",
        "module": "services.spotify_service:app",
        "port": 3003,
        "description": "Spotify Service - Spotify track metric snapshots",
    },
    "analytics": {
        "name": "analytics-service",
        "module": "services.analytics_service:app",
        "port": 3004,
        "description": "Analytics Service - Campaigns and summaries",
    },
    "gateway": {
        "name": "api-gateway",
        "module": "services.gateway:app",
        "port": 3000,
        "description": "API Gateway - Single entry point",
    },
}


def load_environment() -> Dict[str, str]:
    """Return the environment every service process inherits."""
    env_file = BACKEND_DIR / ".env"
    if env_file.exists():
        load_dotenv(env_file)
        print(f"✅ Loaded environment variables from {env_file}")
    else:
        print("⚠️  No .env file found, using default settings")

    env = os.environ.copy()
    python_path = env.get("PYTHONPATH", "")
    if str(BACKEND_DIR) not in python_path.split(os.pathsep):
        env["PYTHONPATH"] = os.pathsep.join(p for p in (str(BACKEND_DIR), python_path) if p)
    return env


def start_service(key: str, base_env: Dict[str, str]) -> subprocess.Popen:
    config = SERVICES[key]
    env = dict(base_env, SERVICE_NAME=config["name"], PORT=str(config["port"]))
    process = subprocess.Popen(
        [
            sys.executable, "-m", "uvicorn", config["module"],
            "--host", "0.0.0.0",
            "--port", str(config["port"]),
            "--reload",
        ],
        cwd=BACKEND_DIR,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        bufsize=1,
    )
    threading.Thread(target=echo_output, args=(key, process), daemon=True).start()
    print(f"🚀 Starting {config['description']} on port {config['port']}")
    return process


def echo_output(key: str, process: subprocess.Popen) -> None:
    prefix = f"[{SERVICES[key]['name']}:{SERVICES[key]['port']}]"
    for line in iter(process.stdout.readline, ""):
        print(f"{prefix} {line.rstrip()}")


def wait_until_healthy(key: str, timeout: float = HEALTH_TIMEOUT_SECONDS) -> bool:
    """Poll a service's /health endpoint until it answers 200 or the timeout passes."""
    url = f"http://localhost:{SERVICES[key]['port']}/health"
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            if httpx.get(url, timeout=2.0).status_code == 200:
                return True
        except httpx.TransportError:
            pass
        time.sleep(0.5)
    return False


def stop_services(processes: Dict[str, subprocess.Popen]) -> None:
    for process in processes.values():
        process.terminate()
    for key, process in processes.items():
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
        print(f"✅ Stopped {key}")


def selected_services(args: List[str]) -> List[str]:
    unknown = [key for key in args if key not in SERVICES]
    if unknown:
        print(f"❌ Unknown service(s): {', '.join(unknown)}. Choose from {', '.join(SERVICES)}")
        sys.exit(2)
    keys = args or list(SERVICES)
    # The gateway goes last so its upstreams are already listening
    return sorted(keys, key=lambda key: key == "gateway")


def main() -> None:
    print("🔧 SongTrackPro Backend Services Runner")
    print("=" * 50)

    env = load_environment()
    processes: Dict[str, subprocess.Popen] = {}

    try:
        for key in selected_services(sys.argv[1:]):
            if key == "gateway":
                for upstream in [k for k in processes if k != "gateway"]:
                    if not wait_until_healthy(upstream):
                        print(f"⚠️  {SERVICES[upstream]['name']} is not healthy yet")
            processes[key] = start_service(key, env)

        print("\n📍 Service URLs:")
        for key in processes:
            port = SERVICES[key]["port"]
            print(f"   • {SERVICES[key]['description']}: http://localhost:{port} (docs: /docs)")
        print("\n🛑 Press Ctrl+C to stop all services")

        while processes:
            time.sleep(1)
            for key, process in list(processes.items()):
                if process.poll() is not None:
                    print(f"⚠️  Service {key} exited with code {process.returncode}")
                    del processes[key]
        print("❌ All services have stopped")
    except KeyboardInterrupt:
        print("\n👋 Stopping all services...")
        stop_services(processes)


if __name__ == "__main__":
    main()
