"""The production app boots in a clean interpreter.

Module discovery during ``storefront.init()`` loads every module under
``storefront/`` on its own, so a package that re-imports its submodules on
load breaks startup. That only shows up when nothing has been imported yet,
which is why this runs in a subprocess.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[3]

BOOT = """
from fastapi.testclient import TestClient

import app

response = TestClient(app.app).get("/health")
assert response.status_code == 200, response.text
assert response.json() == {"status": "ok", "domain": "storefront"}
print("booted")
"""


@pytest.mark.slow
def test_app_imports_and_serves_health_in_fresh_interpreter():
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(ROOT / "src"), str(ROOT)])
    env["LOG_TO_FILE"] = "0"
    env["STOREFRONT_TOKEN_SECRET"] = "test-secret"

    result = subprocess.run(
        [sys.executable, "-c", BOOT],
        cwd=ROOT,
        env=env,
        capture_output=True,
        text=True,
        timeout=120,
    )

    assert result.returncode == 0, result.stderr
    assert "booted" in result.stdout
