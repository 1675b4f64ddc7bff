from __future__ import annotations

import argparse
import json
import time
import urllib.error
import urllib.request
from typing import Any

POLL_INTERVAL = 1.0


class SmokeTestError(RuntimeError):
    pass


def get_bytes(url: str) -> bytes:
    try:
        with urllib.request.urlopen(url, timeout=10) as resp:
            return resp.read()
    except urllib.error.HTTPError as exc:
        msg = f"GET {url} answered {exc.code}"
        raise SmokeTestError(msg) from exc


def get_json(url: str) -> Any:
    return json.loads(get_bytes(url).decode("utf-8"))


def wait_for_editor(base_url: str, timeout: int) -> list[str]:
    """Poll the template listing until the server answers, then return the ids."""
    url = f"{base_url}/api/templates"
    deadline = time.monotonic() + timeout
    while True:
        try:
            return list(get_json(url).get("templates", []))
        except (urllib.error.URLError, ConnectionError) as exc:
            if time.monotonic() >= deadline:
                msg = f"Editor at {base_url} did not come up within {timeout}s: {exc}"
                raise SmokeTestError(msg) from exc
        time.sleep(POLL_INTERVAL)


def check_template(base_url: str, template_id: str) -> None:
    template_url = f"{base_url}/api/templates/{template_id}"
    exported = get_json(f"{template_url}/export?format=v2")
    if exported.get("version") != 2:
        msg = f"V2 export of {template_id} has no version marker"
        raise SmokeTestError(msg)

    preview = get_bytes(f"{template_url}/preview.pdf")
    if not preview.startswith(b"%PDF"):
        msg = f"Preview of {template_id} is not a PDF"
        raise SmokeTestError(msg)


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke test for a running editor server.")
    parser.add_argument("--editor", default="http://localhost:8000")
    parser.add_argument("--timeout", type=int, default=60)
    args = parser.parse_args()

    base_url = args.editor.rstrip("/")
    templates = wait_for_editor(base_url, args.timeout)
    if not templates:
        msg = "Editor has no templates; upload a PDF first"
        raise SmokeTestError(msg)

    check_template(base_url, templates[0])
    print(f"Smoke test passed for template {templates[0]}.")


if __name__ == "__main__":
    main()
