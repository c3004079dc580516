#!/usr/bin/env python3
"""Simulator driver — launches the app and reads its accessibility tree.

Device lifecycle, launch and screenshots go through `xcrun simctl`. The
accessibility tree and taps go through `idb ui` (brew install idb-companion,
pip install fb-idb), which reports every element with its identifier, value
and frame without needing a test runner inside the app.

Launch environment variables reach the app through simctl's SIMCTL_CHILD_
prefix.
"""

import json
import os
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass
class ElementSnapshot:
    """One accessibility element as reported by `idb ui describe-all`."""

    identifier: str = ""
    label: str = ""
    value: Any = None
    element_type: str = ""
    frame: dict = field(default_factory=dict)
    enabled: bool = True
    selected: bool = False

    @classmethod
    def from_idb(cls, node: dict) -> "ElementSnapshot":
        frame = node.get("frame") or {}
        traits = node.get("traits") or []
        return cls(
            identifier=node.get("AXUniqueId") or "",
            label=node.get("AXLabel") or "",
            value=node.get("AXValue"),
            element_type=node.get("type") or node.get("role") or "",
            frame={k: float(frame.get(k, 0)) for k in ("x", "y", "width", "height")},
            enabled=bool(node.get("enabled", True)),
            selected=bool(node.get("selected")) or "selected" in traits,
        )

    def point(self, dx: float = 0.5, dy: float = 0.5) -> tuple:
        """Screen point at a normalized offset inside the frame."""
        x = self.frame.get("x", 0.0) + self.frame.get("width", 0.0) * dx
        y = self.frame.get("y", 0.0) + self.frame.get("height", 0.0) * dy
        return round(x), round(y)

    @property
    def is_switch(self) -> bool:
        return self.element_type.lower() in ("switch", "toggle", "axswitch", "checkbox")


def parse_describe_all(output: str) -> list[ElementSnapshot]:
    """Parse `idb ui describe-all --json` output (array or one object per line)."""
    output = output.strip()
    if not output:
        return []
    try:
        nodes = json.loads(output)
    except json.JSONDecodeError:
        nodes = [json.loads(line) for line in output.splitlines() if line.strip()]
    if isinstance(nodes, dict):
        nodes = [nodes]
    return [ElementSnapshot.from_idb(n) for n in nodes if isinstance(n, dict)]


class Simulator:
    """Drives one app on one simulator."""

    def __init__(self, bundle_id: str, udid: Optional[str] = None, verbose: bool = False):
        self.bundle_id = bundle_id
        self.udid = udid
        self.verbose = verbose
        self.created_devices = []

    def log(self, msg: str):
        print(msg)

    def debug(self, msg: str):
        if self.verbose:
            print(f"  [debug] {msg}")

    def run_cmd(self, cmd: list, check: bool = True, env: Optional[dict] = None) -> subprocess.CompletedProcess:
        self.debug(f"$ {' '.join(str(c) for c in cmd)}")
        result = subprocess.run(cmd, capture_output=True, text=True, env=env)
        if check and result.returncode != 0:
            raise RuntimeError(
                f"Command failed ({result.returncode}): {' '.join(str(c) for c in cmd)}\n"
                f"{result.stderr[-1000:]}"
            )
        return result

    def _require_udid(self) -> str:
        if not self.udid:
            raise RuntimeError("No simulator selected. Set device.udid or SWIPEPROBE_UDID, or boot one first.")
        return self.udid

    # ── Device lifecycle ──────────────────────────────────────────────

    def find_or_create_device(self, name: str, device_type: str, runtime: str) -> str:
        """Find an available device called `name` or create one. Returns the UDID."""
        result = self.run_cmd(["xcrun", "simctl", "list", "devices", "-j"])
        devices = json.loads(result.stdout)

        for _runtime, device_list in devices.get("devices", {}).items():
            for d in device_list:
                if d["name"] == name and d.get("isAvailable", False):
                    self.debug(f"Found existing device: {name} ({d['udid']})")
                    self.udid = d["udid"]
                    return self.udid

        self.log(f"  📱 Creating simulator: {name}")
        result = self.run_cmd(["xcrun", "simctl", "create", name, device_type, runtime])
        self.udid = result.stdout.strip()
        self.created_devices.append(self.udid)
        return self.udid

    def boot(self):
        udid = self._require_udid()
        result = self.run_cmd(["xcrun", "simctl", "list", "devices", "-j"])
        devices = json.loads(result.stdout)
        for _runtime, device_list in devices.get("devices", {}).items():
            for d in device_list:
                if d["udid"] == udid and d["state"] == "Booted":
                    self.debug(f"Device already booted: {udid}")
                    return
        self.run_cmd(["xcrun", "simctl", "boot", udid])
        self.run_cmd(["xcrun", "simctl", "bootstatus", udid, "-b"], check=False)

    def install(self, app_path: str):
        self.run_cmd(["xcrun", "simctl", "install", self._require_udid(), os.path.expanduser(app_path)])
        self.debug("App installed")

    def shutdown(self):
        if self.udid:
            self.run_cmd(["xcrun", "simctl", "shutdown", self.udid], check=False)

    # ── App lifecycle ─────────────────────────────────────────────────

    def launch_app(self, env: Optional[dict] = None, launch_args: Optional[list] = None):
        """(Re)launch the app with the given launch environment."""
        udid = self._require_udid()
        child_env = dict(os.environ)
        for k, v in (env or {}).items():
            child_env[f"SIMCTL_CHILD_{k}"] = str(v)

        cmd = ["xcrun", "simctl", "launch", "--terminate-running-process", udid, self.bundle_id]
        if launch_args:
            cmd.extend(launch_args)
        self.run_cmd(cmd, env=child_env)
        self.debug(f"Launched {self.bundle_id} with {len(env or {})} env vars")

    def terminate_app(self):
        if self.udid:
            self.run_cmd(["xcrun", "simctl", "terminate", self.udid, self.bundle_id], check=False)

    def clear_defaults(self, domain: Optional[str] = None):
        """Delete a UserDefaults domain (the app's own by default)."""
        self.run_cmd([
            "xcrun", "simctl", "spawn", self._require_udid(),
            "defaults", "delete", domain or self.bundle_id,
        ], check=False)

    def take_screenshot(self, output_path: str) -> Path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.run_cmd(["xcrun", "simctl", "io", self._require_udid(), "screenshot", str(path)])
        return path

    # ── Accessibility ─────────────────────────────────────────────────

    def describe_all(self) -> list[ElementSnapshot]:
        result = self.run_cmd(["idb", "ui", "describe-all", "--udid", self._require_udid(), "--json"])
        return parse_describe_all(result.stdout)

    def element(self, identifier: str) -> Optional[ElementSnapshot]:
        """First element with this accessibility identifier, preferring switches."""
        matches = [e for e in self.describe_all() if e.identifier == identifier]
        if not matches:
            return None
        for e in matches:
            if e.is_switch:
                return e
        return matches[0]

    def element_value(self, identifier: str) -> Any:
        e = self.element(identifier)
        return e.value if e else None

    def identifiers(self, prefixes: tuple = ()) -> list[str]:
        ids = {e.identifier for e in self.describe_all() if e.identifier}
        if prefixes:
            ids = {i for i in ids if i.startswith(tuple(prefixes))}
        return sorted(ids)

    def tap_point(self, element: ElementSnapshot, dx: float = 0.5, dy: float = 0.5):
        x, y = element.point(dx, dy)
        self.run_cmd(["idb", "ui", "tap", "--udid", self._require_udid(), str(x), str(y)])
        time.sleep(0.2)

    def tap(self, element: ElementSnapshot):
        self.tap_point(element)

    def press(self, element: ElementSnapshot, duration: float = 0.05):
        x, y = element.point()
        self.run_cmd([
            "idb", "ui", "tap", "--udid", self._require_udid(),
            "--duration", str(duration), str(x), str(y),
        ])
