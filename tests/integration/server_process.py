"""Run ``python -m calc_mcp`` as a child process for end-to-end tests.

The server answers strictly in order, one line per request and none per
notification, so replies are read back one at a time. Stdout lines are
collected by a reader thread only so reads can time out; stderr is sent
to a file and read after the process exits.
"""

from __future__ import annotations

import json
import os
import queue
import subprocess
import sys
import threading
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parents[2]


class RpcError(Exception):
    """The server answered with an error envelope."""

    def __init__(self, reply: dict[str, Any]) -> None:
        error = reply["error"]
        super().__init__(f"{error['code']}: {error['message']}")
        self.reply = reply
        self.code = error["code"]


class ServerProcess:
    def __init__(self, stderr_path: Path, *, env: dict[str, str] | None = None, timeout_s: float = 15.0) -> None:
        self._timeout_s = timeout_s
        self._stderr_path = stderr_path
        self._stderr_file = stderr_path.open("w", encoding="utf-8")
        self._lines: "queue.Queue[str]" = queue.Queue()
        self._next_id = 0

        self.proc = subprocess.Popen(
            [sys.executable, "-m", "calc_mcp"],
            cwd=str(REPO_ROOT),
            env={**os.environ, **(env or {})},
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=self._stderr_file,
            text=True,
            encoding="utf-8",
            bufsize=1,
        )
        self._reader = threading.Thread(target=self._pump_stdout, daemon=True)
        self._reader.start()

    def _pump_stdout(self) -> None:
        assert self.proc.stdout is not None
        for line in self.proc.stdout:
            self._lines.put(line)

    def send_line(self, text: str) -> None:
        assert self.proc.stdin is not None
        self.proc.stdin.write(text + "\n")
        self.proc.stdin.flush()

    def send(self, message: dict[str, Any]) -> None:
        self.send_line(json.dumps(message))

    def reply(self) -> dict[str, Any]:
        """Next reply line, decoded. Every stdout line must be a JSON object."""
        try:
            line = self._lines.get(timeout=self._timeout_s)
        except queue.Empty:
            raise TimeoutError(f"no reply within {self._timeout_s}s") from None
        return json.loads(line)

    def request(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        self._next_id += 1
        message: dict[str, Any] = {"jsonrpc": "2.0", "id": self._next_id, "method": method}
        if params is not None:
            message["params"] = params
        self.send(message)

        reply = self.reply()
        assert reply["id"] == self._next_id, reply
        if "error" in reply:
            raise RpcError(reply)
        return reply["result"]

    def notify(self, method: str) -> None:
        self.send({"jsonrpc": "2.0", "method": method})

    def finish(self) -> tuple[int, list[str], str]:
        """Close stdin and wait for exit.

        Returns ``(exit_code, unread_stdout_lines, stderr_text)``.
        """
        if self.proc.stdin is not None and not self.proc.stdin.closed:
            self.proc.stdin.close()
        try:
            code = self.proc.wait(timeout=self._timeout_s)
        except subprocess.TimeoutExpired:
            self.proc.kill()
            self.proc.wait()
            raise
        finally:
            self._stderr_file.close()
        self._reader.join(timeout=self._timeout_s)

        leftover = []
        while not self._lines.empty():
            leftover.append(self._lines.get_nowait())
        return code, leftover, self._stderr_path.read_text(encoding="utf-8")
