from __future__ import annotations

import json
import sys
from subprocess import run as subprocess_run  # noqa: S404


def test_cli_preview_from_stdin() -> None:
    result = subprocess_run(  # noqa: S603
        [sys.executable, "-m", "ecsmapper.cli", "preview", "--sourcetype", "fw"],
        input='[{"user": {"name": "alice", "roles": ["admin"]}}, {"host": "web-1"}]',
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode == 0
    payload = json.loads(result.stdout)
    assert [item["field"] for item in payload] == ["user", "user.name", "user.roles", "user.roles.0", "host"]
    assert payload[1] == {"sourcetype": "fw", "field": "user.name", "description": "sample value: alice"}
    assert payload[4]["description"] == "field host"
