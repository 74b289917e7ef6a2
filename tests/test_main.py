# tests/test_main.py
import json
import os
import signal
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

import main as main_module
from config import ConfigError


def _write_settings(tmp_path, local=None, **overrides):
    settings = {
        "login": False,
        "amazonUsername": "",
        "amazonPassword": "",
        "autobuy": False,
        "autobuyLimit": 1,
        "maxPrice": 500,
        "takeScreenshots": False,
        "sleepTime": 10,
        "cards": [{"name": "RTX 3080", "url": "https://www.amazon.co.uk/dp/A"}],
    }
    settings.update(overrides)
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(settings), encoding="utf-8")
    if local is not None:
        (tmp_path / "settings.local.json").write_text(json.dumps(local), encoding="utf-8")
    return str(path)


def test_build_config_applies_flags(tmp_path):
    path = _write_settings(tmp_path)
    config = main_module.build_config(["--settings", path, "--visible", "--no-open"])
    assert config.headless is False
    assert config.open_browser is False
    assert config.max_price == 500


def test_build_config_reads_local_override_beside_settings(tmp_path):
    path = _write_settings(tmp_path, local={"maxPrice": 350})
    config = main_module.build_config(["--settings", path])
    assert config.max_price == 350


def test_build_config_validates(tmp_path):
    path = _write_settings(tmp_path, login=True)
    with pytest.raises(ConfigError):
        main_module.build_config(["--settings", path])


def test_main_exits_nonzero_before_launching_browser(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = _write_settings(tmp_path, autobuy=True)

    def fail_open_session(config):
        raise AssertionError("browser must not be launched")

    monkeypatch.setattr(main_module, "open_session", fail_open_session)

    assert main_module.main(["--settings", path]) == 1


def test_main_exits_nonzero_on_malformed_value(tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)
    path = _write_settings(tmp_path, autobuyLimit="two")

    assert main_module.main(["--settings", path]) == 1
    assert "autobuyLimit must be a number" in caplog.text


_STALLED_MONITOR = textwrap.dedent("""
    import asyncio
    import sys
    from contextlib import asynccontextmanager

    import main as main_module


    @asynccontextmanager
    async def recording_session(config):
        try:
            yield object()
        finally:
            with open("closed.flag", "w") as f:
                f.write("closed")


    async def wait_forever(session, config, notifier, report=None, max_passes=None):
        print("READY", flush=True)
        await asyncio.Event().wait()


    main_module.open_session = recording_session
    main_module.run_monitor = wait_forever
    sys.exit(main_module.main(sys.argv[1:]))
""")


@pytest.mark.skipif(sys.platform == "win32", reason="SIGTERM cannot be delivered to a child on Windows")
def test_sigterm_closes_browser_session(tmp_path):
    path = _write_settings(tmp_path)
    script = tmp_path / "run_stalled.py"
    script.write_text(_STALLED_MONITOR, encoding="utf-8")
    env = dict(os.environ, PYTHONPATH=str(Path(__file__).resolve().parent.parent))

    proc = subprocess.Popen(
        [sys.executable, str(script), "--settings", path],
        cwd=tmp_path, env=env, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True,
    )
    try:
        for line in proc.stdout:
            if line.strip() == "READY":
                break
        else:
            pytest.fail("monitor exited before it started")
        proc.send_signal(signal.SIGTERM)
        output, _ = proc.communicate(timeout=15)
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.wait()

    assert proc.returncode == 0, output
    assert (tmp_path / "closed.flag").read_text() == "closed"
    assert "Interrupted; browser closed" in output
