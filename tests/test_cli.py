import asyncio

import pytest

from chadgpt import __version__, cli
from chadgpt.config import parse_config
from chadgpt.events import ChannelMessage, Registered
from chadgpt.models import CompletionResult


def test_version_flag_prints_version(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.build_parser().parse_args(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_missing_config_exits_with_status_2(tmp_path):
    assert cli.main(["--config", str(tmp_path / "missing.yaml")]) == 2


def test_build_bot_wires_config_into_dispatcher(monkeypatch):
    cfg = parse_config(
        {
            "irc": {
                "host": "irc.example.org",
                "nick": "ChadGPT",
                "keepnick": True,
                "channels": ["#one"],
                "ignored_nicks": ["bad*"],
            },
            "backend": {"api_key": "sk-ant-test", "model": "claude-test", "max_lines": 3, "name": "Claude"},
        }
    )

    async def scenario():
        client, dispatcher = cli.build_bot(cfg)
        assert dispatcher.identity.preferred_nick == "ChadGPT"
        assert dispatcher.identity.keepnick is True
        assert dispatcher.identity.channels == ["#one"]
        assert dispatcher.ignored_nicks == ["bad*"]
        assert dispatcher.max_lines == 3
        assert dispatcher.backend_name == "Claude"
        assert dispatcher.gateway.api_key == "sk-ant-test"

        said = []

        async def fake_message(target, text):
            said.append((target, text))

        async def fake_join(channel, password=None):
            return None

        async def fake_complete(request):
            return CompletionResult.failure("nope")

        monkeypatch.setattr(client, "message", fake_message)
        monkeypatch.setattr(client, "join", fake_join)
        monkeypatch.setattr(dispatcher.gateway, "complete", fake_complete)

        worker = asyncio.create_task(dispatcher.run())
        try:
            dispatcher.post(Registered(nick="ChadGPT"))
            dispatcher.post(ChannelMessage(nick="alice", target="#one", message="ChadGPT: hi"))
            await dispatcher.wait_idle()
        finally:
            worker.cancel()
            await asyncio.gather(worker, return_exceptions=True)
        return said

    said = asyncio.run(scenario())
    assert said == [("#one", "alice: Claude error: nope")]
