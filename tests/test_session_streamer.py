from __future__ import annotations

import shutil
import threading
from datetime import datetime
from pathlib import Path

import pytest
from rich.text import Text

from session_stream.shared.services.transcript_stream.service import SessionStreamer, SessionTail


FIXTURES_DIR = Path(__file__).parent / "fixtures" / "transcript_stream"


def _plain(output: str) -> str:
    return Text.from_ansi(output).plain


def _copy_fixture(root: Path, name: str, agent: str = "main") -> Path:
    dst = root / "agents" / agent / "sessions" / name
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(FIXTURES_DIR / name, dst)
    return dst


def _append(path: Path, data: bytes) -> None:
    with path.open("ab") as handle:
        handle.write(data)


class TestSessionTail:
    def test_returns_only_complete_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "s.jsonl"
        path.write_bytes(b'{"a": 1}\n{"b":')
        tail = SessionTail(path)
        assert tail.read_lines() == ['{"a": 1}']
        assert tail.read_lines() == []

        _append(path, b' 2}\n')
        assert tail.read_lines() == ['{"b": 2}']

    def test_multibyte_character_split_across_writes(self, tmp_path: Path) -> None:
        path = tmp_path / "s.jsonl"
        encoded = '"café"\n'.encode("utf-8")
        split = encoded.index(b"\xa9")
        path.write_bytes(encoded[:split])
        tail = SessionTail(path)
        assert tail.read_lines() == []

        _append(path, encoded[split:])
        assert tail.read_lines() == ['"café"']

    def test_crlf_line_endings(self, tmp_path: Path) -> None:
        path = tmp_path / "s.jsonl"
        path.write_bytes(b"one\r\ntwo\r\n")
        assert SessionTail(path).read_lines() == ["one", "two"]

    def test_flush_returns_unterminated_line(self, tmp_path: Path) -> None:
        path = tmp_path / "s.jsonl"
        path.write_bytes(b"first\nlast")
        tail = SessionTail(path)
        assert tail.read_lines() == ["first"]
        assert tail.flush() == ["last"]
        assert tail.flush() == []

    def test_truncated_file_is_reread(self, tmp_path: Path) -> None:
        path = tmp_path / "s.jsonl"
        path.write_bytes(b"one\ntwo\n")
        tail = SessionTail(path)
        assert tail.read_lines() == ["one", "two"]

        path.write_bytes(b"new\n")
        assert tail.read_lines() == ["new"]

    def test_very_long_line(self, tmp_path: Path) -> None:
        path = tmp_path / "s.jsonl"
        path.write_bytes(b"x" * 200_000 + b"\n")
        assert SessionTail(path).read_lines() == ["x" * 200_000]

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            SessionTail(tmp_path / "nope.jsonl").read_lines()


class TestDump:
    def test_nested_fixture_totals(self, tmp_path: Path) -> None:
        path = _copy_fixture(tmp_path, "nested_session.jsonl")
        outputs: list[str] = []
        totals = SessionStreamer(path, outputs.append).dump()

        assert totals.context == 175178
        assert totals.output == 246
        assert totals.cost == pytest.approx(0.4834)

        plain = [_plain(o) for o in outputs]
        assert len(plain) == 6
        assert plain[0].startswith("\n━━━ You")
        assert plain[1].endswith("  ⚡ exec(command=ls -la)")
        assert plain[2] == "  → total 24\ndrwxr-xr-x 3 user user 4096 README.md"
        assert plain[3].endswith("Done. The repo has a README.")
        assert plain[4] == "\n" + "─" * 60
        assert plain[5] == "Total: ctx: 175.2k | out: 246 | $0.48"

    def test_flat_fixture_totals(self, tmp_path: Path) -> None:
        path = _copy_fixture(tmp_path, "flat_session.jsonl")
        outputs: list[str] = []
        totals = SessionStreamer(path, outputs.append).dump()

        assert (totals.context, totals.output) == (300, 60)
        assert totals.cost == pytest.approx(0.0323)
        plain = [_plain(o) for o in outputs]
        assert plain == [
            "\n[system] 10:30:00 session started — model: claude-sonnet-4",
            "\n━━━ You 10:30:01 ━━━\nHello, how are you?",
            "\n💭 Thinking 10:30:03 ━━━\nLet me think about this...",
            "\n━━━ Agent 10:30:04 ctx: 100 | out: 20 | $0.01 ━━━\nI'm doing well!",
            "  ⚡ shell(command=ls -la)",
            "  → 2 lines, 36 bytes",
            "\n━━━ Agent 10:30:07 ctx: 200 | out: 40 | $0.02 ━━━\nAll set.",
            "\n" + "─" * 60,
            "Total: ctx: 300 | out: 60 | $0.03",
        ]

    def test_verbose_includes_requests(self, tmp_path: Path) -> None:
        path = _copy_fixture(tmp_path, "flat_session.jsonl")
        outputs: list[str] = []
        SessionStreamer(path, outputs.append, verbose=True).dump()
        assert "\n[request] 10:30:02" in [_plain(o) for o in outputs]

    def test_no_totals_without_tokens(self, tmp_path: Path) -> None:
        path = tmp_path / "s.jsonl"
        path.write_text('{"role": "user", "content": "hi"}', encoding="utf-8")
        outputs: list[str] = []
        SessionStreamer(path, outputs.append).dump()
        assert [_plain(o) for o in outputs] == ["\n━━━ You ━━━\nhi"]


class TestFollow:
    def test_header_names_agent(self, tmp_path: Path) -> None:
        path = _copy_fixture(tmp_path, "nested_session.jsonl", agent="work")
        header = SessionStreamer(path, lambda _: None).header()
        assert [_plain(line) for line in header] == [
            "Streaming: nested_session.jsonl (work)",
            "─" * 60,
            "",
        ]

    def test_header_without_agent(self, tmp_path: Path) -> None:
        path = tmp_path / "loose.jsonl"
        path.write_text("", encoding="utf-8")
        header = SessionStreamer(path, lambda _: None).header()
        assert _plain(header[0]) == "Streaming: loose.jsonl"

    def test_replay_tail_processes_last_lines(self, tmp_path: Path) -> None:
        path = _copy_fixture(tmp_path, "nested_session.jsonl")
        outputs: list[str] = []
        streamer = SessionStreamer(path, outputs.append, tail=2)

        assert streamer.replay_tail() == 2
        local = datetime.fromtimestamp(1708770604).strftime("%H:%M:%S")
        assert [_plain(o) for o in outputs] == [
            f"\n━━━ Agent {local} ctx: 90.0k | out: 50 ━━━\nDone. The repo has a README."
        ]
        assert streamer.totals.context == 90000

    def test_replay_tail_zero(self, tmp_path: Path) -> None:
        path = _copy_fixture(tmp_path, "nested_session.jsonl")
        outputs: list[str] = []
        streamer = SessionStreamer(path, outputs.append, tail=0)
        assert streamer.replay_tail() == 0
        assert outputs == []

    def test_poll_picks_up_appended_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "s.jsonl"
        path.write_text('{"role": "user", "content": "first"}\n', encoding="utf-8")
        outputs: list[str] = []
        streamer = SessionStreamer(path, outputs.append)
        streamer.replay_tail()

        _append(path, b'{"role": "assistant", "content": "second", "out_tokens": 5')
        assert streamer.poll() == 0
        _append(path, b"}\n")
        assert streamer.poll() == 1

        assert [_plain(o) for o in outputs] == [
            "\n━━━ You ━━━\nfirst",
            "\n━━━ Agent ctx: 0 | out: 5 ━━━\nsecond",
        ]
        assert streamer.totals.output == 5

    def test_follow_stops_when_asked(self, tmp_path: Path) -> None:
        path = _copy_fixture(tmp_path, "flat_session.jsonl")
        outputs: list[str] = []
        streamer = SessionStreamer(path, outputs.append, poll_interval=0.01)

        def sink(output: str) -> None:
            outputs.append(output)
            if "All set." in output:
                streamer.stop()

        streamer.sink = sink
        thread = threading.Thread(target=streamer.follow)
        thread.start()
        thread.join(timeout=5)

        assert not thread.is_alive()
        assert _plain(outputs[-1]).endswith("All set.")
