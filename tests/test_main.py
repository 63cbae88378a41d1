import argparse

import pytest

pytest.importorskip('pygame')
pytest.importorskip('noise')

import main  # noqa: E402


def test_parser_defaults():
    args = main.build_parser().parse_args([])
    assert args.fps == 60
    assert args.size is None
    assert args.particles is None
    assert args.log_level == 'INFO'


def test_parse_size():
    assert main._parse_size('800x600') == (800, 600)
    with pytest.raises(argparse.ArgumentTypeError):
        main._parse_size('800')
    with pytest.raises(argparse.ArgumentTypeError):
        main._parse_size('0x600')


def test_invalid_config_exits_with_error(tmp_path):
    path = tmp_path / 'bad.json'
    path.write_text('{"resolution": -1}', encoding='utf-8')
    assert main.run(['--config', str(path)]) == 2


class _StopAfter:
    def __init__(self, frames):
        self.frames = frames

    def __call__(self):
        self.frames -= 1
        return self.frames >= 0


def test_run_loop_closes_renderer(monkeypatch):
    monkeypatch.setenv('SDL_VIDEODRIVER', 'dummy')
    monkeypatch.setenv('SDL_AUDIODRIVER', 'dummy')
    closed = []
    original_close = main.PygameRenderer.close
    monkeypatch.setattr(main.PygameRenderer, 'poll_events', lambda self, _stop=_StopAfter(3): _stop())
    monkeypatch.setattr(main.PygameRenderer, 'close', lambda self: (closed.append(True), original_close(self)))
    assert main.run(['--size', '80x60', '--particles', '10', '--seed', '1', '--fps', '0']) == 0
    assert closed == [True]
