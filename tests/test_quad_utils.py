"""Tests for the shared CLI / JSON / logging helpers."""

import json
import logging
from fractions import Fraction

import mpmath as mp
import pytest
from flint import acb, arb

from mag import Mag
from quad_utils import (
    ball_json,
    configure_logging,
    console_show,
    default_json_out,
    ensure_finite,
    mag_json,
    make_meta,
    parse_endpoint,
    parse_number,
    write_json,
)


class TestParsing:
    def test_rational(self):
        p = parse_number("1/3")
        assert p.rational == "1/3"
        assert p.fraction == Fraction(1, 3)
        assert mp.almosteq(p.float, mp.mpf(1) / 3)

    def test_decimal(self):
        p = parse_number(" 0.25 ")
        assert p.rational is None and p.fraction is None
        assert p.float == mp.mpf("0.25")
        assert p.raw == " 0.25 "

    @pytest.mark.parametrize("bad", ["abc", "1/0", "inf", "nan", ""])
    def test_rejects(self, bad):
        with pytest.raises(ValueError):
            parse_number(bad)

    def test_endpoint(self):
        assert parse_endpoint("1/2", "-3") == mp.mpc(0.5, -3)
        assert parse_endpoint("2") == mp.mpc(2, 0)


class TestJson:
    def test_ball_json(self):
        j = ball_json(acb(arb(1, 0.5), 2))
        assert set(j) == {"real", "imag", "radius", "str"}
        assert set(j["real"]) == {"mid", "rad"}
        assert mp.mpf(j["real"]["mid"]) == 1
        assert mp.mpf(j["radius"]) >= 0.5
        assert mp.mpf(j["imag"]["rad"]) == 0

    def test_mag_json(self):
        assert mag_json(Mag.inf()) == "inf"
        assert mp.mpf(mag_json(Mag(0.25))) == 0.25

    def test_default_json_out(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        p = default_json_out(None, "/somewhere/ballquad.py", stem="case")
        assert p == tmp_path.joinpath("outputs", "case.json").relative_to(tmp_path)
        assert (tmp_path / "outputs").is_dir()
        assert default_json_out(None, "/x/ballquad.py").name == "ballquad.json"

    def test_explicit_json_out_creates_parents(self, tmp_path):
        p = default_json_out(str(tmp_path / "a" / "b.json"), "ballquad.py")
        assert p.parent.is_dir()

    def test_write_json_sorted(self, tmp_path):
        out = tmp_path / "x.json"
        write_json(out, {"b": 1, "a": {"d": 2, "c": 3}})
        text = out.read_text(encoding="utf-8")
        assert text.index('"a"') < text.index('"b"')
        assert json.loads(text) == {"a": {"c": 3, "d": 2}, "b": 1}

    def test_meta(self):
        meta = make_meta("/x/ballquad.py", description="d")
        assert meta["script"] == "ballquad.py"
        assert meta["description"] == "d"
        assert "python" in meta["run_env"]
        assert "description" not in make_meta("/x/ballquad.py")


class TestConsoleAndChecks:
    def test_console_show(self, capsys):
        console_show("integral", acb(1, 2))
        console_show("radius", Mag(0.5))
        console_show("ref", mp.mpf(2))
        out = capsys.readouterr().out
        assert "integral :" in out and "radius :" in out and "ref :" in out

    def test_ensure_finite(self):
        ensure_finite([("a", mp.mpf(1)), ("b", mp.mpc(1, 2))])
        with pytest.raises(TypeError):
            ensure_finite([("a", 1.0)])
        with pytest.raises(ValueError):
            ensure_finite([("a", mp.inf)])


@pytest.mark.usefixtures("restore_root_logger")
class TestLogging:
    def test_default_info(self, monkeypatch):
        monkeypatch.delenv("BALLQUAD_LOGGING", raising=False)
        assert configure_logging().level == logging.INFO

    def test_verbose_debug(self, monkeypatch):
        monkeypatch.delenv("BALLQUAD_LOGGING", raising=False)
        assert configure_logging(verbose=True).level == logging.DEBUG

    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv("BALLQUAD_LOGGING", "warning")
        assert configure_logging(verbose=True).level == logging.WARNING

    def test_unknown_level_falls_back(self, monkeypatch):
        monkeypatch.setenv("BALLQUAD_LOGGING", "chatty")
        assert configure_logging().level == logging.INFO

    def test_handler_added_once(self, monkeypatch):
        root = logging.getLogger()
        root.handlers[:] = []
        configure_logging()
        configure_logging()
        assert len(root.handlers) == 1
