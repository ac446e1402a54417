"""Tests for the ballquad CLI, the case runner and the JSON checker."""

import json

import mpmath as mp
import pytest

import ballquad
import quick_check
import run


def run_cli(tmp_path, *argv):
    out = tmp_path / "case.json"
    ballquad.main([*argv, "--json-out", str(out)])
    return json.loads(out.read_text(encoding="utf-8"))


@pytest.mark.usefixtures("restore_root_logger")
class TestBallquadCli:
    def test_reciprocal_with_reference(self, tmp_path, capsys):
        data = run_cli(tmp_path, "--integrand", "reciprocal", "--a", "1", "--b", "2",
                       "--goal", "20", "--reference")
        assert data["status"]["ok"] is True
        assert data["outputs"]["reference"]["contained"] is True
        assert data["inputs"]["a"] == {"real": "1", "imag": "0"}
        assert data["inputs"]["goal"] == 20
        assert mp.mpf(data["outputs"]["integral"]["radius"]) < mp.ldexp(1, -20)
        assert data["stats"]["evals"] > 1
        assert data["stats"]["stop_reason"] is None
        assert data["meta"]["script"] == "ballquad.py"
        assert "integral" in capsys.readouterr().out

    def test_complex_endpoint_and_rational_input(self, tmp_path):
        data = run_cli(tmp_path, "--integrand", "exp", "--a", "0", "--b", "1/2",
                       "--b-imag", "1/4", "--goal", "30", "--reference")
        assert data["inputs"]["b"] == {"real": "1/2", "imag": "1/4"}
        assert data["outputs"]["reference"]["contained"] is True

    def test_budget_stop_reported(self, tmp_path):
        data = run_cli(tmp_path, "--integrand", "abs_sin", "--a", "0", "--b", "10",
                       "--goal", "20", "--eval-limit", "50", "--reference")
        assert data["stats"]["stop_reason"] == "eval_limit"
        assert data["outputs"]["reference"]["contained"] is True

    def test_default_output_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        ballquad.main(["--integrand", "constant", "--a", "0", "--b", "3", "--case", "const"])
        data = json.loads((tmp_path / "outputs" / "const.json").read_text(encoding="utf-8"))
        assert data["outputs"]["integral"]["real"]["rad"].startswith("0")

    @pytest.mark.parametrize("argv", [
        ["--a", "1/0", "--b", "1"],
        ["--a", "x", "--b", "1"],
        ["--a", "0", "--b", "1", "--tol", "-1"],
        ["--a", "0", "--b", "1", "--prec", "1"],
    ])
    def test_bad_inputs_exit(self, tmp_path, argv):
        with pytest.raises(SystemExit):
            ballquad.main(["--integrand", "exp", *argv, "--json-out", str(tmp_path / "x.json")])

    def test_unknown_integrand_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            ballquad.build_parser().parse_args(["--integrand", "tan", "--a", "0", "--b", "1"])


class TestRunner:
    def test_build_args(self):
        argv = run.build_args("identity")
        assert argv[:2] == ["--integrand", "identity"]
        assert "--reference" in argv
        assert argv[argv.index("--case") + 1] == "identity"
        assert argv[argv.index("--json-out") + 1] == str(run.jpath("identity"))

    def test_unknown_case(self):
        with pytest.raises(SystemExit):
            run.build_args("no_such_case")

    def test_usage(self, capsys):
        assert run.main([]) == 2
        assert run.main(["identity", "--bogus"]) == 2
        assert "Usage" in capsys.readouterr().out

    def test_every_case_has_known_integrand(self):
        for case in run.CONFIG["cases"].values():
            assert case["args"]["--integrand"] in ballquad.integrands.INTEGRANDS

    def test_exists(self, tmp_path):
        p = tmp_path / "a.json"
        assert not run.exists(p)
        p.write_text("{}")
        assert run.exists(p)


def integral_payload(mid, rad, contained=True):
    return {"outputs": {
        "integral": {"real": {"mid": mid, "rad": rad}, "radius": rad, "str": f"[{mid} +/- {rad}]"},
        "reference": {"decimal": {"real": mid, "imag": "0"}, "contained": contained},
    }}


class TestQuickCheck:
    SPEC = {"expect": {"real": "1/2", "radius_below_bits": 10}}

    def test_passing_case(self):
        assert quick_check.check_case("c", self.SPEC, integral_payload("0.5", "1e-6")) == []

    def test_value_outside_ball(self):
        fails = quick_check.check_case("c", self.SPEC, integral_payload("0.6", "1e-6"))
        assert any("not inside" in f for f in fails)

    def test_radius_too_large(self):
        fails = quick_check.check_case("c", self.SPEC, integral_payload("0.5", "0.01"))
        assert any("radius" in f for f in fails)

    def test_reference_not_contained(self):
        fails = quick_check.check_case("c", {}, integral_payload("0.5", "1e-6", contained=False))
        assert len(fails) == 1

    def test_closed_form(self):
        assert mp.almosteq(quick_check.expected_value("log2"), mp.log(2))
        assert quick_check.expected_value("3/4") == mp.mpf(0.75)

    @pytest.mark.usefixtures("restore_root_logger")
    def test_cli_output_passes_check(self, tmp_path):
        argv = run.build_args("identity")
        argv[argv.index("--json-out") + 1] = str(tmp_path / "identity.json")
        ballquad.main(argv)
        data = json.loads((tmp_path / "identity.json").read_text(encoding="utf-8"))
        assert quick_check.check_case("identity", run.CONFIG["cases"]["identity"], data) == []
