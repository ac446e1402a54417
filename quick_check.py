# quick_check.py
import json, sys
from fractions import Fraction

import mpmath as mp

from run import CONFIG, jpath

mp.mp.dps = 50
CLOSED_FORMS = {"log2": lambda: mp.log(2)}

def expected_value(tag: str) -> mp.mpf:
    if tag in CLOSED_FORMS:
        return CLOSED_FORMS[tag]()
    fr = Fraction(tag)
    return mp.mpf(fr.numerator) / fr.denominator

def check_case(name: str, spec: dict, data: dict) -> list[str]:
    """Return a list of failure messages for one case (empty on success)."""
    fails = []
    integral = data["outputs"]["integral"]
    mid = mp.mpf(integral["real"]["mid"])
    rad = mp.mpf(integral["real"]["rad"])
    ref = data["outputs"].get("reference")
    if ref is not None and ref["contained"] is not True:
        fails.append(f"{name}: reference {ref['decimal']['real']} not inside {integral['str']}")
    expect = spec.get("expect", {})
    if "real" in expect:
        true = expected_value(expect["real"])
        # generous slack for the decimal rendering of mid/rad
        if abs(mid - true) > rad * (1 + mp.mpf("1e-4")) + mp.mpf("1e-38"):
            fails.append(f"{name}: {expect['real']} ≈ {mp.nstr(true, 20)} not inside {integral['str']}")
    if "radius_below_bits" in expect:
        bound = mp.ldexp(1, -int(expect["radius_below_bits"]))
        if integral["radius"] == "inf" or mp.mpf(integral["radius"]) >= bound:
            fails.append(f"{name}: radius {integral['radius']} ≥ 2^-{expect['radius_below_bits']}")
    return fails

def main() -> int:
    ok = True
    for name, spec in CONFIG["cases"].items():
        f = jpath(name)
        if not f.exists():
            print("MISSING", f); ok = False; continue
        data = json.loads(f.read_text())
        for msg in check_case(name, spec, data):
            print("FAIL", msg); ok = False
    print("ALL PASS" if ok else "SOME FAIL")
    return 0 if ok else 1

if __name__ == "__main__":
    sys.exit(main())
