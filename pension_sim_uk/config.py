"""TOML config loader with CLI > config > default resolution."""

import argparse
import dataclasses
import sys
import tomllib
from decimal import Decimal, InvalidOperation
from pathlib import Path

from pension_sim_uk.params import DEFAULT_RULES, TaxRuleSet

DEFAULT_CONFIG_PATH = Path("config.toml")

DEFAULTS = {
    "savings": "74000.00",
    "pension": "425000.00",
    "required": "23000.00",
    "required_amounts": "20000,23000,26000",
    "target_ages": "",
    "adhoc_withdrawals": "",
    "no_contribution": False,
}

# [rules] keys that hold money or rates (the rest are ages)
_DECIMAL_RULES = {
    f.name for f in dataclasses.fields(TaxRuleSet) if f.type in (Decimal, "Decimal")
}
_INT_RULES = {f.name for f in dataclasses.fields(TaxRuleSet)} - _DECIMAL_RULES


def _join(values: list) -> str:
    return ",".join(str(v) for v in values)


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Failed to read config file {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    # Normalize lists → CLI-compatible strings
    for key in ("required_amounts", "target_ages"):
        if isinstance(raw.get(key), list):
            raw[key] = _join(raw[key])
    # adhoc_withdrawals: [[62, 5000], [70, 10000]] → "62:5000,70:10000"
    if "adhoc_withdrawals" in raw:
        v = raw["adhoc_withdrawals"]
        if isinstance(v, list):
            raw["adhoc_withdrawals"] = ",".join(f"{int(pair[0])}:{pair[1]}" for pair in v)
        elif isinstance(v, dict):
            raw["adhoc_withdrawals"] = ",".join(f"{int(age)}:{amount}" for age, amount in v.items())
    for key in ("savings", "pension", "required"):
        if key in raw and not isinstance(raw[key], str):
            raw[key] = str(raw[key])
    return raw


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared simulation flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="Config file path (default: config.toml)")
    parser.add_argument("--savings", type=str, default=None, help=f"Starting savings (default: {d['savings']})")
    parser.add_argument("--pension", type=str, default=None, help=f"Starting pension pot (default: {d['pension']})")
    parser.add_argument("--required", type=str, default=None, help=f"Required net income per year (default: {d['required']})")
    parser.add_argument("--required-amounts", type=str, default=None, help=f"Comma-separated spending levels to compare (default: {d['required_amounts']})")
    parser.add_argument("--target-ages", type=str, default=None, help="Comma-separated ages to tabulate (default: end age)")
    parser.add_argument("--adhoc-withdrawals", type=str, default=None, help="Extra one-off spending as age:amount, e.g. 62:5000,70:10000")
    parser.add_argument("--no-contribution", action="store_true", default=None, help="Strategy 3A: skip the annual pension contribution")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def parse_money(s: str, name: str) -> Decimal:
    try:
        value = Decimal(str(s).strip().replace("£", "").replace("_", ""))
    except InvalidOperation:
        raise ValueError(f"{name}: not a number: {s!r}") from None
    if not value.is_finite():
        raise ValueError(f"{name} must be a finite number")
    return value


def parse_amounts(s: str) -> list[Decimal]:
    """Parse "20000,23000" → [Decimal("20000"), Decimal("23000")]."""
    if not s or not str(s).strip():
        return []
    return [parse_money(x, "required_amounts") for x in str(s).split(",") if x.strip()]


def parse_ages(s: str) -> list[int]:
    """Parse "70,80,99" → [70, 80, 99]. Empty → []."""
    if not s or not str(s).strip():
        return []
    return [int(x) for x in str(s).split(",") if x.strip()]


def parse_adhoc_withdrawals(s: str) -> dict[int, Decimal]:
    """Parse ad hoc withdrawals "age:amount,..." → {age: amount}.

    Semicolons are accepted as separators too. Repeated ages are summed.
    """
    if not s or not s.strip():
        return {}
    result: dict[int, Decimal] = {}
    for pair in s.replace(";", ",").split(","):
        pair = pair.strip()
        if not pair:
            continue
        parts = pair.split(":")
        if len(parts) != 2:
            raise ValueError(f"ad hoc withdrawal must be age:amount, got {pair!r}")
        age = int(parts[0].strip())
        amount = parse_money(parts[1], f"ad hoc withdrawal for age {age}")
        result[age] = result.get(age, Decimal("0")) + amount
    return result


def build_rules(config: dict) -> TaxRuleSet:
    """Build TaxRuleSet from the [rules] table, falling back to defaults."""
    overrides = config.get("rules", {})
    unknown = set(overrides) - _DECIMAL_RULES - _INT_RULES
    if unknown:
        raise ValueError(f"Unknown [rules] keys: {', '.join(sorted(unknown))}")
    values = {}
    for key, v in overrides.items():
        values[key] = parse_money(v, key) if key in _DECIMAL_RULES else int(v)
    return dataclasses.replace(DEFAULT_RULES, **values)


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def parse_args(description: str, add_args_fn=None) -> tuple[dict, TaxRuleSet, argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_dict, rules, namespace).
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args()
    config = load_config(args.config)
    try:
        rules = build_rules(config)
    except (TypeError, ValueError) as e:
        parser.error(str(e))
    return resolve(args, config), rules, args
