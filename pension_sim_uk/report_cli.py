"""CLI entry point for the HTML strategy comparison report."""

import sys
from pathlib import Path

from pension_sim_uk import log_config
from pension_sim_uk.config import (
    build_rules,
    create_parser,
    load_config,
    parse_adhoc_withdrawals,
    parse_ages,
    parse_amounts,
    parse_money,
    resolve,
)
from pension_sim_uk.report import build_report_context, render_report, save_report


def _build_parser():
    parser = create_parser("Pension strategy comparison report")
    parser.add_argument(
        "--output", type=Path, default=Path("reports"),
        help="Report output directory (default: reports)",
    )
    return parser


def main():
    parser = _build_parser()
    args = parser.parse_args()
    log_config.setup(verbose=args.verbose)
    config = load_config(args.config)
    r = resolve(args, config)

    try:
        rules = build_rules(config)
        amounts = parse_amounts(r["required_amounts"])
        if not amounts:
            parser.error("--required-amounts must list at least one amount")
        print(f"Comparing 6 strategies × {len(amounts)} spending levels...", file=sys.stderr)
        ctx = build_report_context(
            savings=parse_money(r["savings"], "savings"),
            pension=parse_money(r["pension"], "pension"),
            required_amounts=amounts,
            target_ages=parse_ages(r["target_ages"]),
            adhoc_withdrawals=parse_adhoc_withdrawals(r["adhoc_withdrawals"]),
            rules=rules,
            contribute=not r["no_contribution"],
        )
    except (TypeError, ValueError) as e:
        parser.error(str(e))

    path = save_report(render_report(ctx), args.output)
    print(f"  → {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
