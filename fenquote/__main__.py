"""
Fenquote - CLI Entry Point

Commands:
    price    - Price a stored quote (JSON or YAML)
    grid     - Lay out a curtain wall and print its aggregates
    presets  - List curtain-wall presets
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from .curtain_wall import load_presets, run_curtain_wall_layout
from .pricing import run_pricing_engine


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _read_quote(path: Path) -> dict:
    with open(path, "r") as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(f) or {}
        return json.load(f)


def cmd_price(args):
    """Price a quote file."""
    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Input not found: {input_path}")
        return 1

    try:
        result = run_pricing_engine(_read_quote(input_path), args.rules)
    except ValidationError as e:
        print(f"Invalid quote: {e}")
        return 1

    if args.json:
        print(json.dumps(result, indent=2))
        return 0

    totals = result["totals"]
    print(f"\nQuote {result['quote_id']}")
    print(f"{'='*60}")
    for item in result["items"]:
        label = f"{item['item_type']} ({item['system']}) x{item['quantity']}"
        print(f"  {label:<36} {item['area']:>8.2f} m2 {item['total_price']:>12,.2f}")
        for warning in item["warnings"]:
            print(f"      ! {warning}")
    print(f"{'-'*60}")
    print(f"Total area:        {totals['total_area']:.2f} m2")
    print(f"Before profit:     {totals['total_before_profit']:,.2f}")
    print(f"Total:             {totals['total_price']:,.2f}")
    if totals["discount_percentage"]:
        print(f"Discount ({totals['discount_percentage']}%): -{totals['discount_amount']:,.2f}")
    print(f"Quote total:       {totals['discounted_total']:,.2f}")
    print(f"Profit:            {totals['total_profit']:,.2f} ({totals['profit_percentage']:.1f}%)")
    print(f"Price per m2:      {totals['m2_price']:,.2f}")
    print(f"Down payment:      {totals['down_payment']:,.2f}")
    print(f"On supply:         {totals['supply_payment']:,.2f}")
    print(f"On completion:     {totals['completion_payment']:,.2f}")
    return 0


def cmd_grid(args):
    """Lay out a curtain wall."""
    try:
        design = run_curtain_wall_layout(
            args.width, args.height, args.columns, args.rows,
            preset_name=args.preset,
        )
    except (KeyError, ValueError) as e:
        print(f"Layout failed: {e}")
        return 1

    if args.json:
        print(json.dumps(design, indent=2))
        return 0

    print(f"Grid: {design['columns']}x{design['rows']} on {design['wallWidth']}x{design['wallHeight']}m")
    print(f"Frame meters:  {design['frameMeters']:.2f}")
    print(f"Window meters: {design['windowMeters']:.2f}")
    print(f"Glass area:    {design['glassArea']:.2f} m2")
    print(f"Corners:       {design['cornerCount']}")
    return 0


def cmd_presets(args):
    """List presets."""
    for preset in load_presets().values():
        print(f"{preset.name:<18} {preset.columns}x{preset.rows}  {preset.description}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="fenquote",
        description="Aluminum fenestration pricing & curtain-wall layout",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    p_price = sub.add_parser("price", help="Price a quote file")
    p_price.add_argument("input", help="Quote JSON/YAML")
    p_price.add_argument("--rules", type=Path, default=None, help="Pricing rules YAML")
    p_price.add_argument("--json", action="store_true", help="Print JSON")
    p_price.set_defaults(func=cmd_price)

    p_grid = sub.add_parser("grid", help="Curtain-wall layout aggregates")
    p_grid.add_argument("--width", type=float, required=True, help="Wall width (m)")
    p_grid.add_argument("--height", type=float, required=True, help="Wall height (m)")
    p_grid.add_argument("--columns", type=int, default=4)
    p_grid.add_argument("--rows", type=int, default=3)
    p_grid.add_argument("--preset", default=None, help="Preset name")
    p_grid.add_argument("--json", action="store_true", help="Print design data JSON")
    p_grid.set_defaults(func=cmd_grid)

    p_presets = sub.add_parser("presets", help="List curtain-wall presets")
    p_presets.set_defaults(func=cmd_presets)

    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
