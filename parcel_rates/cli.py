"""
包裹运价 CLI

所有命令输出结构化 JSON，方便脚本与 Agent 解析结果。

用法:
    python -m parcel_rates.cli rates --action services
    python -m parcel_rates.cli rates --action quote --country CA --postal-code "K1A 0B1" --items-file order.json
    python -m parcel_rates.cli rates --action quote --country US --postal-code 10001 --item 2.5,12,10,4,2
    python -m parcel_rates.cli rates --action plan --weight 25 --dims 120 60 50 --max-weight 20000
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from parcel_rates.modules.rates.models import OrderItem


def _json_out(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _load_items(args: argparse.Namespace) -> list[OrderItem]:
    items: list[OrderItem] = []
    if args.items_file:
        raw = json.loads(Path(args.items_file).read_text(encoding="utf-8"))
        if isinstance(raw, dict):
            raw = raw.get("items", [])
        items.extend(OrderItem.from_dict(entry) for entry in raw if isinstance(entry, dict))

    for raw_item in args.item or []:
        parts = [part.strip() for part in raw_item.split(",")]
        if len(parts) < 4:
            raise ValueError(f"--item expects weight,length,width,height[,quantity], got: {raw_item}")
        items.append(
            OrderItem.from_dict(
                {
                    "weight": parts[0],
                    "length": parts[1],
                    "width": parts[2],
                    "height": parts[3],
                    "quantity": parts[4] if len(parts) > 4 else 1,
                }
            )
        )
    return items


def _split_codes(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    return [code.strip() for code in raw.split(",") if code.strip()]


async def cmd_rates(args: argparse.Namespace) -> None:
    from parcel_rates.core.config import get_config
    from parcel_rates.core.logger import get_logger
    from parcel_rates.modules.rates import (
        Address,
        NormalizedParcel,
        ParcelPlanner,
        QuoteAggregator,
        RestrictionSet,
        ShippingRequest,
    )
    from parcel_rates.modules.rates.models import to_decimal

    action = args.action

    if action == "plan":
        if args.weight is None or not args.dims:
            _json_out({"error": "Specify --weight and --dims"})
            return
        length, width, height = sorted((to_decimal(v) for v in args.dims), reverse=True)
        parcel = NormalizedParcel(weight=to_decimal(args.weight), length=length, width=width, height=height)
        restrictions = RestrictionSet(
            max_weight=args.max_weight,
            max_length=args.max_length,
            max_width=args.max_width,
            max_height=args.max_height,
            max_girth=args.max_girth,
            max_dimension_sum=args.max_dimension_sum,
        )
        planner = ParcelPlanner()
        plan = planner.plan(parcel, restrictions)
        _json_out(
            {
                "parcel_count": plan.parcel_count,
                "per_parcel": {
                    "weight_kg": str(plan.weight),
                    "length_cm": str(plan.length),
                    "width_cm": str(plan.width),
                    "height_cm": str(plan.height),
                },
                "constraint_counts": planner.constraint_counts(parcel, restrictions),
            }
        )
        return

    config = get_config(args.config_path)
    get_logger().configure(config.app)
    aggregator = QuoteAggregator.from_config({"carrier": config.carrier, "store": config.store})

    if action == "services":
        result = await aggregator.list_available_services()
        if not result.ok:
            _json_out({"error": result.error.to_dict()})
            return
        selected = set(aggregator.settings.selected_services)
        _json_out(
            {
                "total": len(result.value),
                "services": [
                    {"code": s.code, "name": s.name, "selected": s.code in selected} for s in result.value
                ],
            }
        )
        return

    if action == "quote":
        request = ShippingRequest(
            origin_postal_code=args.origin_postal_code or config.get("store.origin_postal_code", ""),
            shipping_address=Address(country_code=args.country, zip_postal_code=args.postal_code),
            items=_load_items(args),
        )
        response = await aggregator.aggregate(request, selected_services=_split_codes(args.services))
        _json_out(response.to_dict())
        return

    _json_out({"error": f"Unknown rates action: {action}"})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parcel-rates",
        description="Canada Post 包裹运价计算",
    )
    sub = parser.add_subparsers(dest="command", help="可用命令")

    p = sub.add_parser("rates", help="运价查询与包裹拆分")
    p.add_argument("--action", required=True, choices=["quote", "services", "plan"])
    p.add_argument("--config-path", default=None, help="配置文件路径")
    p.add_argument("--origin-postal-code", default=None, help="发货邮编，默认取 store.origin_postal_code")
    p.add_argument("--country", default=None, help="收件国家代码（ISO 两位）")
    p.add_argument("--postal-code", default=None, help="收件邮编 / ZIP")
    p.add_argument("--items-file", default=None, help="订单商品 JSON 文件")
    p.add_argument("--item", action="append", help="商品 weight,length,width,height[,quantity]，可重复")
    p.add_argument("--services", default=None, help="询价服务代码，逗号分隔，默认取配置")
    p.add_argument("--weight", type=float, default=None, help="整单重量 kg（plan）")
    p.add_argument("--dims", type=float, nargs=3, default=None, metavar=("L", "W", "H"), help="三边 cm（plan）")
    p.add_argument("--max-weight", type=float, default=None, help="最大重量 g（plan）")
    p.add_argument("--max-length", type=float, default=None, help="最大长度 cm（plan）")
    p.add_argument("--max-width", type=float, default=None, help="最大宽度 cm（plan）")
    p.add_argument("--max-height", type=float, default=None, help="最大高度 cm（plan）")
    p.add_argument("--max-girth", type=float, default=None, help="最大长+周长 cm（plan）")
    p.add_argument("--max-dimension-sum", type=float, default=None, help="最大三边和 cm（plan）")

    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    dispatch = {
        "rates": cmd_rates,
    }

    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        asyncio.run(handler(args))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        _json_out({"error": str(e)})
        sys.exit(1)


if __name__ == "__main__":
    main()
