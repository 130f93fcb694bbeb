"""売上・利益・目標達成・在庫滞留の集計モジュール.

全関数は ItemRecord のリストと明示的に渡された引数（基準日・月間目標・
警告日数）だけから結果を計算する。I/O や内部状態は持たない。
"""

from __future__ import annotations

import calendar
import math
from collections import defaultdict
from datetime import date, datetime
from typing import Iterable

from sales_dashboard.models import (
    STATUS_CARD_CREATED,
    STATUS_COMPLETED,
    STATUS_LISTED,
    AttainmentBand,
    GoalProgress,
    GoalState,
    InventoryStats,
    ItemRecord,
    MonthlyAggregate,
    Number,
    SummaryTotals,
)

INVENTORY_STATUSES = (STATUS_LISTED, STATUS_CARD_CREATED)


def round_half_up(value: float) -> int:
    """0.5 を正の無限大方向に丸める（ダッシュボード表示と同じ丸め）."""
    return math.floor(value + 0.5)


def _as_date(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _month_key(iso_date: str) -> str:
    return iso_date[:7]


def item_profit(item: ItemRecord) -> Number | None:
    """商品1件の利益 = 入金額 - 仕入価格 - 消費税.

    入金額か仕入価格のどちらかが欠けている場合は None（不明）。
    """
    if item.net_amount is None or item.cost is None:
        return None
    return item.net_amount - item.cost - (item.tax or 0)


def is_completed(item: ItemRecord) -> bool:
    return item.status == STATUS_COMPLETED


def compute_summary(items: Iterable[ItemRecord]) -> SummaryTotals:
    """サマリーカード用の総売上・総利益・件数を集計する."""
    total_sales: Number = 0
    total_profit: Number = 0
    listed = 0
    completed = 0

    for item in items:
        if item.status == STATUS_LISTED:
            listed += 1
        if not is_completed(item):
            continue
        completed += 1
        total_sales += item.sold_price or 0
        profit = item_profit(item)
        if profit is not None:
            total_profit += profit

    return SummaryTotals(
        total_sales=total_sales,
        total_profit=total_profit,
        listed_count=listed,
        completed_count=completed,
    )


def compute_monthly(items: list[ItemRecord], monthly_goal: Number) -> list[MonthlyAggregate]:
    """月別の売上・仕入・利益を集計する.

    売上・利益は取引完了かつ売却日ありの商品を売却月で、
    仕入は仕入日ありの全商品を仕入月で集計する。
    """
    sales: dict[str, Number] = defaultdict(int)
    profit: dict[str, Number] = defaultdict(int)
    purchase: dict[str, Number] = defaultdict(int)

    for item in items:
        if not is_completed(item) or not item.sold_date:
            continue
        key = _month_key(item.sold_date)
        sales[key] += item.sold_price or 0
        p = item_profit(item)
        profit[key] += p if p is not None else 0

    for item in items:
        if not item.purchase_date:
            continue
        key = _month_key(item.purchase_date)
        purchase[key] += (item.cost or 0) + (item.tax or 0)

    rows: list[MonthlyAggregate] = []
    for key in sorted(set(sales) | set(purchase)):
        s = sales.get(key, 0)
        pr = profit.get(key, 0)
        rows.append(MonthlyAggregate(
            month=key,
            sales=s,
            purchase=purchase.get(key, 0),
            profit=pr,
            profit_rate=round_half_up(pr / s * 100) if s else 0,
            achievement_rate=round_half_up(s / monthly_goal * 100) if s and monthly_goal else 0,
        ))
    return rows


def attainment_band(rate: Number) -> AttainmentBand:
    """達成率から表示色の区分を決める."""
    if rate >= 100:
        return AttainmentBand.MET
    if rate >= 71:
        return AttainmentBand.ON_TRACK
    if rate >= 31:
        return AttainmentBand.AT_RISK
    return AttainmentBand.CRITICAL


def compute_goal_progress(
    items: Iterable[ItemRecord], today: date, monthly_goal: Number
) -> GoalProgress:
    """当月の目標達成状況と残り日数あたりの必要売上を計算する.

    Args:
        items: 全商品レコード
        today: 基準日（datetime も可）
        monthly_goal: 月間目標売上（円）
    """
    today = _as_date(today)
    month = f"{today.year}-{today.month:02d}"

    current_sales: Number = sum(
        item.sold_price or 0
        for item in items
        if is_completed(item) and item.sold_date and _month_key(item.sold_date) == month
    )
    rate = round_half_up(current_sales / monthly_goal * 100) if monthly_goal else 0

    last_day = calendar.monthrange(today.year, today.month)[1]
    remaining_days = max(0, last_day - today.day)
    remaining = monthly_goal - current_sales
    daily_required = math.ceil(remaining / remaining_days) if remaining_days > 0 else 0

    if remaining <= 0:
        state = GoalState.ACHIEVED
    elif remaining_days > 0:
        state = GoalState.PACING
    else:
        state = GoalState.MONTH_END

    return GoalProgress(
        month=month,
        goal=monthly_goal,
        current_sales=current_sales,
        rate=rate,
        remaining=remaining,
        remaining_days=remaining_days,
        daily_required=daily_required,
        state=state,
        band=attainment_band(rate),
    )


def days_on_market(item: ItemRecord, today: date) -> int | None:
    """出品中の商品の出品日からの経過日数. 出品日がなければ None."""
    if item.status != STATUS_LISTED or not item.listed_date:
        return None
    try:
        listed = date.fromisoformat(item.listed_date)
    except ValueError:
        return None
    return (_as_date(today) - listed).days


def compute_inventory_stats(
    items: Iterable[ItemRecord], today: date, warning_days: int
) -> InventoryStats:
    """在庫件数・在庫金額・平均滞留日数・警告件数を集計する.

    在庫金額は仕入価格 + 消費税の合計で、欠損値は 0 として足す。
    """
    inventory = [item for item in items if item.status in INVENTORY_STATUSES]
    amount: Number = sum((item.cost or 0) + (item.tax or 0) for item in inventory)

    days = [d for d in (days_on_market(item, today) for item in inventory) if d is not None]
    avg = round_half_up(sum(days) / len(days)) if days else 0
    over = sum(1 for d in days if d >= warning_days)

    return InventoryStats(
        count=len(inventory),
        amount=amount,
        avg_days_on_market=avg,
        over_threshold=over,
        warning_days=warning_days,
    )
