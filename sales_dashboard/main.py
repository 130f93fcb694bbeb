"""販売管理ダッシュボード — メインエントリーポイント.

処理フロー:
  1. スプレッドシートから全商品レコードを取得
  2. サマリー（総売上・総利益・件数）を集計
  3. 当月の目標達成状況を計算
  4. 在庫金額・滞留日数を集計
  5. 月別の売上・仕入・利益を集計
  6. 商品一覧の先頭ページ（商品ID降順）を出力
"""

from __future__ import annotations

import logging
import sys
import time
from datetime import datetime

from sales_dashboard.config import LOG_DIR, MONTHLY_GOAL, WARNING_DAYS
from sales_dashboard.metrics import (
    attainment_band,
    compute_goal_progress,
    compute_inventory_stats,
    compute_monthly,
    compute_summary,
    item_profit,
)
from sales_dashboard.models import GoalState
from sales_dashboard.sheets import SheetFetchError, fetch_items
from sales_dashboard.table import TableState, build_table


def setup_logging() -> None:
    """ロギングの初期設定."""
    log_file = LOG_DIR / f"dashboard_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def format_yen(value: float | None) -> str:
    """金額を ¥1,234 形式にする. 不明な値は "-"."""
    if value is None:
        return "-"
    return f"¥{value:,.0f}"


def run(now: datetime | None = None) -> int:
    """メイン処理. 終了コードを返す."""
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("=== ダッシュボード集計 開始 ===")
    start_time = time.time()
    now = now or datetime.now()

    # 1. スプレッドシートから取得
    try:
        items = fetch_items()
    except SheetFetchError as e:
        logger.error("データの取得に失敗しました: %s", e)
        return 1

    if not items:
        logger.warning("商品データがありません。終了します。")
        return 0

    # 2. サマリー
    summary = compute_summary(items)
    logger.info(
        "総売上: %s, 総利益: %s, 出品中: %d 件, 取引完了: %d 件",
        format_yen(summary.total_sales), format_yen(summary.total_profit),
        summary.listed_count, summary.completed_count,
    )

    # 3. 当月の目標達成状況
    goal = compute_goal_progress(items, now, MONTHLY_GOAL)
    logger.info(
        "%d年%d月の目標: %s, 現在: %s (%d%%, %s)",
        now.year, now.month, format_yen(goal.goal), format_yen(goal.current_sales),
        goal.rate, goal.band.value,
    )
    if goal.state is GoalState.ACHIEVED:
        logger.info("  目標達成!")
    elif goal.state is GoalState.PACING:
        logger.info("  残り%d日 → 1日あたり %s 必要",
                    goal.remaining_days, format_yen(goal.daily_required))
    else:
        logger.info("  月末です")

    # 4. 在庫・滞留
    stock = compute_inventory_stats(items, now, WARNING_DAYS)
    logger.info(
        "在庫: %d 件, 在庫金額: %s, 平均出品日数: %d 日, %d 日以上: %d 件",
        stock.count, format_yen(stock.amount), stock.avg_days_on_market,
        stock.warning_days, stock.over_threshold,
    )

    # 5. 月別集計
    monthly = compute_monthly(items, MONTHLY_GOAL)
    if not monthly:
        logger.info("取引完了データがありません")
    for row in monthly:
        logger.info(
            "  %s 売上=%s 仕入=%s 利益=%s 利益率=%d%% 目標達成率=%d%% (%s)",
            row.label, format_yen(row.sales), format_yen(row.purchase),
            format_yen(row.profit), row.profit_rate, row.achievement_rate,
            attainment_band(row.achievement_rate).value,
        )

    # 6. 商品一覧（先頭ページ）
    page = build_table(items, TableState())
    logger.info("商品一覧: %d件中 %d〜%d件を表示", page.total, page.first, page.last)
    for item in page.rows:
        logger.info(
            "  %s %s [%s] 出品=%s 売却=%s 利益=%s",
            item.id, item.title, item.status, format_yen(item.list_price),
            format_yen(item.sold_price), format_yen(item_profit(item)),
        )

    elapsed = time.time() - start_time
    logger.info("=== ダッシュボード集計 完了 (%.1f 秒) ===", elapsed)
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
