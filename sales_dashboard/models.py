"""データモデル定義."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

Number = int | float

# スプレッドシート上のステータス表記（自由入力の文字列として扱う）
STATUS_COMPLETED = "取引完了"
STATUS_LISTED = "出品中"
STATUS_CARD_CREATED = "カード作成済"


@dataclass(frozen=True)
class ItemRecord:
    """スプレッドシート1行分の商品レコード."""

    id: str  # 商品ID（空の行は取り込まない）
    status: str
    source: str = ""  # 仕入先
    platform: str = ""  # 仕入プラットフォーム
    purchase_date: str | None = None  # YYYY-MM-DD
    title: str = ""
    color: str = ""
    category: str = ""
    gender: str = ""
    brand: str = ""
    size: str = ""
    selling_platform: str = ""
    condition: str = ""
    listed_date: str | None = None
    list_price: Number | None = None
    sold_date: str | None = None
    sold_price: Number | None = None
    fee: Number | None = None  # 販売手数料
    shipping_cost: Number | None = None
    net_amount: Number | None = None  # 入金額
    cost: Number | None = None  # 仕入価格
    tax: Number | None = None  # 仕入時の消費税
    photo_folder_url: str = ""
    created_date: str | None = None
    note: str = ""


@dataclass(frozen=True)
class MonthlyAggregate:
    """月別集計の1行."""

    month: str  # YYYY-MM
    sales: Number
    purchase: Number
    profit: Number
    profit_rate: int
    achievement_rate: int

    @property
    def label(self) -> str:
        """表示用の月ラベル (例: 2024年5月)."""
        year, month = self.month.split("-")[:2]
        return f"{year}年{int(month)}月"


@dataclass(frozen=True)
class SummaryTotals:
    """サマリーカードの集計値."""

    total_sales: Number
    total_profit: Number
    listed_count: int
    completed_count: int


class GoalState(str, Enum):
    ACHIEVED = "achieved"  # 目標達成
    PACING = "pacing"  # 残り日数あり
    MONTH_END = "month-end"  # 月末・未達


class AttainmentBand(str, Enum):
    MET = "met"
    ON_TRACK = "on-track"
    AT_RISK = "at-risk"
    CRITICAL = "critical"


@dataclass(frozen=True)
class GoalProgress:
    """当月の目標達成状況."""

    month: str  # YYYY-MM
    goal: Number
    current_sales: Number
    rate: int
    remaining: Number  # 目標までの残額（達成済みなら 0 以下）
    remaining_days: int
    daily_required: int
    state: GoalState
    band: AttainmentBand


@dataclass(frozen=True)
class InventoryStats:
    """在庫・滞留日数の集計値."""

    count: int
    amount: Number  # 仕入価格 + 消費税 の合計
    avg_days_on_market: int
    over_threshold: int
    warning_days: int
