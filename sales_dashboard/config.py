"""設定モジュール — 環境変数・定数定義."""

import os
from pathlib import Path

from dotenv import load_dotenv

# .env・logs の置き場所（未指定ならカレントディレクトリ）
PROJECT_ROOT = Path(os.getenv("SALES_DASHBOARD_HOME") or Path.cwd()).resolve()
load_dotenv(PROJECT_ROOT / ".env")

# --- Google スプレッドシート ---
SHEET_ID: str = os.getenv("SHEET_ID", "")
SHEET_NAME: str = os.getenv("SHEET_NAME", "")
GVIZ_URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:json"

# --- リクエスト設定 ---
REQUEST_TIMEOUT = 15  # 秒

# --- ダッシュボード ---
MONTHLY_GOAL = int(os.getenv("MONTHLY_GOAL", "300000"))  # 円
WARNING_DAYS = int(os.getenv("WARNING_DAYS", "30"))  # 出品からの滞留警告日数

# --- ログ ---
LOG_DIR = Path(os.getenv("LOG_DIR") or PROJECT_ROOT / "logs")
LOG_DIR.mkdir(parents=True, exist_ok=True)
