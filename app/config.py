import logging
import sys
from pathlib import Path

from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).parent.parent


class Settings(BaseSettings):
    finnhub_api_key: str = ""
    alpha_vantage_api_key: str = ""
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    alpha_vantage_base_url: str = "https://www.alphavantage.co/query"
    http_timeout: float = 30.0
    fetch_workers: int = 6
    log_level: str = "INFO"

    class Config:
        env_file = str(BASE_DIR / ".env")


settings = Settings()


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        stream=sys.stdout,
        format="%(asctime)s %(levelname)s %(message)s",
    )


def load_watchlist(path: Path | None = None) -> list[str]:
    """watchlist.txtからISIN一覧を読み込む。
    - 行末コメント（#以降）を除去
    - 大文字に正規化
    - 重複排除（出現順を維持）
    """
    path = path or BASE_DIR / "watchlist.txt"
    if not path.exists():
        return []
    seen: set[str] = set()
    isins: list[str] = []
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.split("#", 1)[0].strip().upper()
        if line and line not in seen:
            seen.add(line)
            isins.append(line)
    return isins
