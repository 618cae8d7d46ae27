"""ウォッチリスト（またはコマンドライン引数）のISINをまとめて採点する。

  python batch.py                 # watchlist.txt の全ISIN
  python batch.py DE0007164600    # 指定したISINのみ

結果は1銘柄1行のJSONで標準出力に書き出す。
"""
from __future__ import annotations

import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed

from dotenv import load_dotenv

from app.analysis import AnalysisService
from app.clients.finnhub import SymbolResolutionError
from app.config import load_watchlist, settings, setup_logging

# 銘柄単位の並列数（銘柄内でも6本並列で叩くため控えめに設定）
MAX_WORKERS = 2


def run(isins: list[str], service: AnalysisService, out=None) -> tuple[int, int]:
    """各ISINを採点して結果を書き出す。(成功数, 失敗数) を返す。"""
    out = out or sys.stdout
    success_count = 0
    error_count = 0
    with ThreadPoolExecutor(max_workers=MAX_WORKERS, thread_name_prefix="isin-worker") as executor:
        futures = {executor.submit(service.analyse_stock, isin): isin for isin in isins}
        for future in as_completed(futures):
            isin = futures[future]
            try:
                result = future.result()
            except SymbolResolutionError as exc:
                error_count += 1
                logging.error("  %s: %s", isin, exc)
                continue
            except Exception:
                error_count += 1
                logging.exception("  %s: analysis failed (continuing)", isin)
                continue
            out.write(json.dumps(result.to_dict(), ensure_ascii=False) + "\n")
            success_count += 1
    return success_count, error_count


def main(argv: list[str] | None = None) -> int:
    load_dotenv(override=True)
    setup_logging()

    isins = [a.strip().upper() for a in (argv if argv is not None else sys.argv[1:]) if a.strip()]
    if not isins:
        isins = load_watchlist()
    logging.info("ISINs loaded: %d", len(isins))
    if not isins:
        logging.warning("nothing to analyse (no arguments and watchlist.txt empty)")
        return 0

    service = AnalysisService.from_settings(settings)
    success_count, error_count = run(isins, service)
    logging.info("batch finished: success=%d error=%d", success_count, error_count)
    return 0 if error_count == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
