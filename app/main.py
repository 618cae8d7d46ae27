from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query

from .analysis import AnalysisService
from .clients.finnhub import SymbolResolutionError
from .config import setup_logging

MIN_ISIN_LENGTH = 8


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    yield


app = FastAPI(title="Levermann Score", lifespan=lifespan)


def get_analysis_service() -> AnalysisService:
    return AnalysisService.from_settings()


# ──────────────────────────────────────────────
# JSONエンドポイント
# ──────────────────────────────────────────────

@app.get("/analysis")
async def analyse(
    isin: str | None = Query(None),
    service: AnalysisService = Depends(get_analysis_service),
):
    """ISINのレバーマンスコアをJSON形式で返す。"""
    isin = (isin or "").strip()
    if len(isin) < MIN_ISIN_LENGTH:
        raise HTTPException(status_code=400, detail="Please provide a valid ISIN.")

    try:
        result = await asyncio.to_thread(service.analyse_stock, isin)
    except SymbolResolutionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception("analysis failed [%s]", isin)
        raise HTTPException(status_code=400, detail="Error during analysis.") from exc
    return result.to_dict()


@app.get("/health")
async def health():
    return {"status": "ok"}
