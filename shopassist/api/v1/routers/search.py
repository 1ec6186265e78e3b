# shopassist/api/v1/routers/search.py
from fastapi import APIRouter, Depends
import time
import logging

from shopassist.api.deps import assistant_dep
from shopassist.api.v1.schemas.assistant import SearchTextIn, SearchTextOut
from shopassist.domain.services.assistant_svc import Assistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


@router.post("/text", response_model=SearchTextOut)
async def search_text(body: SearchTextIn, assistant: Assistant = Depends(assistant_dep)):
    """
    Scored text search over the current catalog snapshot.
    Filters are a hard gate; at most 50 results, best first, confidence in [0, 1].
    """
    logger.info("Request: search_text query=%r filters=%s", body.query, body.filters)
    start_time = time.perf_counter()

    results = await assistant.search.search_by_text(body.query, body.filters)

    logger.info(
        "Response: search_text count=%s elapsed_time=%.4fs",
        len(results), time.perf_counter() - start_time,
    )
    return SearchTextOut(results=results, count=len(results))
