"""Website registration API routes."""

from fastapi import APIRouter, Depends, Request, Response, status

from uptime_monitor.api.dependencies import get_aggregator, get_store
from uptime_monitor.core.aggregator import UptimeAggregator
from uptime_monitor.core.exceptions import NotFoundError
from uptime_monitor.core.rate_limiter import limiter
from uptime_monitor.core.store import UptimeStore
from uptime_monitor.schemas.website import (
    WebsiteCreate,
    WebsiteResponse,
    WebsiteSummary,
    WebsiteListResponse
)

router = APIRouter()


@router.get("/websites", response_model=WebsiteListResponse)
@limiter.limit("100/minute")
async def list_websites(
    request: Request,
    store: UptimeStore = Depends(get_store),
    aggregator: UptimeAggregator = Depends(get_aggregator)
):
    """List all websites with their uptime over the last 24 hours."""
    websites = await store.list_websites()

    summaries = []
    for website in websites:
        try:
            stats = await aggregator.window_stats(website.alias, "24h")
        except NotFoundError:
            # Deleted after the list was read
            continue
        uptime = stats.uptime_percentage
        summaries.append(WebsiteSummary(
            id=website.id,
            url=website.url,
            alias=website.alias,
            uptime_24h=round(uptime, 2) if uptime is not None else None
        ))

    return WebsiteListResponse(websites=summaries, total=len(summaries))


@router.post("/websites", response_model=WebsiteResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def register_website(
    request: Request,
    website_data: WebsiteCreate,
    store: UptimeStore = Depends(get_store)
):
    """
    Register a website for monitoring.

    The next scheduler tick picks it up. A duplicate alias answers 409.
    """
    website = await store.register_website(website_data.url, website_data.alias)
    return WebsiteResponse.model_validate(website)


@router.get("/websites/{alias}", response_model=WebsiteResponse)
@limiter.limit("200/minute")
async def get_website(
    request: Request,
    alias: str,
    store: UptimeStore = Depends(get_store)
):
    """Get a website by alias."""
    website = await store.get_website(alias)
    return WebsiteResponse.model_validate(website)


@router.delete("/websites/{alias}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("20/minute")
async def delete_website(
    request: Request,
    alias: str,
    store: UptimeStore = Depends(get_store)
):
    """Delete a website and its probe history."""
    await store.delete_website(alias)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
