"""
/api/transactions endpoints.

GET  /api/transactions              paginated, searchable list for a month
GET  /api/transactions/statistics   total sales and sold / not sold counts
GET  /api/transactions/bar-chart    price-range histogram
GET  /api/transactions/pie-chart    sold / not sold breakdown
GET|POST /api/transactions/initialize  replace-all seed from the remote feed

Every month-taking endpoint matches the calendar month in any year and
falls back to the configured default month (APP_DEFAULT_MONTH) when the
``month`` parameter is omitted.
"""

import sqlite3

from fastapi import APIRouter, Depends, Query, Request

from api.database import get_db
from api.models import (
    ErrorResponse,
    InitializeResponse,
    PriceBucketOut,
    SoldGroupOut,
    StatisticsResponse,
    TransactionListResponse,
    TransactionOut,
)
from utils.seeding import initialize_transactions
from utils.transactions import bar_chart, compute_statistics, pie_chart, query_transactions

router = APIRouter(prefix="/transactions", tags=["transactions"])

_MONTH_DESCRIPTION = (
    "Full English month name, e.g. 'March'. Matches that month in any year. "
    "Defaults to the server's configured month (January)."
)

_INVALID_MONTH = {
    400: {
        "model": ErrorResponse,
        "description": "Invalid month value",
        "content": {"application/json": {"example": {
            "error": "Bad request", "kind": "invalid_month",
            "detail": "Invalid month value: Marchh", "status_code": 400,
        }}},
    },
}


def _resolve_month_param(request: Request, month: str | None) -> str:
    return month if month is not None else request.app.state.config.default_month


@router.api_route(
    "/initialize",
    methods=["GET", "POST"],
    response_model=InitializeResponse,
    summary="Initialize the database with transaction data",
    responses={
        500: {"model": ErrorResponse, "description": "Replace-all failed and was rolled back"},
        502: {"model": ErrorResponse, "description": "Seed feed unreachable or malformed"},
    },
)
def initialize(request: Request, conn: sqlite3.Connection = Depends(get_db)) -> InitializeResponse:
    """Fetch the seed feed and replace every stored transaction with it."""
    cfg = request.app.state.config
    result = initialize_transactions(
        conn,
        source_url=cfg.seed_source_url,
        session=request.app.state.seed_session,
        timeout=cfg.seed_timeout,
    )
    return InitializeResponse(
        message="Database initialized successfully!",
        initialized_count=result.initialized_count,
        deleted_count=result.deleted_count,
    )


@router.get(
    "",
    response_model=TransactionListResponse,
    summary="List transactions",
    responses=_INVALID_MONTH,
)
def list_transactions(
    request: Request,
    month: str | None = Query(None, description=_MONTH_DESCRIPTION),
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    per_page: int = Query(10, ge=1, alias="perPage", description="Transactions per page"),
    search: str = Query("", description="Case-insensitive text matched against title or description"),
    conn: sqlite3.Connection = Depends(get_db),
) -> TransactionListResponse:
    """Return one page of a month's transactions plus the total match count."""
    month = _resolve_month_param(request, month)
    result = query_transactions(conn, month, page=page, per_page=per_page, search=search)
    return TransactionListResponse(
        transactions=[
            TransactionOut(
                id=t.id, title=t.title, description=t.description,
                price=t.price, category=t.category, sold=t.sold,
                date_of_sale=t.date_of_sale, image=t.image,
            )
            for t in result.items
        ],
        total=result.total,
        page=result.page,
        per_page=result.per_page,
        page_count=result.page_count,
    )


@router.get(
    "/statistics",
    response_model=StatisticsResponse,
    summary="Get sales statistics for a month",
    responses=_INVALID_MONTH,
)
def statistics(
    request: Request,
    month: str | None = Query(None, description=_MONTH_DESCRIPTION),
    conn: sqlite3.Connection = Depends(get_db),
) -> StatisticsResponse:
    """Total sale amount, sold count and not-sold count for the month."""
    stats = compute_statistics(conn, _resolve_month_param(request, month))
    return StatisticsResponse(
        total_sales=stats.total_sales,
        total_sold_items=stats.total_sold_items,
        total_not_sold_items=stats.total_not_sold_items,
    )


@router.get(
    "/bar-chart",
    response_model=list[PriceBucketOut],
    summary="Get price-range data for the bar chart",
    responses=_INVALID_MONTH,
)
def bar_chart_data(
    request: Request,
    month: str | None = Query(None, description=_MONTH_DESCRIPTION),
    conn: sqlite3.Connection = Depends(get_db),
) -> list[PriceBucketOut]:
    """Every configured price bucket with its count, zero-filled, overflow last."""
    buckets = bar_chart(conn, _resolve_month_param(request, month))
    return [
        PriceBucketOut(
            bucket_label=b.label,
            lower_bound=b.lower_bound,
            upper_bound=b.upper_bound,
            count=b.count,
        )
        for b in buckets
    ]


@router.get(
    "/pie-chart",
    response_model=list[SoldGroupOut],
    summary="Get sold / not sold data for the pie chart",
    responses=_INVALID_MONTH,
)
def pie_chart_data(
    request: Request,
    month: str | None = Query(None, description=_MONTH_DESCRIPTION),
    conn: sqlite3.Connection = Depends(get_db),
) -> list[SoldGroupOut]:
    """Count per observed sold flag; absent groups are omitted."""
    groups = pie_chart(conn, _resolve_month_param(request, month))
    return [SoldGroupOut(sold=g.sold, count=g.count) for g in groups]
