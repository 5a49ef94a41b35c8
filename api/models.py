"""
Pydantic request/response models for the API.

Field names are snake_case in Python and camelCase on the wire (the names
the dashboard client reads).  FastAPI serializes response models by alias.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── Transaction list ──────────────────────────────────────────────────────────

class TransactionOut(_ApiModel):
    """A single seeded product transaction."""
    id: str = Field(..., description="Unique identifier assigned at seed time",
                    examples=["3f6c0b9e-8f57-4a4e-9d8c-3e2f6f1f9a10"])
    title: str = Field(..., description="Product title", examples=["Mens Casual Slim Fit"])
    description: str = Field(..., description="Product description")
    price: float = Field(..., ge=0, description="Sale price", examples=[329.85])
    category: str | None = Field(None, description="Product category", examples=["men's clothing"])
    sold: bool = Field(..., description="Whether the item was sold")
    date_of_sale: str = Field(..., alias="dateOfSale",
                              description="Sale timestamp (ISO 8601, UTC)",
                              examples=["2021-11-27T14:59:54+00:00"])
    image: str | None = Field(None, description="Product image URL")


class TransactionListResponse(_ApiModel):
    """Response body for GET /api/transactions."""
    transactions: list[TransactionOut] = Field(..., description="Transactions on this page, in store order")
    total: int = Field(..., description="Total matching transactions (before pagination)", examples=[12])
    page: int = Field(..., description="Page number returned", examples=[1])
    per_page: int = Field(..., alias="perPage", description="Page size used", examples=[10])
    page_count: int = Field(..., alias="pageCount", description="Number of pages for this total", examples=[2])


# ── Aggregations ──────────────────────────────────────────────────────────────

class StatisticsResponse(_ApiModel):
    """Response body for GET /api/transactions/statistics."""
    total_sales: float = Field(..., alias="totalSales", description="Sum of prices in the month", examples=[5126.0])
    total_sold_items: int = Field(..., alias="totalSoldItems", description="Transactions marked sold", examples=[5])
    total_not_sold_items: int = Field(..., alias="totalNotSoldItems", description="Transactions not sold", examples=[3])


class PriceBucketOut(_ApiModel):
    """One bar of the price-range histogram."""
    bucket_label: str = Field(..., alias="bucketLabel", description="Price range label", examples=["100-200"])
    lower_bound: float = Field(..., alias="lowerBound", description="Inclusive lower price bound", examples=[100])
    upper_bound: float | None = Field(None, alias="upperBound",
                                      description="Exclusive upper price bound; null for the overflow bucket",
                                      examples=[200])
    count: int = Field(..., description="Transactions whose price falls in this range", examples=[3])


class SoldGroupOut(_ApiModel):
    """One slice of the sold / not sold pie chart."""
    sold: bool = Field(..., description="Sold flag of this group")
    count: int = Field(..., description="Transactions in this group", examples=[4])


# ── Seeding ───────────────────────────────────────────────────────────────────

class InitializeResponse(_ApiModel):
    """Response body for /api/transactions/initialize."""
    message: str = Field(..., examples=["Database initialized successfully!"])
    initialized_count: int = Field(..., alias="initializedCount", description="Transactions inserted", examples=[60])
    deleted_count: int = Field(0, alias="deletedCount", description="Transactions removed before the insert", examples=[60])


# ── Error model ───────────────────────────────────────────────────────────────

class ErrorResponse(_ApiModel):
    """Standard error response body."""
    error: str = Field(..., description="Short error category", examples=["Bad request"])
    kind: str | None = Field(None, description="Machine-checkable error kind", examples=["invalid_month"])
    detail: str | None = Field(None, description="Extended error detail", examples=["Invalid month value: Marchh"])
    status_code: int = Field(..., ge=400, le=599, description="HTTP status code", examples=[400])
