"""Response schemas for collection reports."""

from collectibles.catalog.schemas import CamelModel, Category, Item


class CategorySum(CamelModel):
    category_id: str
    name: str
    sum: float


class CategoryValuationSums(CamelModel):
    categories: list[CategorySum]
    total_valuation: float


class CategoryTreeTotal(CamelModel):
    """Valuation of a category together with all of its descendants."""

    name: str
    found: bool
    category_id: str | None = None
    total_valuation: float = 0.0
    item_count: int = 0


class HomeValuationReport(CamelModel):
    category: CategoryTreeTotal
    subcategory: CategoryTreeTotal | None = None


class ItemRanking(CamelModel):
    items: list[Item]
    total: int


class ValuationLine(CamelModel):
    item_id: str
    name: str
    category_name: str
    bought_for: float
    valuation: float
    profit: float
    profit_percentage: float


class ValuationGroup(CamelModel):
    category_name: str
    items: list[ValuationLine]
    total_purchases: float
    total_valuation: float
    total_profit: float


class ValuationReport(CamelModel):
    groups: list[ValuationGroup]
    total_purchases: float
    total_valuation: float
    total_profit: float
    total_profit_percentage: float


class CollectionStats(CamelModel):
    total_items: int
    in_stock: int
    out_of_stock: int
    total_categories: int
    top_level_categories: int


class GroupValuationCategories(CamelModel):
    categories: list[Category]
