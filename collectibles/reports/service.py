"""Read-only aggregates over the cached collection.

Every function here is pure: it takes the current category and item lists
and recomputes the report from scratch. Callers pass
``CollectionStore.categories`` / ``CollectionStore.items``.
"""

from collections import defaultdict
from collections.abc import Sequence

from collectibles.catalog.schemas import Category, Item, StockStatus
from collectibles.reports.schemas import (
    CategorySum,
    CategoryTreeTotal,
    CategoryValuationSums,
    CollectionStats,
    HomeValuationReport,
    ValuationGroup,
    ValuationLine,
    ValuationReport,
)

TOP_ITEMS_LIMIT = 10
UNCATEGORIZED = "Uncategorized"


def _value(item: Item) -> float:
    return item.valuation or 0.0


def _in_stock(item: Item) -> bool:
    return item.stock_status == StockStatus.IN_STOCK


def _normalize_name(name: str | None) -> str:
    return (name or "").strip().lower()


def descendant_category_ids(categories: Sequence[Category], root_id: str) -> list[str]:
    """All ids below ``root_id``, depth-first, excluding the root itself.

    The parent->children map is built once. A visited set stops the walk on
    cyclic parent chains, so malformed data yields each id at most once.
    """
    children: dict[str, list[str]] = defaultdict(list)
    for category in categories:
        if category.parent_id:
            children[category.parent_id].append(category.id)

    found: list[str] = []
    visited = {root_id}
    stack = list(reversed(children.get(root_id, [])))
    while stack:
        category_id = stack.pop()
        if category_id in visited:
            continue
        visited.add(category_id)
        found.append(category_id)
        stack.extend(reversed(children.get(category_id, [])))
    return found


def category_valuation_sums(
    categories: Sequence[Category], items: Sequence[Item]
) -> CategoryValuationSums:
    """Per-category sum of in-stock valuations, zero sums left out."""
    sums: dict[str, float] = defaultdict(float)
    for item in items:
        if _in_stock(item) and item.valuation:
            sums[item.category_id] += item.valuation

    rows = [
        CategorySum(category_id=c.id, name=c.name, sum=sums[c.id])
        for c in categories
        if sums.get(c.id, 0) > 0
    ]
    rows.sort(key=lambda row: row.sum, reverse=True)
    return CategoryValuationSums(
        categories=rows,
        total_valuation=sum(row.sum for row in rows),
    )


def _tree_total(
    categories: Sequence[Category], items: Sequence[Item], name: str, category: Category | None
) -> CategoryTreeTotal:
    if category is None:
        return CategoryTreeTotal(name=name, found=False)
    included = {category.id, *descendant_category_ids(categories, category.id)}
    members = [item for item in items if item.category_id in included]
    return CategoryTreeTotal(
        name=category.name,
        found=True,
        category_id=category.id,
        total_valuation=sum(_value(item) for item in members),
        item_count=len(members),
    )


def category_tree_valuation(
    categories: Sequence[Category],
    items: Sequence[Item],
    name: str,
    subcategory_name: str | None = None,
) -> HomeValuationReport:
    """Valuation of a named top-level category and one of its direct children.

    Names match case-insensitively after trimming. Items count regardless of
    stock status; a missing valuation counts as zero. A category that does not
    exist reports zero.
    """
    wanted = _normalize_name(name)
    home = next(
        (c for c in categories if not c.parent_id and _normalize_name(c.name) == wanted),
        None,
    )

    subcategory_total = None
    if subcategory_name is not None:
        wanted_sub = _normalize_name(subcategory_name)
        sub = None
        if home is not None:
            sub = next(
                (
                    c
                    for c in categories
                    if c.parent_id == home.id and _normalize_name(c.name) == wanted_sub
                ),
                None,
            )
        subcategory_total = _tree_total(categories, items, subcategory_name, sub)

    return HomeValuationReport(
        category=_tree_total(categories, items, name, home),
        subcategory=subcategory_total,
    )


def top_items_by_value(items: Sequence[Item], limit: int = TOP_ITEMS_LIMIT) -> list[Item]:
    valued = [item for item in items if _value(item) > 0]
    valued.sort(key=_value, reverse=True)
    return valued[:limit]


def wishlist(items: Sequence[Item]) -> list[Item]:
    wanted = [item for item in items if item.stock_status == StockStatus.OUT_OF_STOCK]
    wanted.sort(key=_value, reverse=True)
    return wanted


def valuation_report(categories: Sequence[Category], items: Sequence[Item]) -> ValuationReport:
    """Purchase price against valuation for in-stock items, grouped by category.

    Only items with both a purchase price and a valuation above zero qualify.
    Lines within a group are ordered by profit percentage, groups by their
    summed valuation, both descending.
    """
    names = {c.id: c.name for c in categories}
    grouped: dict[str, list[ValuationLine]] = defaultdict(list)

    for item in items:
        if not _in_stock(item):
            continue
        bought_for = item.bought_for or 0.0
        valuation = item.valuation or 0.0
        if bought_for <= 0 or valuation <= 0:
            continue
        profit = valuation - bought_for
        category_name = names.get(item.category_id) or UNCATEGORIZED
        grouped[category_name].append(
            ValuationLine(
                item_id=item.id,
                name=item.name,
                category_name=category_name,
                bought_for=bought_for,
                valuation=valuation,
                profit=profit,
                profit_percentage=profit / bought_for * 100,
            )
        )

    groups = []
    for category_name, lines in grouped.items():
        lines.sort(key=lambda line: line.profit_percentage, reverse=True)
        groups.append(
            ValuationGroup(
                category_name=category_name,
                items=lines,
                total_purchases=sum(line.bought_for for line in lines),
                total_valuation=sum(line.valuation for line in lines),
                total_profit=sum(line.profit for line in lines),
            )
        )
    groups.sort(key=lambda group: group.total_valuation, reverse=True)

    total_purchases = sum(group.total_purchases for group in groups)
    total_valuation = sum(group.total_valuation for group in groups)
    total_profit = total_valuation - total_purchases
    return ValuationReport(
        groups=groups,
        total_purchases=total_purchases,
        total_valuation=total_valuation,
        total_profit=total_profit,
        total_profit_percentage=(
            total_profit / total_purchases * 100 if total_purchases > 0 else 0.0
        ),
    )


def collection_stats(categories: Sequence[Category], items: Sequence[Item]) -> CollectionStats:
    in_stock = sum(1 for item in items if _in_stock(item))
    return CollectionStats(
        total_items=len(items),
        in_stock=in_stock,
        out_of_stock=len(items) - in_stock,
        total_categories=len(categories),
        top_level_categories=sum(1 for c in categories if not c.parent_id),
    )


def group_valuation_categories(
    categories: Sequence[Category], items: Sequence[Item]
) -> list[Category]:
    """Categories holding at least one valued in-stock item, by name."""
    valued = {item.category_id for item in items if _in_stock(item) and _value(item) > 0}
    return sorted((c for c in categories if c.id in valued), key=lambda c: c.name.lower())
