"""
Pricing engine for order line items.

Pure functions over immutable catalog snapshots: no database access and no
side effects, so the same snapshot and selection always produce the same price.

Price Resolution Order:
1. Base = product price, overridden by the selected size
2. Flavors (split items) replace the base, combined by the resolved rule
3. First active promotion (by priority) adjusts the base, clamped at zero
4. Addons are added on top of the (possibly discounted) base
5. line_total = (base + addons) x quantity
"""
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from core_backend.exceptions import InvalidSelection
from core_backend.money import ZERO, clamp_zero, quantize, to_decimal

HIGHER = "higher"
AVERAGE = "average"
DEFAULT_FLAVOR_RULE = HIGHER


@dataclass(frozen=True)
class SizeSnapshot:
    id: int
    name: str
    price: Decimal


@dataclass(frozen=True)
class AddonSnapshot:
    id: int
    name: str
    price: Decimal


@dataclass(frozen=True)
class AddonGroupSnapshot:
    id: int
    name: str
    addons: Tuple[AddonSnapshot, ...] = ()
    is_flavor_group: bool = False
    price_rule: str = HIGHER


@dataclass(frozen=True)
class PromotionSnapshot:
    id: int
    discount_type: str  # "percentage" | "fixed_amount"
    discount_value: Decimal
    priority: int = 0


@dataclass(frozen=True)
class RecipeComponent:
    ingredient_id: int
    quantity: Decimal


@dataclass(frozen=True)
class FlavorSnapshot:
    """A product used as one flavor of a split item (e.g. half of a pizza)."""
    id: int
    name: str
    price: Decimal
    sizes: Tuple[SizeSnapshot, ...] = ()

    def price_for_size(self, size_name: Optional[str]) -> Decimal:
        if size_name:
            for size in self.sizes:
                if size.name == size_name:
                    return size.price
        return self.price


@dataclass(frozen=True)
class ProductSnapshot:
    """
    Everything pricing needs to know about a product, captured at read time.

    addon_groups already includes the groups inherited from the product's
    categories (de-duplicated), and flavor_price_rule is already resolved
    category -> product -> default.
    """
    id: int
    name: str
    price: Decimal
    is_available: bool = True
    sizes: Tuple[SizeSnapshot, ...] = ()
    addon_groups: Tuple[AddonGroupSnapshot, ...] = ()
    promotions: Tuple[PromotionSnapshot, ...] = ()
    flavor_price_rule: str = DEFAULT_FLAVOR_RULE
    recipe: Tuple[RecipeComponent, ...] = ()

    def find_size(self, size_id) -> Optional[SizeSnapshot]:
        for size in self.sizes:
            if str(size.id) == str(size_id):
                return size
        return None

    def active_promotion(self) -> Optional[PromotionSnapshot]:
        if not self.promotions:
            return None
        return sorted(self.promotions, key=lambda p: (p.priority, p.id))[0]

    def flavor_snapshot(self) -> FlavorSnapshot:
        return FlavorSnapshot(id=self.id, name=self.name, price=self.price, sizes=self.sizes)


@dataclass
class PricedLine:
    """Result of pricing one requested line item."""
    product_id: int
    quantity: int
    base_price: Decimal
    addons_total: Decimal
    unit_price: Decimal
    line_total: Decimal
    size: Optional[dict] = None
    addons: List[dict] = field(default_factory=list)
    flavors: List[dict] = field(default_factory=list)
    promotion_id: Optional[int] = None

    @property
    def snapshot(self) -> dict:
        """Immutable value stored on the order item (never re-derived from the catalog)."""
        return {
            "size": self.size,
            "addons": self.addons,
            "flavors": self.flavors,
        }


def combine_prices(prices: Sequence[Decimal], rule: str) -> Decimal:
    """Combine flavor prices by rule: 'average' is the arithmetic mean, anything else the max."""
    if not prices:
        return ZERO
    if rule == AVERAGE:
        return quantize(sum(prices, Decimal("0")) / len(prices))
    return max(prices)


def apply_promotion(base: Decimal, promotion: Optional[PromotionSnapshot]) -> Decimal:
    if promotion is None:
        return base
    value = to_decimal(promotion.discount_value)
    if promotion.discount_type == "percentage":
        return clamp_zero(base * (Decimal("1") - value / Decimal("100")))
    if promotion.discount_type == "fixed_amount":
        return clamp_zero(base - value)
    return base


def _price_addons(product: ProductSnapshot, addon_ids: Sequence):
    """
    Sum selected addons. Repeated ids count as quantity; flavor groups combine
    their selections by the group's rule instead of summing them.
    """
    counts = Counter(str(a) for a in addon_ids)
    if not counts:
        return ZERO, []

    known = {}
    for group in product.addon_groups:
        for addon in group.addons:
            known.setdefault(str(addon.id), (group, addon))

    for addon_id in counts:
        if addon_id not in known:
            raise InvalidSelection(
                f"Addon {addon_id} is not available for product '{product.name}'"
            )

    total = ZERO
    objects = []
    for group in product.addon_groups:
        selected = [a for a in group.addons if str(a.id) in counts and known[str(a.id)][0] is group]
        if not selected:
            continue

        if group.is_flavor_group:
            prices = []
            for addon in selected:
                prices.extend([addon.price] * counts[str(addon.id)])
            total += combine_prices(prices, group.price_rule)
        else:
            for addon in selected:
                total += addon.price * counts[str(addon.id)]

        for addon in selected:
            objects.append({
                "id": addon.id,
                "name": addon.name,
                "price": str(addon.price),
                "quantity": counts[str(addon.id)],
                "group_name": group.name,
                "is_flavor": group.is_flavor_group,
            })

    return quantize(total), objects


def price_line(
    product: ProductSnapshot,
    quantity: int,
    size_id=None,
    addon_ids: Sequence = (),
    flavors: Sequence[FlavorSnapshot] = (),
) -> PricedLine:
    """
    Price one line item.

    Raises:
        InvalidSelection: unavailable product, bad quantity, or a size/addon
            that does not belong to the product
    """
    if not product.is_available:
        raise InvalidSelection(f"Product '{product.name}' is not available")
    if quantity is None or int(quantity) < 1:
        raise InvalidSelection(f"Quantity must be at least 1 for product '{product.name}'")
    quantity = int(quantity)

    base = to_decimal(product.price)
    size_obj = None
    size_name = None

    if size_id not in (None, ""):
        size = product.find_size(size_id)
        if size is None:
            raise InvalidSelection(f"Size {size_id} is not valid for product '{product.name}'")
        base = to_decimal(size.price)
        size_name = size.name
        size_obj = {"id": size.id, "name": size.name, "price": str(size.price)}

    flavor_objects = []
    if flavors:
        flavor_prices = [to_decimal(f.price_for_size(size_name)) for f in flavors]
        combined = combine_prices(flavor_prices, product.flavor_price_rule)
        if combined > ZERO:
            base = combined
        flavor_objects = [
            {"id": f.id, "name": f.name, "price": str(p)}
            for f, p in zip(flavors, flavor_prices)
        ]

    promotion = product.active_promotion()
    base = quantize(apply_promotion(base, promotion))

    addons_total, addon_objects = _price_addons(product, addon_ids or ())

    unit_price = quantize(base + addons_total)
    return PricedLine(
        product_id=product.id,
        quantity=quantity,
        base_price=base,
        addons_total=addons_total,
        unit_price=unit_price,
        line_total=quantize(unit_price * quantity),
        size=size_obj,
        addons=addon_objects,
        flavors=flavor_objects,
        promotion_id=promotion.id if promotion else None,
    )
