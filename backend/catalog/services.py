import logging
from typing import List, Sequence

from core_backend.exceptions import NotFound, InvalidSelection

from .models import Product
from .pricing import (
    DEFAULT_FLAVOR_RULE,
    AddonGroupSnapshot,
    AddonSnapshot,
    FlavorSnapshot,
    ProductSnapshot,
    PromotionSnapshot,
    RecipeComponent,
    SizeSnapshot,
)

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Read-side catalog access for pricing: turns Product rows into frozen snapshots.
    """

    @staticmethod
    def _product_queryset(restaurant):
        return Product.all_objects.filter(restaurant=restaurant).prefetch_related(
            "sizes",
            "promotions",
            "addon_groups__addons",
            "categories__addon_groups__addons",
            "recipe_items",
        )

    @staticmethod
    def _sizes(product) -> tuple:
        return tuple(SizeSnapshot(id=s.id, name=s.name, price=s.price) for s in product.sizes.all())

    @staticmethod
    def _group_snapshot(group) -> AddonGroupSnapshot:
        return AddonGroupSnapshot(
            id=group.id,
            name=group.name,
            is_flavor_group=group.is_flavor_group,
            price_rule=group.price_rule,
            addons=tuple(AddonSnapshot(id=a.id, name=a.name, price=a.price) for a in group.addons.all()),
        )

    @staticmethod
    def resolve_flavor_rule(product) -> str:
        """Category-level rule wins over the product rule; default is 'higher'."""
        for category in product.categories.all():
            if category.flavor_price_rule:
                return category.flavor_price_rule
        return product.flavor_price_rule or DEFAULT_FLAVOR_RULE

    @staticmethod
    def build_snapshot(product) -> ProductSnapshot:
        # Category groups first, then product groups; de-duplicated by id
        groups = {}
        for category in product.categories.all():
            for group in category.addon_groups.all():
                groups.setdefault(group.id, group)
        for group in product.addon_groups.all():
            groups.setdefault(group.id, group)

        promotions = tuple(
            PromotionSnapshot(
                id=p.id,
                discount_type=p.discount_type,
                discount_value=p.discount_value,
                priority=p.priority,
            )
            for p in product.promotions.all()
            if p.is_active
        )

        return ProductSnapshot(
            id=product.id,
            name=product.name,
            price=product.price,
            is_available=product.is_available,
            sizes=CatalogService._sizes(product),
            addon_groups=tuple(CatalogService._group_snapshot(g) for g in groups.values()),
            promotions=promotions,
            flavor_price_rule=CatalogService.resolve_flavor_rule(product),
            recipe=tuple(
                RecipeComponent(ingredient_id=r.ingredient_id, quantity=r.quantity)
                for r in product.recipe_items.all()
            ),
        )

    @staticmethod
    def get_product_snapshot(restaurant, product_id) -> ProductSnapshot:
        """
        Return the pricing snapshot for one product of this restaurant.

        Raises:
            NotFound: product does not exist for the restaurant
        """
        try:
            product = CatalogService._product_queryset(restaurant).get(id=product_id)
        except (Product.DoesNotExist, ValueError):
            raise NotFound("Product", product_id)
        return CatalogService.build_snapshot(product)

    @staticmethod
    def get_flavor_snapshots(restaurant, flavor_ids: Sequence) -> List[FlavorSnapshot]:
        """
        Return flavor snapshots in request order. Unknown flavor ids are an
        InvalidSelection, since they come from the item configuration.
        """
        if not flavor_ids:
            return []

        products = {
            str(p.id): p
            for p in Product.all_objects.filter(restaurant=restaurant, id__in=list(flavor_ids)).prefetch_related("sizes")
        }
        flavors = []
        for flavor_id in flavor_ids:
            product = products.get(str(flavor_id))
            if product is None:
                raise InvalidSelection(f"Flavor {flavor_id} is not a product of this restaurant")
            flavors.append(
                FlavorSnapshot(
                    id=product.id,
                    name=product.name,
                    price=product.price,
                    sizes=CatalogService._sizes(product),
                )
            )
        return flavors
