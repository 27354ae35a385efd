"""
Pricing Engine Tests

Pure pricing over catalog snapshots (no database) plus the snapshot builder
that turns catalog rows into what pricing consumes.

Run with: pytest backend/catalog/tests/test_pricing.py -v
"""
import pytest
from decimal import Decimal

from catalog.models import AddonGroup, Addon, Category, Promotion
from catalog.pricing import (
    AddonGroupSnapshot,
    AddonSnapshot,
    FlavorSnapshot,
    ProductSnapshot,
    PromotionSnapshot,
    SizeSnapshot,
    combine_prices,
    price_line,
)
from catalog.services import CatalogService
from core_backend.exceptions import InvalidSelection, NotFound


def make_product(**overrides):
    data = dict(
        id=1,
        name='Burger',
        price=Decimal('25.00'),
        sizes=(
            SizeSnapshot(id=10, name='Small', price=Decimal('20.00')),
            SizeSnapshot(id=11, name='Large', price=Decimal('32.00')),
        ),
        addon_groups=(
            AddonGroupSnapshot(
                id=100,
                name='Extras',
                addons=(
                    AddonSnapshot(id=1000, name='Bacon', price=Decimal('5.00')),
                    AddonSnapshot(id=1001, name='Egg', price=Decimal('2.50')),
                ),
            ),
        ),
    )
    data.update(overrides)
    return ProductSnapshot(**data)


class TestPriceLine:
    """Unit price and line total resolution"""

    def test_base_price_times_quantity(self):
        line = price_line(make_product(), 2)

        assert line.unit_price == Decimal('25.00'), "Unit price should be the product price"
        assert line.line_total == Decimal('50.00'), "Line total should be unit price x quantity"
        assert line.size is None, "No size was selected"

    def test_size_overrides_base_price(self):
        line = price_line(make_product(), 1, size_id=11)

        assert line.unit_price == Decimal('32.00'), "Large size price should replace the base"
        assert line.size == {"id": 11, "name": "Large", "price": "32.00"}, "Size snapshot mismatch"

    def test_addons_are_summed_and_counted_by_repetition(self):
        line = price_line(make_product(), 2, addon_ids=[1000, 1001, 1001])

        # 25.00 + 5.00 + 2 x 2.50
        assert line.addons_total == Decimal('10.00'), f"Addons total incorrect: {line.addons_total}"
        assert line.unit_price == Decimal('35.00'), f"Unit price incorrect: {line.unit_price}"
        assert line.line_total == Decimal('70.00'), f"Line total incorrect: {line.line_total}"
        egg = next(a for a in line.addons if a["name"] == "Egg")
        assert egg["quantity"] == 2, "Repeated addon id should count as quantity 2"

    def test_unknown_size_is_invalid_selection(self):
        with pytest.raises(InvalidSelection):
            price_line(make_product(), 1, size_id=999)

    def test_addon_from_another_product_is_invalid_selection(self):
        with pytest.raises(InvalidSelection):
            price_line(make_product(), 1, addon_ids=[4242])

    def test_zero_quantity_is_invalid_selection(self):
        with pytest.raises(InvalidSelection):
            price_line(make_product(), 0)

    def test_unavailable_product_is_invalid_selection(self):
        with pytest.raises(InvalidSelection):
            price_line(make_product(is_available=False), 1)


class TestPromotions:
    """One promotion per item, chosen by priority, applied to the base only"""

    def test_percentage_promotion_does_not_discount_addons(self):
        product = make_product(
            promotions=(PromotionSnapshot(id=1, discount_type='percentage', discount_value=Decimal('20')),),
        )
        line = price_line(product, 1, addon_ids=[1000])

        # 25.00 x 0.8 = 20.00, then + 5.00 bacon
        assert line.base_price == Decimal('20.00'), f"Discounted base incorrect: {line.base_price}"
        assert line.unit_price == Decimal('25.00'), f"Unit price incorrect: {line.unit_price}"
        assert line.promotion_id == 1, "Applied promotion should be recorded"

    def test_lowest_priority_value_wins(self):
        product = make_product(
            promotions=(
                PromotionSnapshot(id=1, discount_type='percentage', discount_value=Decimal('50'), priority=5),
                PromotionSnapshot(id=2, discount_type='fixed_amount', discount_value=Decimal('3.00'), priority=1),
            ),
        )
        line = price_line(product, 1)

        assert line.promotion_id == 2, "Promotion with priority 1 should apply first"
        assert line.unit_price == Decimal('22.00'), f"Unit price incorrect: {line.unit_price}"

    def test_fixed_discount_never_goes_below_zero(self):
        product = make_product(
            promotions=(PromotionSnapshot(id=1, discount_type='fixed_amount', discount_value=Decimal('99.00')),),
        )
        line = price_line(product, 1)

        assert line.unit_price == Decimal('0.00'), "Discounted base must clamp at zero"


class TestFlavors:
    """Split items priced from their flavors"""

    def test_higher_rule_uses_the_most_expensive_flavor(self):
        flavors = [
            FlavorSnapshot(id=2, name='Cheese', price=Decimal('40.00')),
            FlavorSnapshot(id=3, name='Pepperoni', price=Decimal('50.00')),
        ]
        line = price_line(make_product(flavor_price_rule='higher'), 1, flavors=flavors)

        assert line.unit_price == Decimal('50.00'), "Higher rule should take the max flavor price"
        assert len(line.flavors) == 2, "Both flavors should be snapshotted"

    def test_average_rule_uses_the_mean(self):
        flavors = [
            FlavorSnapshot(id=2, name='Cheese', price=Decimal('40.00')),
            FlavorSnapshot(id=3, name='Pepperoni', price=Decimal('45.00')),
        ]
        line = price_line(make_product(flavor_price_rule='average'), 1, flavors=flavors)

        assert line.unit_price == Decimal('42.50'), f"Average price incorrect: {line.unit_price}"

    def test_flavor_price_follows_selected_size_name(self):
        flavors = [
            FlavorSnapshot(
                id=3,
                name='Pepperoni',
                price=Decimal('50.00'),
                sizes=(SizeSnapshot(id=30, name='Large', price=Decimal('60.00')),),
            ),
        ]
        line = price_line(make_product(), 1, size_id=11, flavors=flavors)

        assert line.unit_price == Decimal('60.00'), "Flavor should be priced at its Large size"

    def test_combine_prices_rounds_half_even(self):
        assert combine_prices([Decimal('10.00'), Decimal('10.01')], 'average') == Decimal('10.00'), \
            "10.005 should round half-even to 10.00"


@pytest.mark.django_db
class TestCatalogSnapshots:
    """Catalog rows to pricing snapshots"""

    def test_category_addon_groups_are_inherited(self, restaurant_a, burger):
        group = AddonGroup.objects.create(restaurant=restaurant_a, name='Sauces')
        Addon.objects.create(group=group, name='BBQ', price=Decimal('1.50'))
        category = Category.objects.create(restaurant=restaurant_a, name='Burgers')
        category.addon_groups.add(group)
        category.products.add(burger)

        snapshot = CatalogService.get_product_snapshot(restaurant_a, burger.id)

        assert [g.name for g in snapshot.addon_groups] == ['Sauces'], "Category group should be inherited"

    def test_category_flavor_rule_overrides_product_rule(self, restaurant_a, pizza):
        pizza.flavor_price_rule = 'higher'
        pizza.save()
        category = Category.objects.create(restaurant=restaurant_a, name='Pizzas', flavor_price_rule='average')
        category.products.add(pizza)

        snapshot = CatalogService.get_product_snapshot(restaurant_a, pizza.id)

        assert snapshot.flavor_price_rule == 'average', "Category rule should win over the product rule"

    def test_inactive_promotions_are_ignored(self, restaurant_a, burger):
        Promotion.objects.create(
            product=burger,
            discount_type=Promotion.DiscountType.FIXED_AMOUNT,
            discount_value=Decimal('5.00'),
            is_active=False,
        )

        snapshot = CatalogService.get_product_snapshot(restaurant_a, burger.id)

        assert snapshot.promotions == (), "Inactive promotions must not reach pricing"

    def test_product_of_another_restaurant_is_not_found(self, restaurant_a, product_b):
        with pytest.raises(NotFound):
            CatalogService.get_product_snapshot(restaurant_a, product_b.id)

    def test_unknown_flavor_is_invalid_selection(self, restaurant_a, product_b):
        with pytest.raises(InvalidSelection):
            CatalogService.get_flavor_snapshots(restaurant_a, [product_b.id])
