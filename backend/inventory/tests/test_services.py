"""
Inventory Ledger Tests

Goods receipts, production of semi-finished ingredients, losses and
physical audits.

Run with: pytest backend/inventory/tests/test_services.py -v
"""
import pytest
from decimal import Decimal

from core_backend.exceptions import (
    AlreadyConfirmed,
    InsufficientStock,
    InvalidSelection,
    NotFound,
    NotProducible,
)
from finance.models import FinancialTransaction, Supplier
from inventory.models import Ingredient, ProductionLog, StockEntry, StockLoss
from inventory.services import AUDIT_INVOICE, InventoryService


# ============================================================================
# STOCK ENTRIES
# ============================================================================

@pytest.mark.django_db
class TestStockEntries:

    def test_confirm_moves_stock_and_books_expense(self, restaurant_a, flour):
        """
        CRITICAL: 10 units at 2.00 (factor 1) adds 10 to stock, sets the unit
        cost to 2.00 and books one PENDING expense of 20.00
        """
        entry = InventoryService.create_stock_entry(
            restaurant_a,
            [{"ingredient_id": flour.id, "quantity": Decimal('10'), "unit_cost": Decimal('2.00')}],
            invoice_number="NF-100",
        )
        assert entry.status == StockEntry.Status.PENDING, "New entries start PENDING"
        flour.refresh_from_db()
        assert flour.stock == Decimal('10'), "Nothing moves before confirmation"

        entry = InventoryService.confirm_stock_entry(restaurant_a, entry.id)

        flour.refresh_from_db()
        expense = entry.financial_transaction
        assert entry.status == StockEntry.Status.CONFIRMED, "Entry should be confirmed"
        assert flour.stock == Decimal('20'), f"Stock should grow by 10: {flour.stock}"
        assert flour.last_unit_cost == Decimal('2.00'), f"Unit cost incorrect: {flour.last_unit_cost}"
        assert expense.type == FinancialTransaction.Type.EXPENSE, "Purchase is an expense"
        assert expense.status == FinancialTransaction.Status.PENDING, "Purchase expense is PENDING"
        assert expense.amount == Decimal('20.00'), f"Expense amount incorrect: {expense.amount}"
        assert "NF-100" in expense.description, "Expense should reference the invoice"

    def test_conversion_factor_scales_stock_and_cost(self, restaurant_a, mozzarella):
        entry = InventoryService.create_stock_entry(
            restaurant_a,
            [{
                "ingredient_id": mozzarella.id,
                "quantity": Decimal('2'),
                "unit_cost": Decimal('120.00'),
                "conversion_factor": Decimal('4'),
            }],
        )

        InventoryService.confirm_stock_entry(restaurant_a, entry.id)

        mozzarella.refresh_from_db()
        assert mozzarella.stock == Decimal('13'), f"2 boxes of 4 should add 8: {mozzarella.stock}"
        assert mozzarella.last_unit_cost == Decimal('30.00'), "Cost should be per stock unit"

    def test_confirm_twice_is_rejected(self, restaurant_a, flour):
        entry = InventoryService.create_stock_entry(
            restaurant_a, [{"ingredient_id": flour.id, "quantity": 1, "unit_cost": 1}]
        )
        InventoryService.confirm_stock_entry(restaurant_a, entry.id)

        with pytest.raises(AlreadyConfirmed):
            InventoryService.confirm_stock_entry(restaurant_a, entry.id)

        flour.refresh_from_db()
        assert flour.stock == Decimal('11'), "Second confirmation must not move stock"
        assert FinancialTransaction.all_objects.filter(restaurant=restaurant_a).count() == 1, \
            "Only one expense should be booked"

    def test_supplier_is_kept_on_expense(self, restaurant_a, flour):
        supplier = Supplier.objects.create(restaurant=restaurant_a, name='Mill & Co')
        entry = InventoryService.create_stock_entry(
            restaurant_a, [{"ingredient_id": flour.id, "quantity": 5, "unit_cost": 3}], supplier=supplier
        )

        entry = InventoryService.confirm_stock_entry(restaurant_a, entry.id)

        assert entry.financial_transaction.supplier_id == supplier.id, "Expense should point at the supplier"

    def test_ingredient_of_another_restaurant_is_not_found(self, restaurant_b, flour):
        with pytest.raises(NotFound):
            InventoryService.create_stock_entry(
                restaurant_b, [{"ingredient_id": flour.id, "quantity": 1, "unit_cost": 1}]
            )

        assert not StockEntry.all_objects.exists(), "Nothing should be persisted"

    def test_empty_entry_is_rejected(self, restaurant_a):
        with pytest.raises(InvalidSelection):
            InventoryService.create_stock_entry(restaurant_a, [])


# ============================================================================
# PRODUCTION
# ============================================================================

@pytest.mark.django_db
class TestProduction:

    def test_produce_consumes_components(self, restaurant_a, dough, flour):
        log = InventoryService.produce(restaurant_a, dough.id, Decimal('5'))

        dough.refresh_from_db()
        flour.refresh_from_db()
        assert dough.stock == Decimal('5'), "Produced quantity should be added"
        assert flour.stock == Decimal('7'), f"5 x 0.6 flour should be consumed: {flour.stock}"
        assert ProductionLog.all_objects.filter(pk=log.pk).exists(), "Production should be logged"

    def test_insufficient_component_changes_nothing(self, restaurant_a, dough, flour):
        with pytest.raises(InsufficientStock) as excinfo:
            InventoryService.produce(restaurant_a, dough.id, Decimal('20'))

        dough.refresh_from_db()
        flour.refresh_from_db()
        assert excinfo.value.required == Decimal('12.0'), "Error should report the requirement"
        assert dough.stock == Decimal('0'), "Nothing should be produced"
        assert flour.stock == Decimal('10'), "No component should be consumed"
        assert not ProductionLog.all_objects.exists(), "No production should be logged"

    def test_ingredient_without_recipe_is_not_producible(self, restaurant_a, flour):
        with pytest.raises(NotProducible):
            InventoryService.produce(restaurant_a, flour.id, Decimal('1'))

    def test_zero_quantity_is_rejected(self, restaurant_a, dough):
        with pytest.raises(InvalidSelection):
            InventoryService.produce(restaurant_a, dough.id, Decimal('0'))


# ============================================================================
# LOSSES AND AUDITS
# ============================================================================

@pytest.mark.django_db
class TestLossesAndAudits:

    def test_loss_keeps_unit_cost_snapshot(self, restaurant_a, flour):
        Ingredient.all_objects.filter(pk=flour.pk).update(last_unit_cost=Decimal('4.50'))

        loss = InventoryService.record_loss(restaurant_a, flour.id, Decimal('2'), StockLoss.Reason.EXPIRED)
        Ingredient.all_objects.filter(pk=flour.pk).update(last_unit_cost=Decimal('9.00'))

        loss.refresh_from_db()
        flour.refresh_from_db()
        assert flour.stock == Decimal('8'), "Loss should reduce stock"
        assert loss.unit_cost_snapshot == Decimal('4.50'), "Snapshot must not follow later cost changes"

    def test_unknown_loss_reason_is_rejected(self, restaurant_a, flour):
        with pytest.raises(InvalidSelection):
            InventoryService.record_loss(restaurant_a, flour.id, Decimal('1'), "STOLEN")

    def test_audit_shortfall_and_surplus(self, restaurant_a, flour, mozzarella):
        results = InventoryService.audit(
            restaurant_a,
            [
                {"ingredient_id": flour.id, "physical_count": Decimal('7')},
                {"ingredient_id": mozzarella.id, "physical_count": Decimal('6.5')},
            ],
        )

        flour.refresh_from_db()
        mozzarella.refresh_from_db()
        assert flour.stock == Decimal('7'), "Count should overwrite stock"
        assert mozzarella.stock == Decimal('6.5'), "Count should overwrite stock"
        assert [r["delta"] for r in results] == [Decimal('-3'), Decimal('1.5')], "Deltas incorrect"

        loss = StockLoss.all_objects.get(ingredient=flour)
        assert loss.reason == StockLoss.Reason.AUDIT_ADJUSTMENT, "Shortfall should be an audit loss"
        assert loss.quantity == Decimal('3'), "Loss should be the shortfall"

        surplus = StockEntry.all_objects.get(invoice_number=AUDIT_INVOICE)
        assert surplus.status == StockEntry.Status.CONFIRMED, "Surplus entry is confirmed directly"
        assert surplus.items.get().unit_cost == Decimal('0'), "Surplus lines carry no cost"
        assert surplus.financial_transaction is None, "Surplus books no expense"

    def test_matching_count_records_nothing(self, restaurant_a, flour):
        InventoryService.audit(restaurant_a, [{"ingredient_id": flour.id, "physical_count": Decimal('10')}])

        assert not StockLoss.all_objects.exists(), "No loss for a matching count"
        assert not StockEntry.all_objects.exists(), "No entry for a matching count"

    def test_negative_count_is_rejected(self, restaurant_a, flour):
        with pytest.raises(InvalidSelection):
            InventoryService.audit(restaurant_a, [{"ingredient_id": flour.id, "physical_count": Decimal('-1')}])

        flour.refresh_from_db()
        assert flour.stock == Decimal('10'), "Rejected audit must not move stock"


# ============================================================================
# ORDER DEDUCTION
# ============================================================================

@pytest.mark.django_db
class TestDeductForOrder:

    def test_quantities_are_aggregated_per_ingredient(self, restaurant_a, pizza_recipe, flour, mozzarella):
        from orders.models import Order, OrderItem

        order = Order.all_objects.create(restaurant=restaurant_a, order_type=Order.OrderType.TABLE, daily_number=1)
        for quantity in (1, 3):
            OrderItem.all_objects.create(
                restaurant=restaurant_a, order=order, product=pizza_recipe,
                quantity=quantity, unit_price=Decimal('40.00'),
            )

        InventoryService.deduct_for_order(order)

        flour.refresh_from_db()
        mozzarella.refresh_from_db()
        assert flour.stock == Decimal('8.8'), f"4 x 0.3 flour should be consumed: {flour.stock}"
        assert mozzarella.stock == Decimal('4.2'), f"4 x 0.2 mozzarella should be consumed: {mozzarella.stock}"

    def test_product_without_recipe_going_negative_is_logged(self, restaurant_a, burger, caplog):
        from orders.models import Order, OrderItem

        order = Order.all_objects.create(restaurant=restaurant_a, order_type=Order.OrderType.TABLE, daily_number=1)
        OrderItem.all_objects.create(
            restaurant=restaurant_a, order=order, product=burger, quantity=60, unit_price=Decimal('25.00'),
        )

        with caplog.at_level('WARNING', logger='inventory.services'):
            InventoryService.deduct_for_order(order)

        burger.refresh_from_db()
        assert burger.stock == Decimal('-10'), f"Own stock should go negative: {burger.stock}"
        assert "Negative stock: product 'Classic Burger'" in caplog.text, "Negative product stock should be reported"
