import logging
from collections import defaultdict
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from catalog.models import Product
from core_backend.exceptions import (
    AlreadyConfirmed,
    InsufficientStock,
    InvalidSelection,
    NotFound,
    NotProducible,
)
from core_backend.money import ZERO, quantize, to_decimal
from finance.models import FinancialTransaction
from finance.services import FinancialService

from .models import (
    Ingredient,
    ProductIngredient,
    ProductionLog,
    StockEntry,
    StockEntryItem,
    StockLoss,
)

logger = logging.getLogger(__name__)

AUDIT_INVOICE = "AUDIT_ADJUSTMENT"


class InventoryService:
    """
    Ingredient stock ledger. Every stock change is an F() increment/decrement
    so concurrent writers never lose updates.
    """

    @staticmethod
    def _get_ingredient(restaurant, ingredient_id, lock=False) -> Ingredient:
        qs = Ingredient.all_objects.filter(restaurant=restaurant)
        if lock:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=ingredient_id)
        except (Ingredient.DoesNotExist, ValueError):
            raise NotFound("Ingredient", ingredient_id)

    @staticmethod
    def _positive_quantity(quantity) -> Decimal:
        quantity = to_decimal(quantity)
        if quantity <= ZERO:
            raise InvalidSelection("Quantity must be greater than zero")
        return quantity

    @staticmethod
    def _adjust_stock(ingredient_id, delta: Decimal):
        Ingredient.all_objects.filter(pk=ingredient_id).update(stock=F("stock") + delta)

    @staticmethod
    def _report_negative_stock(ingredient_ids, reference: str, product_ids=()):
        """Sales are never blocked on stock; a negative balance is only reported."""
        negatives = Ingredient.all_objects.filter(pk__in=ingredient_ids, stock__lt=0)
        for ingredient in negatives:
            logger.warning(
                f"Negative stock: ingredient '{ingredient.name}' ({ingredient.id}) is at "
                f"{ingredient.stock} {ingredient.unit} after {reference}"
            )
        for product in Product.all_objects.filter(pk__in=list(product_ids), stock__lt=0):
            logger.warning(
                f"Negative stock: product '{product.name}' ({product.id}) is at {product.stock} after {reference}"
            )

    @staticmethod
    @transaction.atomic
    def deduct_for_order(order):
        """
        Consume stock for every item of a completed order.

        Products with a bill of materials consume component x item quantity of
        each ingredient; products without one decrement their own stock.
        No floor is enforced.
        """
        items = list(order.items.all())
        if not items:
            return

        product_ids = {item.product_id for item in items}
        recipes = defaultdict(list)
        for row in ProductIngredient.objects.filter(product_id__in=product_ids):
            recipes[row.product_id].append(row)

        per_ingredient = defaultdict(lambda: ZERO)
        per_product = defaultdict(int)
        for item in items:
            components = recipes.get(item.product_id)
            if components:
                for component in components:
                    per_ingredient[component.ingredient_id] += component.quantity * item.quantity
            else:
                per_product[item.product_id] += item.quantity

        for ingredient_id, amount in per_ingredient.items():
            InventoryService._adjust_stock(ingredient_id, -amount)
        for product_id, amount in per_product.items():
            Product.all_objects.filter(pk=product_id).update(stock=F("stock") - amount)

        InventoryService._report_negative_stock(
            list(per_ingredient), f"order #{order.daily_number}", product_ids=list(per_product)
        )
        logger.info(
            f"Stock deducted for order {order.id}: {len(per_ingredient)} ingredients, "
            f"{len(per_product)} products without recipe"
        )

    @staticmethod
    @transaction.atomic
    def create_stock_entry(restaurant, items, supplier=None, invoice_number="", notes="", received_at=None) -> StockEntry:
        """
        Register a PENDING goods receipt. Nothing moves until it is confirmed.

        items: [{"ingredient_id", "quantity", "unit_cost", "conversion_factor"?, "batch"?, "expiration_date"?}]
        """
        if not items:
            raise InvalidSelection("A stock entry needs at least one item")

        entry = StockEntry.all_objects.create(
            restaurant=restaurant,
            supplier=supplier,
            invoice_number=invoice_number or "",
            notes=notes or "",
            received_at=received_at or timezone.now(),
            status=StockEntry.Status.PENDING,
        )

        total = ZERO
        for data in items:
            ingredient = InventoryService._get_ingredient(restaurant, data.get("ingredient_id"))
            quantity = InventoryService._positive_quantity(data.get("quantity"))
            unit_cost = to_decimal(data.get("unit_cost") or 0)
            factor = to_decimal(data.get("conversion_factor") or 1)
            if factor <= ZERO:
                raise InvalidSelection("Conversion factor must be greater than zero")

            StockEntryItem.objects.create(
                entry=entry,
                ingredient=ingredient,
                quantity=quantity,
                unit_cost=unit_cost,
                conversion_factor=factor,
                batch=data.get("batch") or "",
                expiration_date=data.get("expiration_date"),
            )
            total += quantity * unit_cost

        entry.total_amount = quantize(total)
        entry.save(update_fields=["total_amount"])
        return entry

    @staticmethod
    @transaction.atomic
    def confirm_stock_entry(restaurant, entry_id) -> StockEntry:
        """
        Confirm a goods receipt: stock += quantity x factor per line,
        last_unit_cost = unit_cost / factor, and one PENDING expense for the total.

        Raises:
            NotFound: entry does not exist for the restaurant
            AlreadyConfirmed: entry was confirmed before
        """
        try:
            entry = StockEntry.all_objects.select_for_update().get(pk=entry_id, restaurant=restaurant)
        except (StockEntry.DoesNotExist, ValueError):
            raise NotFound("Stock entry", entry_id)

        if entry.status == StockEntry.Status.CONFIRMED:
            raise AlreadyConfirmed(entry)

        for item in entry.items.all():
            factor = item.conversion_factor or Decimal("1")
            Ingredient.all_objects.filter(pk=item.ingredient_id).update(
                stock=F("stock") + item.quantity * factor,
                last_unit_cost=item.unit_cost / factor,
            )

        label = entry.invoice_number or str(entry.id)
        expense = FinancialService.record_transaction(
            restaurant,
            description=f"Purchase invoice #{label}",
            amount=entry.total_amount,
            type=FinancialTransaction.Type.EXPENSE,
            status=FinancialTransaction.Status.PENDING,
            due_date=timezone.localdate(),
            supplier=entry.supplier,
        )

        entry.status = StockEntry.Status.CONFIRMED
        entry.financial_transaction = expense
        entry.save(update_fields=["status", "financial_transaction"])

        logger.info(f"Stock entry {entry.id} confirmed; expense {expense.id} of {expense.amount} pending")
        return entry

    @staticmethod
    @transaction.atomic
    def produce(restaurant, ingredient_id, quantity, user=None) -> ProductionLog:
        """
        Turn components into a semi-finished ingredient. All-or-nothing: every
        component is checked before anything is decremented.

        Raises:
            NotProducible: the ingredient has no recipe
            InsufficientStock: a component has less than required
        """
        quantity = InventoryService._positive_quantity(quantity)
        ingredient = InventoryService._get_ingredient(restaurant, ingredient_id)

        recipe = list(ingredient.recipe.all())
        if not recipe:
            raise NotProducible(ingredient)

        # Lock components in a stable order before the availability check
        component_ids = sorted({row.component_id for row in recipe})
        components = {
            c.pk: c
            for c in Ingredient.all_objects.select_for_update().filter(pk__in=component_ids).order_by("pk")
        }

        required = defaultdict(lambda: ZERO)
        for row in recipe:
            required[row.component_id] += row.quantity * quantity

        for component_id, amount in required.items():
            component = components[component_id]
            if component.stock < amount:
                raise InsufficientStock(component, amount, component.stock)

        for component_id, amount in required.items():
            InventoryService._adjust_stock(component_id, -amount)
        InventoryService._adjust_stock(ingredient.pk, quantity)

        log = ProductionLog.all_objects.create(
            restaurant=restaurant,
            ingredient=ingredient,
            user=user,
            quantity=quantity,
        )
        logger.info(f"Produced {quantity} {ingredient.unit} of '{ingredient.name}'")
        return log

    @staticmethod
    @transaction.atomic
    def record_loss(restaurant, ingredient_id, quantity, reason, notes="", user=None) -> StockLoss:
        """Write off stock. The loss row keeps the unit cost at the time of loss."""
        quantity = InventoryService._positive_quantity(quantity)
        if reason not in StockLoss.Reason.values:
            raise InvalidSelection(f"Unknown loss reason '{reason}'")

        ingredient = InventoryService._get_ingredient(restaurant, ingredient_id, lock=True)
        loss = StockLoss.all_objects.create(
            restaurant=restaurant,
            ingredient=ingredient,
            user=user,
            quantity=quantity,
            reason=reason,
            notes=notes or "",
            unit_cost_snapshot=ingredient.last_unit_cost,
        )
        InventoryService._adjust_stock(ingredient.pk, -quantity)
        InventoryService._report_negative_stock([ingredient.pk], f"loss {loss.id}")
        return loss

    @staticmethod
    @transaction.atomic
    def audit(restaurant, items, user=None) -> list:
        """
        Apply a physical count. The declared count is authoritative: a shortfall
        becomes a loss, a surplus becomes a confirmed zero-cost entry line, and
        stock is overwritten either way.

        items: [{"ingredient_id", "physical_count"}]
        Returns one dict per counted ingredient with the computed delta.
        """
        if not items:
            raise InvalidSelection("An audit needs at least one counted ingredient")

        results = []
        surplus_entry = None
        for data in items:
            if data.get("physical_count") is None:
                raise InvalidSelection("physical_count is required for every audited ingredient")
            counted = to_decimal(data["physical_count"])
            if counted < ZERO:
                raise InvalidSelection("A physical count cannot be negative")

            ingredient = InventoryService._get_ingredient(restaurant, data.get("ingredient_id"), lock=True)
            delta = counted - ingredient.stock

            if delta < ZERO:
                StockLoss.all_objects.create(
                    restaurant=restaurant,
                    ingredient=ingredient,
                    user=user,
                    quantity=-delta,
                    reason=StockLoss.Reason.AUDIT_ADJUSTMENT,
                    notes="Inventory audit",
                    unit_cost_snapshot=ingredient.last_unit_cost,
                )
            elif delta > ZERO:
                if surplus_entry is None:
                    surplus_entry = StockEntry.all_objects.create(
                        restaurant=restaurant,
                        invoice_number=AUDIT_INVOICE,
                        status=StockEntry.Status.CONFIRMED,
                        total_amount=ZERO,
                        notes="Inventory audit surplus",
                    )
                StockEntryItem.objects.create(
                    entry=surplus_entry,
                    ingredient=ingredient,
                    quantity=delta,
                    unit_cost=ZERO,
                )

            Ingredient.all_objects.filter(pk=ingredient.pk).update(stock=counted)
            results.append({
                "ingredient_id": ingredient.pk,
                "previous_stock": ingredient.stock,
                "physical_count": counted,
                "delta": delta,
            })

        logger.info(f"Inventory audit applied to {len(results)} ingredients for restaurant {restaurant.slug}")
        return results
