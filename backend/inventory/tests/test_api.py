"""
Inventory API Tests

Run with: pytest backend/inventory/tests/test_api.py -v
"""
import pytest
from decimal import Decimal

from inventory.models import Ingredient


@pytest.mark.django_db
class TestInventoryEndpoints:

    def test_stock_entry_create_and_confirm(self, client_a, flour):
        response = client_a.post(
            '/api/inventory/stock-entries/',
            {
                "invoice_number": "NF-7",
                "items": [{"ingredient_id": flour.id, "quantity": "10", "unit_cost": "2.00"}],
            },
            format='json',
        )
        assert response.status_code == 201, f"Unexpected status: {response.data}"
        assert response.data["total_amount"] == "20.00", "Entry total incorrect"
        entry_id = response.data["id"]

        response = client_a.post(f'/api/inventory/stock-entries/{entry_id}/confirm/')
        assert response.status_code == 200, f"Unexpected status: {response.data}"
        assert response.data["status"] == "CONFIRMED", "Entry should be confirmed"

        response = client_a.post(f'/api/inventory/stock-entries/{entry_id}/confirm/')
        assert response.status_code == 409, "Second confirmation should conflict"
        assert response.data["code"] == "already_confirmed", "Error code mismatch"

    def test_unknown_supplier_is_404(self, client_a, flour):
        response = client_a.post(
            '/api/inventory/stock-entries/',
            {"supplier": 999999, "items": [{"ingredient_id": flour.id, "quantity": "1", "unit_cost": "1"}]},
            format='json',
        )

        assert response.status_code == 404, "Unknown supplier should be not found"

    def test_production_conflict_on_missing_stock(self, client_a, dough):
        response = client_a.post(
            '/api/inventory/production/', {"ingredient_id": dough.id, "quantity": "100"}, format='json'
        )

        assert response.status_code == 409, "Insufficient stock should conflict"
        assert response.data["code"] == "insufficient_stock", "Error code mismatch"

    def test_production(self, client_a, dough):
        response = client_a.post(
            '/api/inventory/production/', {"ingredient_id": dough.id, "quantity": "2"}, format='json'
        )

        assert response.status_code == 201, f"Unexpected status: {response.data}"
        dough.refresh_from_db()
        assert dough.stock == Decimal('2'), "Dough should be produced"

    def test_losses_and_low_stock(self, client_a, flour):
        Ingredient.all_objects.filter(pk=flour.pk).update(min_stock=Decimal('9'))

        response = client_a.post(
            '/api/inventory/losses/',
            {"ingredient_id": flour.id, "quantity": "2", "reason": "DAMAGED"},
            format='json',
        )
        assert response.status_code == 201, f"Unexpected status: {response.data}"

        response = client_a.get('/api/inventory/losses/')
        assert len(response.data) == 1, "Loss should be listed"

        response = client_a.get('/api/inventory/ingredients/low-stock/')
        assert [row["name"] for row in response.data] == ["Flour"], "Flour should be below its minimum"

    def test_audit(self, client_a, flour):
        response = client_a.post(
            '/api/inventory/audit/',
            {"items": [{"ingredient_id": flour.id, "physical_count": "8"}]},
            format='json',
        )

        assert response.status_code == 200, f"Unexpected status: {response.data}"
        assert response.data["items"][0]["delta"] == Decimal('-2'), "Audit delta incorrect"

    def test_ingredients_are_scoped_to_restaurant(self, client_a, restaurant_b, flour):
        Ingredient.objects.create(restaurant=restaurant_b, name='Beef', unit='kg')

        response = client_a.get('/api/inventory/ingredients/')

        assert [row["name"] for row in response.data["results"]] == ["Flour"], "Only restaurant A ingredients"

    def test_negative_audit_count_is_invalid_selection(self, client_a, flour):
        response = client_a.post(
            '/api/inventory/audit/',
            {"items": [{"ingredient_id": flour.id, "physical_count": "-1"}]},
            format='json',
        )

        assert response.status_code == 400, "Negative count should be rejected"
        assert response.data["code"] == "invalid_selection", "Error code mismatch"
        flour.refresh_from_db()
        assert flour.stock == Decimal('10'), "Stock must not move"
