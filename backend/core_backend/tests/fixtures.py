"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like restaurants, users, catalog products, ingredients and cashier sessions.
"""
import pytest
from decimal import Decimal

from restaurants.models import Restaurant
from users.models import User
from catalog.models import Addon, AddonGroup, Category, Product, ProductSize, Promotion
from inventory.models import Ingredient, IngredientRecipeItem, ProductIngredient
from finance.models import BankAccount, PaymentMethod
from finance.services import CashierService


# ============================================================================
# RESTAURANT FIXTURES
# ============================================================================

@pytest.fixture
def restaurant_a(db):
    """Create test restaurant A (Pizza Place)"""
    return Restaurant.objects.create(
        name='Pizza Place',
        slug='pizza-place',
        is_active=True
    )


@pytest.fixture
def restaurant_b(db):
    """Create test restaurant B (Burger Joint)"""
    return Restaurant.objects.create(
        name='Burger Joint',
        slug='burger-joint',
        is_active=True
    )


@pytest.fixture
def inactive_restaurant(db):
    """Create inactive test restaurant"""
    return Restaurant.objects.create(
        name='Closed Restaurant',
        slug='closed-restaurant',
        is_active=False
    )


@pytest.fixture
def settings_a(restaurant_a):
    """Settings for restaurant A: manual acceptance, delivery fee 7.00, loyalty on"""
    settings_obj = restaurant_a.get_settings()
    settings_obj.auto_accept_orders = False
    settings_obj.delivery_fee = Decimal('7.00')
    settings_obj.loyalty_enabled = True
    settings_obj.points_per_currency = Decimal('1.00')
    settings_obj.cashback_percentage = Decimal('5.00')
    settings_obj.save()
    return settings_obj


# ============================================================================
# USER FIXTURES
# ============================================================================

@pytest.fixture
def cashier_a(restaurant_a):
    """Create cashier user for restaurant A"""
    return User.objects.create_user(
        email='cashier@pizza.com',
        username='cashier_pizza',
        password='password123',
        restaurant=restaurant_a,
        role=User.Role.CASHIER,
        first_name='Ana',
        last_name='Silva',
    )


@pytest.fixture
def cashier_b(restaurant_b):
    """Create cashier user for restaurant B"""
    return User.objects.create_user(
        email='cashier@burger.com',
        username='cashier_burger',
        password='password123',
        restaurant=restaurant_b,
        role=User.Role.CASHIER,
    )


@pytest.fixture
def driver_a(restaurant_a):
    """Driver for restaurant A: 40.00 a day plus 2.00 per delivery"""
    return User.objects.create_user(
        email='driver@pizza.com',
        username='driver_pizza',
        password='password123',
        restaurant=restaurant_a,
        role=User.Role.DRIVER,
        first_name='Carlos',
        last_name='Souza',
        driver_pay_type=User.DriverPayType.DAILY,
        driver_base_rate=Decimal('40.00'),
        driver_bonus_per_delivery=Decimal('2.00'),
    )


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture
def burger(restaurant_a):
    """Burger at 25.00 with no recipe (consumes its own stock)"""
    return Product.objects.create(
        restaurant=restaurant_a,
        name='Classic Burger',
        price=Decimal('25.00'),
        stock=Decimal('50'),
    )


@pytest.fixture
def extras_group(restaurant_a, burger):
    """Extras addon group (Bacon 5.00, Cheese 3.00) attached to the burger"""
    group = AddonGroup.objects.create(restaurant=restaurant_a, name='Extras')
    Addon.objects.create(group=group, name='Bacon', price=Decimal('5.00'))
    Addon.objects.create(group=group, name='Cheese', price=Decimal('3.00'))
    burger.addon_groups.add(group)
    return group


@pytest.fixture
def bacon(extras_group):
    return extras_group.addons.get(name='Bacon')


@pytest.fixture
def cheese_addon(extras_group):
    return extras_group.addons.get(name='Cheese')


@pytest.fixture
def pizza(restaurant_a):
    """Pizza at 40.00 with sizes Small (30.00) and Large (50.00)"""
    product = Product.objects.create(
        restaurant=restaurant_a,
        name='Margherita',
        price=Decimal('40.00'),
    )
    ProductSize.objects.create(product=product, name='Small', price=Decimal('30.00'), order=0)
    ProductSize.objects.create(product=product, name='Large', price=Decimal('50.00'), order=1)
    return product


@pytest.fixture
def pepperoni(restaurant_a):
    """Second pizza flavor at 50.00 (Large 60.00)"""
    product = Product.objects.create(
        restaurant=restaurant_a,
        name='Pepperoni',
        price=Decimal('50.00'),
    )
    ProductSize.objects.create(product=product, name='Large', price=Decimal('60.00'), order=1)
    return product


@pytest.fixture
def pizza_category(restaurant_a, pizza, pepperoni):
    category = Category.objects.create(restaurant=restaurant_a, name='Pizzas')
    category.products.add(pizza, pepperoni)
    return category


@pytest.fixture
def soda(restaurant_a):
    """Soda at 6.00 with a 10% promotion"""
    product = Product.objects.create(
        restaurant=restaurant_a,
        name='Soda',
        price=Decimal('6.00'),
        stock=Decimal('100'),
    )
    Promotion.objects.create(
        product=product,
        name='Happy hour',
        discount_type=Promotion.DiscountType.PERCENTAGE,
        discount_value=Decimal('10'),
    )
    return product


@pytest.fixture
def product_b(restaurant_b):
    """Product belonging to restaurant B"""
    return Product.objects.create(
        restaurant=restaurant_b,
        name='Double Burger',
        price=Decimal('32.00'),
    )


# ============================================================================
# INVENTORY FIXTURES
# ============================================================================

@pytest.fixture
def flour(restaurant_a):
    return Ingredient.objects.create(
        restaurant=restaurant_a, name='Flour', unit='kg', stock=Decimal('10')
    )


@pytest.fixture
def mozzarella(restaurant_a):
    return Ingredient.objects.create(
        restaurant=restaurant_a, name='Mozzarella', unit='kg', stock=Decimal('5')
    )


@pytest.fixture
def dough(restaurant_a, flour):
    """Semi-finished ingredient: 1 kg dough uses 0.6 kg flour"""
    ingredient = Ingredient.objects.create(
        restaurant=restaurant_a, name='Dough', unit='kg', stock=Decimal('0'), is_produced=True
    )
    IngredientRecipeItem.objects.create(ingredient=ingredient, component=flour, quantity=Decimal('0.6'))
    return ingredient


@pytest.fixture
def pizza_recipe(pizza, flour, mozzarella):
    """Each Margherita consumes 0.3 kg flour and 0.2 kg mozzarella"""
    ProductIngredient.objects.create(product=pizza, ingredient=flour, quantity=Decimal('0.3'))
    ProductIngredient.objects.create(product=pizza, ingredient=mozzarella, quantity=Decimal('0.2'))
    return pizza


# ============================================================================
# FINANCE FIXTURES
# ============================================================================

@pytest.fixture
def open_session(restaurant_a, cashier_a):
    """Open cashier session with a 100.00 float"""
    return CashierService.open_session(restaurant_a, cashier_a, Decimal('100.00'))


@pytest.fixture
def checking_account(restaurant_a):
    return BankAccount.objects.create(
        restaurant=restaurant_a, name='Checking', balance=Decimal('1000.00')
    )


@pytest.fixture
def savings_account(restaurant_a):
    return BankAccount.objects.create(
        restaurant=restaurant_a, name='Savings', balance=Decimal('0.00')
    )


@pytest.fixture
def credit_card_method(restaurant_a):
    """Card method with a 2.5% fee settled in 30 days"""
    return PaymentMethod.objects.create(
        restaurant=restaurant_a,
        name='credit_card',
        type='credit_card',
        fee_percentage=Decimal('2.50'),
        days_to_receive=30,
    )


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def client_a(api_client, restaurant_a):
    """
    Provide API client scoped to restaurant A.

    Usage:
        def test_my_api(client_a):
            response = client_a.post('/api/orders/', {...}, format='json')
    """
    api_client.credentials(HTTP_X_RESTAURANT=restaurant_a.slug)
    return api_client
