from rest_framework import serializers

from .models import BankAccount, CashierSession, FinancialTransaction

MONEY = {"max_digits": 12, "decimal_places": 2}


class CashierSessionSerializer(serializers.ModelSerializer):
    class Meta:
        model = CashierSession
        fields = [
            "id",
            "user",
            "status",
            "initial_amount",
            "final_amount",
            "notes",
            "opened_at",
            "closed_at",
        ]
        read_only_fields = fields


class OpenSessionSerializer(serializers.Serializer):
    initial_amount = serializers.DecimalField(min_value=0, default=0, **MONEY)


class CloseSessionSerializer(serializers.Serializer):
    final_amount = serializers.DecimalField(min_value=0, **MONEY)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    closing_details = serializers.DictField(
        child=serializers.DecimalField(**MONEY), required=False, allow_empty=True
    )


class BankAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = BankAccount
        fields = ["id", "name", "balance", "is_active"]
        read_only_fields = ["balance"]


class FinancialTransactionSerializer(serializers.ModelSerializer):
    """
    Read and write representation of a ledger row.

    Balances are never written from here: FinancialService applies the
    effect of PAID rows on their bank account.
    """

    WRITABLE_RELATIONS = ("bank_account", "supplier", "category", "order", "cashier_session")

    class Meta:
        model = FinancialTransaction
        fields = [
            "id",
            "description",
            "amount",
            "gross_amount",
            "type",
            "status",
            "due_date",
            "payment_date",
            "payment_method",
            "order",
            "cashier_session",
            "bank_account",
            "supplier",
            "category",
            "related_transaction",
            "is_recurring",
            "recurrence_frequency",
            "recurrence_end_date",
            "parent",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "gross_amount", "related_transaction", "parent", "created_at", "updated_at"]
        extra_kwargs = {"amount": {"min_value": 0}}

    def validate(self, attrs):
        restaurant = self.context.get("restaurant")
        for name in self.WRITABLE_RELATIONS:
            related = attrs.get(name)
            if related is not None and restaurant is not None and related.restaurant_id != restaurant.id:
                raise serializers.ValidationError({name: "Does not belong to this restaurant."})
        if attrs.get("is_recurring") and not (
            attrs.get("recurrence_frequency") or getattr(self.instance, "recurrence_frequency", None)
        ):
            raise serializers.ValidationError(
                {"recurrence_frequency": "Required for recurring transactions."}
            )
        return attrs


class TransferSerializer(serializers.Serializer):
    from_account = serializers.IntegerField()
    to_account = serializers.IntegerField()
    amount = serializers.DecimalField(**MONEY)
    date = serializers.DateField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class DriverPaymentSerializer(serializers.Serializer):
    driver_id = serializers.IntegerField(required=False, allow_null=True)
    driver_name = serializers.CharField(required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(**MONEY)
    date = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs.get("driver_id") and not attrs.get("driver_name"):
            raise serializers.ValidationError("Either driver_id or driver_name is required.")
        return attrs
