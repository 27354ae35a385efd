from rest_framework import serializers

from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = [
            "id",
            "name",
            "phone",
            "address",
            "zip_code",
            "street",
            "number",
            "neighborhood",
            "city",
            "state",
            "complement",
            "reference",
            "loyalty_points",
            "cashback_balance",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
