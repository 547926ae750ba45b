from rest_framework import serializers

from .quantities import MIN_QUANTITY, max_quantity


def _money(**kwargs):
    return serializers.DecimalField(
        max_digits=None, decimal_places=None, required=False, allow_null=True, **kwargs
    )


class RemoteCartItemSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False, allow_null=True)
    dishId = serializers.IntegerField(min_value=1)
    dishName = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    name = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    dishImage = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    price = _money()
    discountPrice = _money()
    quantity = serializers.IntegerField(min_value=MIN_QUANTITY)
    subtotal = _money()
    restaurantId = serializers.IntegerField(required=False, allow_null=True)
    restaurantName = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class RemoteCartSerializer(serializers.Serializer):
    # Items are validated one by one so a single bad line does not sink the cart.
    items = serializers.ListField(child=serializers.JSONField(), required=False, default=list)
    totalItems = serializers.IntegerField(required=False, allow_null=True)
    totalPrice = _money()


class CartCountSerializer(serializers.Serializer):
    count = serializers.IntegerField(min_value=0)


class CartLineWriteSerializer(serializers.Serializer):
    """Body of ``POST cart/add`` and ``PUT cart/update/{dishId}``."""

    dishId = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=MIN_QUANTITY)

    def validate_quantity(self, value):
        if value > max_quantity():
            raise serializers.ValidationError(f"Quantity cannot exceed {max_quantity()}")
        return value
