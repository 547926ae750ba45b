from rest_framework import serializers


class NamedRefSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False, allow_null=True)
    name = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class DishDetailSerializer(serializers.Serializer):
    """Validates a ``GET dish/{id}`` payload; unknown keys are ignored."""

    id = serializers.IntegerField(min_value=1)
    name = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    dishName = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    price = serializers.DecimalField(
        max_digits=None, decimal_places=None, required=False, allow_null=True
    )
    discountPrice = serializers.DecimalField(
        max_digits=None, decimal_places=None, required=False, allow_null=True
    )
    # Image layouts vary; images.py classifies them.
    images = serializers.JSONField(required=False, allow_null=True)
    imageUrl = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    imagesUrls = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    merchantId = serializers.IntegerField(required=False, allow_null=True)
    merchantName = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    restaurantId = serializers.IntegerField(required=False, allow_null=True)
    restaurantName = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    merchant = NamedRefSerializer(required=False, allow_null=True)
    restaurant = NamedRefSerializer(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    preparationTime = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        if not (attrs.get("name") or attrs.get("dishName")):
            raise serializers.ValidationError({"name": "Dish has no name"})
        if attrs.get("price") is None and attrs.get("discountPrice") is None:
            raise serializers.ValidationError({"price": "Dish has no price"})
        return attrs
