import django_filters as filters

from returns.models import Return
from returns.states import ReturnStatus


class ReturnFilter(filters.FilterSet):
    status = filters.ChoiceFilter(choices=ReturnStatus.choices)
    order_id = filters.NumberFilter(field_name="order_id")
    start_date = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    end_date = filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Return
        fields = ["status", "order_id", "start_date", "end_date"]


class MyReturnFilter(filters.FilterSet):
    status = filters.ChoiceFilter(choices=ReturnStatus.choices)

    class Meta:
        model = Return
        fields = ["status"]
