from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """``?page=`` / ``?page_size=`` pagination capped at 100 rows."""

    page_size_query_param = "page_size"
    max_page_size = 100
