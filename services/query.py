"""
Query builders for document listing.

Each helper returns one serialized query string as accepted by the
``queries[]`` parameter of the documents endpoint.
"""

import json
from typing import Any, List, Union


def _query(method: str, attribute: str = None, values: List[Any] = None) -> str:
    query = {'method': method}
    if attribute is not None:
        query['attribute'] = attribute
    if values is not None:
        query['values'] = values
    return json.dumps(query)


class Query:
    """Serialized query helpers."""

    @staticmethod
    def equal(attribute: str, value: Union[Any, List[Any]]) -> str:
        values = value if isinstance(value, list) else [value]
        return _query('equal', attribute, values)

    @staticmethod
    def order_desc(attribute: str) -> str:
        return _query('orderDesc', attribute)

    @staticmethod
    def order_asc(attribute: str) -> str:
        return _query('orderAsc', attribute)

    @staticmethod
    def limit(count: int) -> str:
        return _query('limit', values=[count])
