"""Base repository with common table operations"""
from typing import Any, Dict, Generic, List, Type, TypeVar

from pydantic import BaseModel
from supabase import AsyncClient  # type: ignore

T = TypeVar('T', bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Base repository providing common database operations.
    Hides Supabase implementation details from the rest of the application.
    """

    def __init__(self, client: AsyncClient, table_name: str, model_class: Type[T]):
        self._client = client
        self._table_name = table_name
        self._model_class = model_class

    def _to_model(self, data: Dict[str, Any]) -> T:
        """Convert database dict to model"""
        return self._model_class(**data)

    def _to_models(self, data: List[Dict[str, Any]]) -> List[T]:
        """Convert list of database dicts to models"""
        return [self._to_model(item) for item in data]

    async def find_all(self, order_by: str, desc: bool = False) -> List[T]:
        """Find all records ordered by a column"""
        response = await (
            self._client.table(self._table_name)
            .select("*")
            .order(order_by, desc=desc)
            .execute()
        )
        return self._to_models(response.data or [])

    async def delete_all(self, key: str = "id") -> None:
        """Delete every record (PostgREST requires a filter, so match key <> '')"""
        await self._client.table(self._table_name).delete().neq(key, "").execute()

    async def insert_many(self, items: List[BaseModel]) -> List[T]:
        """Insert several records in one request"""
        if not items:
            return []

        rows = [item.model_dump(exclude_none=True, mode='json') for item in items]
        response = await self._client.table(self._table_name).insert(rows).execute()

        if not response.data:
            raise ValueError("Failed to insert records")

        return self._to_models(response.data)
