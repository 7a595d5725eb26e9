"""
DynamoDB wrapper exposing the same single-table interface as ``SQLiteStore``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from app.core.config import StorageSettings
from app.core.errors import ItemExistsError


class DynamoDBClient:
    """Item-level CRUD against a table keyed by ``pk``/``sk``."""

    def __init__(self, settings: StorageSettings) -> None:
        self._settings = settings
        self._resource = boto3.resource("dynamodb", region_name=settings.region_name)
        self._table = self._resource.Table(settings.dynamodb_table_name)

    def put_item(self, item: Dict[str, Any], *, if_absent: bool = False) -> None:
        """Put an item, optionally failing when the key is already taken."""
        kwargs: Dict[str, Any] = {"Item": item}
        if if_absent:
            kwargs["ConditionExpression"] = "attribute_not_exists(pk)"
        try:
            self._table.put_item(**kwargs)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise ItemExistsError(f"{item.get('pk')}/{item.get('sk')} already exists") from exc
            raise

    def get_item(self, *, partition_key: str, sort_key: str) -> Optional[Dict[str, Any]]:
        """Retrieve an item using its key (strongly consistent)."""
        response = self._table.get_item(
            Key={"pk": partition_key, "sk": sort_key},
            ConsistentRead=True,
        )
        return response.get("Item")

    def update_item(
        self, *, partition_key: str, sort_key: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Set attributes on an existing item; ``None`` if the item is missing."""
        if not changes:
            return self.get_item(partition_key=partition_key, sort_key=sort_key)

        names = {f"#f{index}": key for index, key in enumerate(changes)}
        values = {f":v{index}": value for index, value in enumerate(changes.values())}
        assignments = ", ".join(f"#f{index} = :v{index}" for index in range(len(changes)))
        try:
            response = self._table.update_item(
                Key={"pk": partition_key, "sk": sort_key},
                UpdateExpression=f"SET {assignments}",
                ConditionExpression="attribute_exists(pk)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return None
            raise
        return response.get("Attributes")

    def delete_item(self, *, partition_key: str, sort_key: str) -> None:
        self._table.delete_item(Key={"pk": partition_key, "sk": sort_key})


__all__ = ["DynamoDBClient"]
