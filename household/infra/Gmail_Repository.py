"""Gmail OAuth connections, one per user."""
from typing import Optional

from household.infra.Table_Repository import TableRepository, Row


class GmailConnectionRepository(TableRepository):
    table = "gmail_connections"

    def for_user(self, user_id: str) -> Optional[Row]:
        return self.find_one(user_id)

    def save_connection(self, user_id: str, **fields) -> Row:
        return self.upsert(dict(fields, user_id=user_id), keys=("user_id",), user_id=user_id)
