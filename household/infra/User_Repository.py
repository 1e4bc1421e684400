"""User accounts and bearer-token lookup."""
import secrets
from typing import Optional

from household.infra.Table_Repository import TableRepository, Row


class UserRepository(TableRepository):
    table = "users"

    def get_by_token(self, token: str) -> Optional[Row]:
        if not token:
            return None
        for row in self.list():
            stored = row.get("token") or ""
            if stored and secrets.compare_digest(stored, token):
                return row
        return None

    def create_user(self, email: str) -> Row:
        """Creates a user with a fresh API token."""
        return self.insert({"email": email, "token": secrets.token_urlsafe(32)})
