"""Meal planning persistence: shopping week blackout ranges."""
from typing import List

from household.infra.Table_Repository import TableRepository
from household.logic.mealplan.shopping_week import Blackout


class BlackoutRepository(TableRepository):
    table = "blackouts"

    def list_blackouts(self, user_id: str) -> List[Blackout]:
        return [Blackout.from_dict(r) for r in self.list(user_id)]
