"""Stock persistence: items, usage logs, weight readings and retailer shipping profiles."""
from collections import defaultdict
from typing import Dict, List, Optional

from household.domain.StockItem import StockItem, UsageLog, ShippingProfile
from household.infra.Table_Repository import Row, TableRepository


class StockRepository(TableRepository):
    table = "stock_items"

    def list_items(self, user_id: str, kind: Optional[str] = None) -> List[StockItem]:
        filters = {"kind": kind} if kind else {}
        return [StockItem.from_dict(r) for r in self.list(user_id, **filters)]

    def get_item(self, item_id: str, user_id: str) -> Optional[StockItem]:
        row = self.get(item_id, user_id)
        return StockItem.from_dict(row) if row else None

    def claim_reorder_alert(self, item_id: str, user_id: str, alert_key: Optional[str]) -> bool:
        """Remember which reorder state was last alerted; False when it is unchanged."""
        row = self.get(item_id, user_id)
        if row is None or row.get("reorder_alert") == alert_key:
            return False
        self.update(item_id, {"reorder_alert": alert_key}, user_id)
        return True


class UsageLogRepository(TableRepository):
    table = "usage_logs"

    def logs_by_item(self, user_id: str) -> Dict[str, List[UsageLog]]:
        grouped: Dict[str, List[UsageLog]] = defaultdict(list)
        for row in self.list(user_id):
            log = UsageLog.from_dict(row)
            grouped[log.item_id].append(log)
        return grouped


class ShippingProfileRepository(TableRepository):
    table = "shipping_profiles"

    def profiles_by_retailer(self, user_id: str) -> Dict[str, ShippingProfile]:
        return {r["retailer"]: ShippingProfile.from_dict(r) for r in self.list(user_id) if r.get("retailer")}


class WeightReadingRepository(TableRepository):
    table = "weight_readings"

    def readings_for_item(self, item_id: str, user_id: str) -> List[Row]:
        rows = self.list(user_id, item_id=item_id)
        return sorted(rows, key=lambda r: (r.get("recorded_at") or "", r.get("created_at") or ""))
