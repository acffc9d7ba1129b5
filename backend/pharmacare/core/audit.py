"""
Audit logging for stock movements, transactions and account events.

Entries are JSON lines on the "audit" logger so they can be shipped
separately from application logs. Passwords and tokens are never logged.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional, Dict

audit_logger = logging.getLogger("audit")


def _emit(entry: Dict[str, Any], level: int = logging.INFO) -> None:
    entry = {"timestamp": datetime.now(timezone.utc).isoformat(), **entry}
    audit_logger.log(level, json.dumps(entry, default=str))


class AuditLog:
    """Central audit logging."""

    @staticmethod
    def log_authentication(action: str, email: str, success: bool, reason: str = ""):
        """
        action: "login", "logout", "register"

        Usage:
            AuditLog.log_authentication("login", "user@example.com", False, reason="Invalid password")
        """
        entry = {"event_type": f"auth.{action}", "email": email, "success": success}
        if reason and not success:
            entry["reason"] = reason
        _emit(entry, logging.INFO if success else logging.WARNING)

    @staticmethod
    def log_stock_adjustment(medicine_id: int, delta: int, stock_after: int, reason: str):
        _emit({
            "event_type": "stock.adjust",
            "medicine_id": medicine_id,
            "delta": delta,
            "stock_after": stock_after,
            "reason": reason,
        })

    @staticmethod
    def log_action(
        action: str,
        resource_type: str,
        resource_id: int,
        user_id: Optional[int] = None,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log a change to a business record.

        Usage:
            AuditLog.log_action("create", "sale", 12, user_id=1, changes={"quantity": 5})
        """
        entry = {
            "event_type": f"{resource_type}.{action}",
            "resource_id": resource_id,
            "user_id": user_id,
        }
        if changes:
            entry["changes"] = changes
        _emit(entry)

    @staticmethod
    def log_permission_change(user_id: int, changed_by: Optional[int], role: str, permissions: list):
        _emit({
            "event_type": "permissions.changed",
            "user_id": user_id,
            "changed_by": changed_by,
            "role": role,
            "permissions": permissions,
        })
