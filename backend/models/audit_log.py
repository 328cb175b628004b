# models/audit_log.py

AUDIT_LOG_TABLE = "Audit_Log"

ACTION_CREATED = "created"
ACTION_STATUS_CHANGED = "status_changed"


class AuditColumns:
    ID = "id"
    DEAL_ID = "deal_id"
    USER_EMAIL = "user_email"
    ACTION = "action"
    TIMESTAMP = "timestamp"
    NOTES = "notes"


AUDIT_HEADER = [
    AuditColumns.ID,
    AuditColumns.DEAL_ID,
    AuditColumns.USER_EMAIL,
    AuditColumns.ACTION,
    AuditColumns.TIMESTAMP,
    AuditColumns.NOTES,
]
