"""
Audit Log model
Records who changed what on rota entities
"""
from datetime import datetime


def create_audit_model(db):
    """Factory function to create AuditLog model with db instance"""

    class AuditLog(db.Model):
        """
        Audit trail entry

        old_values / new_values hold JSON snapshots of the changed fields.
        """
        __tablename__ = 'audit_logs'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=True)
        user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
        action = db.Column(db.String(50), nullable=False)
        entity_type = db.Column(db.String(50), nullable=False)
        entity_id = db.Column(db.Integer, nullable=True)
        old_values = db.Column(db.JSON)
        new_values = db.Column(db.JSON)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

        __table_args__ = (
            db.Index('idx_audit_entity', 'entity_type', 'entity_id'),
        )

        def __repr__(self):
            return f'<AuditLog {self.action} {self.entity_type}:{self.entity_id}>'

    return AuditLog
