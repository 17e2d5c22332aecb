"""
Company model - the tenant boundary for every rota record
"""
from datetime import datetime


def create_company_model(db):
    """Factory function to create Company model with db instance"""

    class Company(db.Model):
        """
        Cleaning company (tenant)

        Workers, properties, skills and tasks all belong to exactly one
        company. Assignments across companies are always rejected.
        """
        __tablename__ = 'companies'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        name = db.Column(db.String(200), nullable=False)
        is_active = db.Column(db.Boolean, nullable=False, default=True)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        def to_dict(self):
            return {
                'id': self.id,
                'name': self.name,
                'is_active': self.is_active,
            }

        def __repr__(self):
            return f'<Company {self.id}: {self.name}>'

    return Company
