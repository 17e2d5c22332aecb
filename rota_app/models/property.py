"""
Property model - a location where cleaning tasks take place
"""
from datetime import datetime


def create_property_model(db):
    """Factory function to create Property model with db instance"""

    class Property(db.Model):
        __tablename__ = 'properties'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
        address = db.Column(db.String(255), nullable=False)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        required_skills = db.relationship('PropertyRequiredSkill', backref='property', lazy=True)
        tasks = db.relationship('Task', backref='property', lazy=True)

        def to_dict(self):
            return {'id': self.id, 'address': self.address}

        def __repr__(self):
            return f'<Property {self.id}: {self.address}>'

    return Property
