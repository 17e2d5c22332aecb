"""
Skill catalog and the two skill relations:
what a worker has, and what a property needs
"""


def create_skill_models(db):
    """Factory function to create skill models with db instance"""

    class Skill(db.Model):
        """Flat company-wide skill catalog"""
        __tablename__ = 'skills'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=True)
        name = db.Column(db.String(100), nullable=False)
        category = db.Column(db.String(50))

        def to_dict(self):
            return {'id': self.id, 'name': self.name, 'category': self.category}

        def __repr__(self):
            return f'<Skill {self.id}: {self.name}>'

    class CleanerSkill(db.Model):
        """
        Skill held by a worker

        The level is informational; skill matching only tests membership.
        """
        __tablename__ = 'cleaner_skills'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
        skill_id = db.Column(db.Integer, db.ForeignKey('skills.id'), nullable=False)
        level = db.Column(db.String(20), default='basic')

        __table_args__ = (
            db.UniqueConstraint('user_id', 'skill_id', name='unique_cleaner_skill'),
        )

        skill = db.relationship('Skill', lazy='joined')

        def __repr__(self):
            return f'<CleanerSkill user={self.user_id} skill={self.skill_id} ({self.level})>'

    class PropertyRequiredSkill(db.Model):
        """
        Skill declared by a property

        is_required=False marks a preferred skill.
        """
        __tablename__ = 'property_required_skills'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        property_id = db.Column(db.Integer, db.ForeignKey('properties.id'), nullable=False)
        skill_id = db.Column(db.Integer, db.ForeignKey('skills.id'), nullable=False)
        is_required = db.Column(db.Boolean, nullable=False, default=True)

        __table_args__ = (
            db.UniqueConstraint('property_id', 'skill_id', name='unique_property_skill'),
        )

        skill = db.relationship('Skill', lazy='joined')

        def __repr__(self):
            kind = 'required' if self.is_required else 'preferred'
            return f'<PropertyRequiredSkill property={self.property_id} skill={self.skill_id} {kind}>'

    return Skill, CleanerSkill, PropertyRequiredSkill
