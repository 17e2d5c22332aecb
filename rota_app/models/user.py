"""
User model and role hierarchy
Workers ("cleaners") are users with the CLEANER role
"""
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """User roles, lowest privilege first"""
    CLEANER = "CLEANER"
    MANAGER = "MANAGER"
    COMPANY_ADMIN = "COMPANY_ADMIN"
    DEVELOPER = "DEVELOPER"
    OWNER = "OWNER"
    SUPER_ADMIN = "SUPER_ADMIN"

    @property
    def rank(self) -> int:
        return ROLE_RANKS[self]


ROLE_RANKS = {
    UserRole.CLEANER: 0,
    UserRole.MANAGER: 1,
    UserRole.COMPANY_ADMIN: 2,
    UserRole.DEVELOPER: 3,
    UserRole.OWNER: 4,
    UserRole.SUPER_ADMIN: 5,
}

# Roles that may act on any company
GLOBAL_ROLES = frozenset({UserRole.DEVELOPER, UserRole.OWNER, UserRole.SUPER_ADMIN})


def has_at_least_role(role, min_role) -> bool:
    """
    Compare two roles by rank.

    Args:
        role: UserRole or its string value
        min_role: Minimum UserRole required

    Returns:
        bool: True if role ranks at or above min_role. Unknown roles rank lowest.
    """
    try:
        role = UserRole(role)
    except ValueError:
        return False
    return role.rank >= UserRole(min_role).rank


def can_access_company(role, user_company_id, company_id) -> bool:
    """Global roles reach every company; everyone else only their own."""
    try:
        if UserRole(role) in GLOBAL_ROLES:
            return True
    except ValueError:
        return False
    return user_company_id is not None and user_company_id == company_id


def create_user_model(db):
    """Factory function to create User model with db instance"""

    class User(db.Model):
        """
        User model covering workers and operators

        Attributes:
            id: Unique user identifier
            company_id: Owning company (nullable for global staff)
            role: UserRole value
            is_active: Whether the user can be scheduled / log in
            max_working_hours: Optional weekly hour cap used for capacity warnings
        """
        __tablename__ = 'users'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=True)
        email = db.Column(db.String(120), unique=True, nullable=False)
        first_name = db.Column(db.String(100))
        last_name = db.Column(db.String(100))
        role = db.Column(db.String(20), nullable=False, default=UserRole.CLEANER.value)
        is_active = db.Column(db.Boolean, nullable=False, default=True)
        max_working_hours = db.Column(db.Float, nullable=True)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.Index('idx_users_company_role', 'company_id', 'role'),
        )

        company = db.relationship('Company', backref='users', lazy=True)

        @property
        def full_name(self):
            name = ' '.join(part for part in (self.first_name, self.last_name) if part)
            return name or self.email

        @property
        def is_worker(self):
            return self.role == UserRole.CLEANER.value

        def to_dict(self):
            return {
                'id': self.id,
                'company_id': self.company_id,
                'email': self.email,
                'first_name': self.first_name,
                'last_name': self.last_name,
                'role': self.role,
                'is_active': self.is_active,
                'max_working_hours': self.max_working_hours,
            }

        def __repr__(self):
            return f'<User {self.id}: {self.email} ({self.role})>'

    return User
