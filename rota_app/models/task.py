"""
Task models and the task status machine
A task is one scheduled unit of cleaning work at a property
"""
from datetime import datetime
from enum import Enum


class TaskStatus(str, Enum):
    """Task lifecycle states, in forward order"""
    DRAFT = "DRAFT"
    PLANNED = "PLANNED"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    QA_REVIEW = "QA_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ARCHIVED = "ARCHIVED"


# Statuses that occupy a worker's calendar (conflicts and workload)
ACTIVE_STATUSES = (
    TaskStatus.ASSIGNED,
    TaskStatus.IN_PROGRESS,
    TaskStatus.SUBMITTED,
    TaskStatus.PLANNED,
)
ACTIVE_STATUS_VALUES = tuple(s.value for s in ACTIVE_STATUSES)

# Ordinary forward/branch transitions
TRANSITIONS = {
    TaskStatus.DRAFT: frozenset({TaskStatus.PLANNED}),
    TaskStatus.PLANNED: frozenset({TaskStatus.ASSIGNED}),
    TaskStatus.ASSIGNED: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.SUBMITTED}),
    TaskStatus.SUBMITTED: frozenset({TaskStatus.QA_REVIEW}),
    TaskStatus.QA_REVIEW: frozenset({TaskStatus.APPROVED, TaskStatus.REJECTED}),
    TaskStatus.APPROVED: frozenset({TaskStatus.ARCHIVED}),
    TaskStatus.REJECTED: frozenset({TaskStatus.ARCHIVED}),
    TaskStatus.ARCHIVED: frozenset(),
}

_ORDER = list(TaskStatus)


class InvalidTransition(ValueError):
    """Raised when a task cannot move to the requested status"""


def can_transition(current, target) -> bool:
    return TaskStatus(target) in TRANSITIONS[TaskStatus(current)]


def is_regression(current, target) -> bool:
    """True if target sits earlier in the lifecycle than current."""
    return _ORDER.index(TaskStatus(target)) < _ORDER.index(TaskStatus(current))


def assignment_transition(current) -> TaskStatus:
    """
    Forced transition applied when a worker is assigned.

    Any task that is not archived moves to ASSIGNED, including tasks that
    had already progressed past it (SUBMITTED, QA_REVIEW, ...).

    Raises:
        InvalidTransition: If the task is archived
    """
    current = TaskStatus(current or TaskStatus.DRAFT)
    if current == TaskStatus.ARCHIVED:
        raise InvalidTransition('Archived tasks cannot be assigned')
    return TaskStatus.ASSIGNED


def clone_transition(current) -> TaskStatus:
    """Forced transition for cloned tasks: progress is reset to PLANNED."""
    return TaskStatus.PLANNED


def create_task_models(db):
    """Factory function to create task models with db instance"""

    class Task(db.Model):
        """
        Scheduled cleaning task

        Attributes:
            scheduled_date: When the task is planned; only the calendar day
                matters for conflict detection
            estimated_duration_minutes: Nullable; workload treats NULL as 120
            assigned_user_id: Primary assignment
            assignments: Additional TaskAssignment rows (multi-cleaner tasks)
        """
        __tablename__ = 'tasks'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        company_id = db.Column(db.Integer, db.ForeignKey('companies.id'), nullable=False)
        property_id = db.Column(db.Integer, db.ForeignKey('properties.id'), nullable=False)
        title = db.Column(db.String(200), nullable=False)
        description = db.Column(db.Text)
        scheduled_date = db.Column(db.DateTime, nullable=True)
        estimated_duration_minutes = db.Column(db.Integer, nullable=True)
        status = db.Column(db.String(20), nullable=False, default=TaskStatus.DRAFT.value)
        assigned_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
        updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

        __table_args__ = (
            db.Index('idx_tasks_company_date', 'company_id', 'scheduled_date'),
            db.Index('idx_tasks_assignee_date', 'assigned_user_id', 'scheduled_date'),
            db.Index('idx_tasks_status', 'status'),
        )

        assigned_user = db.relationship('User', foreign_keys=[assigned_user_id], lazy=True)
        assignments = db.relationship(
            'TaskAssignment', backref='task', lazy=True, cascade='all, delete-orphan'
        )
        checklists = db.relationship(
            'ChecklistItem', backref='task', lazy=True,
            cascade='all, delete-orphan', order_by='ChecklistItem.order'
        )

        @property
        def assigned_worker_ids(self):
            """Canonical set of assigned workers (primary plus multi-assignment)."""
            ids = {a.user_id for a in self.assignments}
            if self.assigned_user_id is not None:
                ids.add(self.assigned_user_id)
            return ids

        def to_dict(self):
            return {
                'id': self.id,
                'company_id': self.company_id,
                'property_id': self.property_id,
                'title': self.title,
                'description': self.description,
                'scheduled_date': self.scheduled_date.isoformat() if self.scheduled_date else None,
                'estimated_duration_minutes': self.estimated_duration_minutes,
                'status': self.status,
                'assigned_user_id': self.assigned_user_id,
                'assigned_worker_ids': sorted(self.assigned_worker_ids),
            }

        def __repr__(self):
            return f'<Task {self.id}: {self.title} [{self.status}]>'

    class TaskAssignment(db.Model):
        """Additional worker on a task"""
        __tablename__ = 'task_assignments'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        task_id = db.Column(db.Integer, db.ForeignKey('tasks.id'), nullable=False)
        user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.UniqueConstraint('task_id', 'user_id', name='unique_task_assignment'),
            db.Index('idx_task_assignments_user', 'user_id'),
        )

        def __repr__(self):
            return f'<TaskAssignment task={self.task_id} user={self.user_id}>'

    class ChecklistItem(db.Model):
        """Ordered checklist entry for a task"""
        __tablename__ = 'checklist_items'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        task_id = db.Column(db.Integer, db.ForeignKey('tasks.id'), nullable=False)
        title = db.Column(db.String(255), nullable=False)
        order = db.Column(db.Integer, nullable=False, default=0)
        is_completed = db.Column(db.Boolean, nullable=False, default=False)

        def to_dict(self):
            return {
                'id': self.id,
                'task_id': self.task_id,
                'title': self.title,
                'order': self.order,
                'is_completed': self.is_completed,
            }

        def __repr__(self):
            return f'<ChecklistItem {self.id} task={self.task_id} #{self.order}>'

    return Task, TaskAssignment, ChecklistItem
