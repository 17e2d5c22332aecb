"""
Worker availability models
Tracks when cleaners can/cannot work
"""
from datetime import datetime


def create_availability_models(db):
    """Factory function to create availability models with db instance"""

    class CleanerAvailability(db.Model):
        """
        Recurring weekly availability window

        day_of_week uses 0=Sunday ... 6=Saturday. Times are "HH:MM" strings
        so that window checks compare lexically, as the records are entered.
        A worker may have several windows per day, or none at all.
        """
        __tablename__ = 'cleaner_availability'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
        day_of_week = db.Column(db.Integer, nullable=False)
        start_time = db.Column(db.String(5), nullable=False, default='00:00')
        end_time = db.Column(db.String(5), nullable=False, default='23:59')
        is_available = db.Column(db.Boolean, nullable=False, default=True)

        __table_args__ = (
            db.Index('idx_cleaner_availability_user_day', 'user_id', 'day_of_week'),
            db.CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='check_day_of_week'),
        )

        def to_dict(self):
            return {
                'id': self.id,
                'day_of_week': self.day_of_week,
                'start_time': self.start_time,
                'end_time': self.end_time,
                'is_available': self.is_available,
            }

        def __repr__(self):
            status = "available" if self.is_available else "unavailable"
            return f'<CleanerAvailability {self.user_id} day={self.day_of_week} {self.start_time}-{self.end_time}: {status}>'

    class LeaveRequest(db.Model):
        """
        Leave requested by a worker
        Only approved requests make a worker unavailable
        """
        __tablename__ = 'leave_requests'

        id = db.Column(db.Integer, primary_key=True, autoincrement=True)
        user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
        start_date = db.Column(db.Date, nullable=False)
        end_date = db.Column(db.Date, nullable=False)
        status = db.Column(db.String(20), nullable=False, default='pending')
        reason = db.Column(db.String(500))
        created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

        __table_args__ = (
            db.Index('idx_leave_requests_dates', 'user_id', 'start_date', 'end_date'),
            db.CheckConstraint('end_date >= start_date', name='check_leave_date_range'),
        )

        def to_dict(self):
            return {
                'id': self.id,
                'start_date': self.start_date.isoformat(),
                'end_date': self.end_date.isoformat(),
                'status': self.status,
                'reason': self.reason,
            }

        def __repr__(self):
            return f'<LeaveRequest {self.user_id}: {self.start_date} to {self.end_date} ({self.status})>'

    return CleanerAvailability, LeaveRequest
