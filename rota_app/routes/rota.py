"""
Rota API Routes
Workload, conflict, validation, assignment and week-clone endpoints for the
admin rota planner

All endpoints require MANAGER or above and act on one company.
"""
from datetime import datetime
import logging

from flask import Blueprint, request, jsonify, current_app

from rota_app.error_handlers import (
    handle_errors,
    CrossTenantException,
    ResourceNotFoundException,
    ValidationException,
)
from rota_app.extensions import limiter
from rota_app.models import get_models, get_db, UserRole, can_access_company
from rota_app.routes.auth import get_current_user, require_role, resolve_company_id
from rota_app.services import (
    AssignmentValidator,
    ConflictDetector,
    WeekCloner,
    WorkloadAnalytics,
    TaskCriteria,
    find_tasks,
)
from rota_app.services.week_calendar import (
    end_of_day,
    has_time_of_day,
    parse_date_param,
    week_bounds,
)

logger = logging.getLogger(__name__)

rota_bp = Blueprint('rota', __name__, url_prefix='/api/admin/rota')


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationException('Request body must be a JSON object')
    return data


def _window(start_value, end_value):
    """
    Resolve a week window from request values.

    With no start, the current week is used. With no end, the window runs to
    the end of the start's week. A date-only end covers that whole day.
    """
    if start_value in (None, ''):
        return week_bounds(datetime.utcnow())

    start = parse_date_param(start_value, 'weekStart')
    if end_value in (None, ''):
        return start, week_bounds(start)[1]

    end = parse_date_param(end_value, 'weekEnd')
    if not has_time_of_day(end):
        end = end_of_day(end)
    if end < start:
        raise ValidationException('weekEnd must not be before weekStart')
    return start, end


def _authorize_task(task_id):
    """Load a task the current user may act on."""
    if task_id in (None, ''):
        raise ValidationException('taskId is required')
    try:
        task_id = int(task_id)
    except (TypeError, ValueError):
        raise ValidationException('taskId must be an integer')

    Task = get_models()['Task']
    task = get_db().session.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise ResourceNotFoundException(f"Task not found: {task_id}")

    user = get_current_user()
    if not can_access_company(user.role, user.company_id, task.company_id):
        raise CrossTenantException(
            'You do not have access to this task',
            details={'task_id': task_id}
        )
    return task


def _validator() -> AssignmentValidator:
    cfg = current_app.config
    validator = AssignmentValidator(
        get_db().session,
        get_models(),
        default_duration_minutes=cfg.get('ROTA_DEFAULT_DURATION_MINUTES', 120),
        warn_preferred_skills=cfg.get('ROTA_WARN_PREFERRED_SKILLS', True),
    )
    validator.SLOW_VALIDATION_MS = cfg.get('ROTA_SLOW_VALIDATION_MS', 200)
    return validator


@rota_bp.route('', methods=['GET'])
@handle_errors
@require_role(UserRole.MANAGER)
def get_rota():
    """
    GET /api/admin/rota - Tasks and workload for a week.

    Query Parameters:
        weekStart: ISO date (default: Monday of the current week)
        weekEnd: ISO date (default: Sunday of weekStart's week)
        companyId: Company to view (global roles only)

    Returns:
        {
            "success": true,
            "data": {
                "week_start": "...", "week_end": "...",
                "tasks": [...],
                "workload": {"per_worker": [...], "stats": {...}}
            }
        }
    """
    company_id = resolve_company_id()
    start, end = _window(request.args.get('weekStart'), request.args.get('weekEnd'))
    db = get_db()
    models = get_models()

    tasks = find_tasks(db.session, models, TaskCriteria(
        company_id=company_id,
        date_from=start,
        date_to=end,
        scheduled_only=True,
    ))

    analytics = WorkloadAnalytics(
        db.session, models,
        default_duration_minutes=current_app.config.get('ROTA_DEFAULT_DURATION_MINUTES', 120),
        high_ratio=current_app.config.get('ROTA_WORKLOAD_HIGH_RATIO', 0.8),
    )
    workload = analytics.get_workload_data(company_id, start, end)

    return jsonify({
        'success': True,
        'data': {
            'week_start': start.isoformat(),
            'week_end': end.isoformat(),
            'tasks': [t.to_dict() for t in tasks],
            'workload': workload,
        }
    })


@rota_bp.route('/conflicts', methods=['GET'])
@handle_errors
@require_role(UserRole.MANAGER)
def get_conflicts():
    """
    GET /api/admin/rota/conflicts - Same-day double bookings.

    Either:
        weekStart, weekEnd: every conflict in the company's window
    or:
        cleanerId, date: the cleaner's active tasks on one day; has_conflict
        is true when any exist
    """
    company_id = resolve_company_id()
    db = get_db()
    detector = ConflictDetector(db.session, get_models())

    cleaner_id = request.args.get('cleanerId')
    if cleaner_id not in (None, ''):
        try:
            cleaner_id = int(cleaner_id)
        except (TypeError, ValueError):
            raise ValidationException('cleanerId must be an integer')
        day = parse_date_param(request.args.get('date'), 'date')
        tasks = detector.tasks_on_day(cleaner_id, day, company_id=company_id)
        return jsonify({
            'success': True,
            'data': {
                'cleaner_id': cleaner_id,
                'date': day.date().isoformat(),
                'has_conflict': len(tasks) > 0,
                'tasks': [t.to_dict() for t in tasks],
            }
        })

    if not request.args.get('weekStart') or not request.args.get('weekEnd'):
        raise ValidationException('Provide weekStart and weekEnd, or cleanerId and date')

    start, end = _window(request.args.get('weekStart'), request.args.get('weekEnd'))
    conflicts = detector.detect_for_company(company_id, start, end)

    return jsonify({
        'success': True,
        'data': {
            'week_start': start.isoformat(),
            'week_end': end.isoformat(),
            'conflicts': [c.to_dict() for c in conflicts],
        }
    })


@rota_bp.route('/validate', methods=['POST'])
@handle_errors
@require_role(UserRole.MANAGER)
def validate_assignment():
    """
    POST /api/admin/rota/validate - Check a proposed assignment without writing.

    Request Body (JSON):
        {
            "taskId": 12,
            "cleanerId": 7,
            "scheduledDate": "2026-03-04T09:00:00",   (optional)
            "propertyId": 3,                          (optional)
            "estimatedDurationMinutes": 90,           (optional)
            "weekStart": "2026-03-02",                (optional)
            "weekEnd": "2026-03-08"                   (optional)
        }
    """
    data = _json_body()
    task = _authorize_task(data.get('taskId'))

    week_start = week_end = None
    if data.get('weekStart') or data.get('weekEnd'):
        week_start, week_end = _window(data.get('weekStart'), data.get('weekEnd'))

    result = _validator().validate(
        worker_id=data.get('cleanerId'),
        task_id=task.id,
        scheduled_date=data.get('scheduledDate'),
        property_id=data.get('propertyId'),
        estimated_duration_minutes=data.get('estimatedDurationMinutes'),
        week_start=week_start,
        week_end=week_end,
    )

    return jsonify({'success': True, 'data': result.to_dict()})


@rota_bp.route('/assign', methods=['POST'])
@limiter.limit("120 per minute")
@handle_errors
@require_role(UserRole.MANAGER)
def assign_task():
    """
    POST /api/admin/rota/assign - Validate and assign a cleaner to a task.

    Request Body (JSON):
        {
            "taskId": 12,
            "cleanerId": 7,
            "scheduledDate": "2026-03-04",   (optional)
            "ignoreWarnings": false          (optional)
        }

    Warnings are returned with the updated task; they do not block the
    assignment unless ROTA_REJECT_ON_WARNINGS is enabled.
    """
    data = _json_body()
    task = _authorize_task(data.get('taskId'))
    user = get_current_user()

    outcome = _validator().assign(
        task_id=task.id,
        worker_id=data.get('cleanerId'),
        scheduled_date=data.get('scheduledDate'),
        ignore_warnings=bool(data.get('ignoreWarnings', False)),
        acting_user_id=user.id,
        reject_on_warnings=current_app.config.get('ROTA_REJECT_ON_WARNINGS', False),
    )

    return jsonify({
        'success': True,
        'data': {
            'task': outcome.task.to_dict(),
            'warnings': outcome.warnings,
            'warnings_acknowledged': outcome.warnings_acknowledged,
            'previous_worker_id': outcome.previous_worker_id,
        }
    })


@rota_bp.route('/week-clone', methods=['POST'])
@limiter.limit("10 per minute")
@handle_errors
@require_role(UserRole.MANAGER)
def clone_week():
    """
    POST /api/admin/rota/week-clone - Copy last week's tasks into this week.

    Request Body (JSON):
        {
            "weekStart": "2026-03-09",   (or "fromDate")
            "weekEnd": "2026-03-15",     (or "toDate")
            "companyId": 1               (optional, global roles only)
        }
    """
    data = _json_body()
    company_id = resolve_company_id(data.get('companyId'))

    start_value = data.get('weekStart') or data.get('fromDate')
    end_value = data.get('weekEnd') or data.get('toDate')
    if not start_value or not end_value:
        raise ValidationException('weekStart and weekEnd (or fromDate and toDate) are required')

    logger.info(f"Week clone requested by user {get_current_user().id} for company {company_id}: {start_value}..{end_value}")
    result = WeekCloner(get_db().session, get_models()).clone_week(company_id, start_value, end_value)

    return jsonify({'success': True, 'data': result.to_dict()}), 201
