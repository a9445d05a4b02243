from flask import Blueprint, jsonify, request

from gymadmin.models.member import Member
from gymadmin.models.workout import SORT_FIELDS, Workout, WorkoutType
from gymadmin.utils.decorators import login_required
from gymadmin.utils.errors import BadRequestError, NotFoundError
from gymadmin.utils.helpers import (
    pagination_info, parse_date_arg, parse_int, parse_pagination, parse_sort,
)
from gymadmin.utils.validators import validate_workout

workouts_bp = Blueprint('workouts', __name__)


def _get_workout_or_404(workout_id):
    workout = Workout.get_by_id(workout_id)
    if not workout:
        raise NotFoundError('Workout not found')
    return workout


def _date_range(args):
    start_date = parse_date_arg(args, 'startDate', 'Invalid start date')
    end_date = parse_date_arg(args, 'endDate', 'Invalid end date', end_of_day=True)
    return start_date, end_date


@workouts_bp.route('', methods=['GET'])
@login_required
def list_workouts():
    page, limit = parse_pagination(request.args)
    member_id = request.args.get('memberId')
    if member_id:
        member_id = parse_int(member_id, 'Invalid member ID', minimum=1)
    workout_type = request.args.get('workoutType')
    if workout_type:
        try:
            workout_type = WorkoutType(workout_type.strip().upper()).value
        except ValueError:
            raise BadRequestError('Invalid workout type')
    start_date, end_date = _date_range(request.args)
    sort_column, sort_order = parse_sort(request.args, SORT_FIELDS, 'workoutAt', 'desc')

    workouts, total = Workout.search(
        member_id=member_id or None, workout_type=workout_type or None,
        start_date=start_date, end_date=end_date, page=page, limit=limit,
        sort_column=sort_column, sort_order=sort_order,
    )
    return jsonify({
        'success': True,
        'data': {
            'workouts': [w.to_dict() for w in workouts],
            'pagination': pagination_info(page, limit, total),
        },
    })


@workouts_bp.route('/<int:workout_id>', methods=['GET'])
@login_required
def get_workout(workout_id):
    return jsonify({'success': True, 'data': {'workout': _get_workout_or_404(workout_id).to_dict()}})


@workouts_bp.route('', methods=['POST'])
@login_required
def create_workout():
    data = validate_workout(request.get_json(silent=True))
    if not Member.get_by_id(data['member_id']):
        raise NotFoundError('Member not found')

    workout = Workout.create(data)
    return jsonify({
        'success': True,
        'message': 'Workout created successfully',
        'data': {'workout': Workout.get_by_id(workout.id).to_dict()},
    }), 201


@workouts_bp.route('/<int:workout_id>', methods=['PUT'])
@login_required
def update_workout(workout_id):
    data = validate_workout(request.get_json(silent=True), partial=True)
    workout = _get_workout_or_404(workout_id)
    workout.apply_update(data)
    return jsonify({
        'success': True,
        'message': 'Workout updated successfully',
        'data': {'workout': workout.to_dict()},
    })


@workouts_bp.route('/<int:workout_id>', methods=['DELETE'])
@login_required
def delete_workout(workout_id):
    _get_workout_or_404(workout_id).delete()
    return jsonify({'success': True, 'message': 'Workout deleted successfully'})


@workouts_bp.route('/stats/overview', methods=['GET'])
@login_required
def workout_stats():
    return jsonify({'success': True, 'data': Workout.get_overview()})


@workouts_bp.route('/member/<int:member_id>/history', methods=['GET'])
@login_required
def member_history(member_id):
    """A member's workouts in a date range plus lifetime totals"""
    page, limit = parse_pagination(request.args)
    start_date, end_date = _date_range(request.args)
    if not Member.get_by_id(member_id):
        raise NotFoundError('Member not found')

    workouts, total = Workout.search(member_id=member_id, start_date=start_date,
                                     end_date=end_date, page=page, limit=limit)
    return jsonify({
        'success': True,
        'data': {
            'workouts': [w.to_dict() for w in workouts],
            'pagination': pagination_info(page, limit, total),
            'stats': Workout.get_member_totals(member_id),
        },
    })
