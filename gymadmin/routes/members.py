from flask import Blueprint, jsonify, request

from gymadmin.models.member import SORT_FIELDS, Member
from gymadmin.utils.decorators import login_required
from gymadmin.utils.errors import NotFoundError
from gymadmin.utils.filters import MemberFilter
from gymadmin.utils.helpers import pagination_info, parse_pagination, parse_sort, utcnow
from gymadmin.utils.validators import validate_member

members_bp = Blueprint('members', __name__)


def _get_member_or_404(member_id):
    member = Member.get_by_id(member_id)
    if not member:
        raise NotFoundError('Member not found')
    return member


@members_bp.route('', methods=['GET'])
@login_required
def list_members():
    """Paginated, filtered and sorted member list"""
    page, limit = parse_pagination(request.args)
    member_filter = MemberFilter.from_args(request.args)
    sort_column, sort_order = parse_sort(request.args, SORT_FIELDS, 'name', 'asc')

    now = utcnow()
    members, total = Member.search(member_filter, page, limit, sort_column, sort_order, now)
    return jsonify({
        'success': True,
        'data': {
            'members': [m.to_dict(now) for m in members],
            'pagination': pagination_info(page, limit, total),
        },
    })


@members_bp.route('/<int:member_id>', methods=['GET'])
@login_required
def get_member(member_id):
    member = _get_member_or_404(member_id)
    data = member.to_dict()
    data.update(member.get_recent_history(limit=10))
    return jsonify({'success': True, 'data': {'member': data}})


@members_bp.route('', methods=['POST'])
@login_required
def create_member():
    member = Member.create(validate_member(request.get_json(silent=True)))
    return jsonify({
        'success': True,
        'message': 'Member created successfully',
        'data': {'member': member.to_dict()},
    }), 201


@members_bp.route('/<int:member_id>', methods=['PUT'])
@login_required
def update_member(member_id):
    data = validate_member(request.get_json(silent=True), partial=True)
    member = _get_member_or_404(member_id)
    member.apply_update(data)
    return jsonify({
        'success': True,
        'message': 'Member updated successfully',
        'data': {'member': member.to_dict()},
    })


@members_bp.route('/<int:member_id>', methods=['DELETE'])
@login_required
def archive_member(member_id):
    """Soft delete: the member is archived, never removed"""
    member = _get_member_or_404(member_id)
    member.archive()
    return jsonify({'success': True, 'message': 'Member archived successfully'})


@members_bp.route('/<int:member_id>/restore', methods=['PATCH'])
@login_required
def restore_member(member_id):
    member = _get_member_or_404(member_id)
    member.restore()
    return jsonify({
        'success': True,
        'message': 'Member restored successfully',
        'data': {'member': member.to_dict()},
    })


@members_bp.route('/<int:member_id>/stats', methods=['GET'])
@login_required
def member_stats(member_id):
    member = _get_member_or_404(member_id)
    return jsonify({'success': True, 'data': member.get_stats()})
