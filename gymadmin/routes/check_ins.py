from flask import Blueprint, current_app, jsonify, request

from gymadmin.models.check_in import CheckIn
from gymadmin.models.member import Member
from gymadmin.utils.decorators import login_required
from gymadmin.utils.errors import BadRequestError, NotFoundError
from gymadmin.utils.helpers import pagination_info, parse_int, parse_pagination
from gymadmin.utils.validators import validate_check_in

check_ins_bp = Blueprint('check_ins', __name__)


@check_ins_bp.route('', methods=['GET'])
@login_required
def list_check_ins():
    page, limit = parse_pagination(request.args)
    member_id = request.args.get('memberId')
    if member_id:
        member_id = parse_int(member_id, 'Invalid member ID', minimum=1)

    check_ins, total = CheckIn.search(member_id=member_id or None, page=page, limit=limit)
    return jsonify({
        'success': True,
        'data': {
            'checkIns': [c.to_dict() for c in check_ins],
            'pagination': pagination_info(page, limit, total),
        },
    })


@check_ins_bp.route('', methods=['POST'])
@login_required
def create_check_in():
    """Record a visit; archived members cannot check in"""
    data = validate_check_in(request.get_json(silent=True))
    member = Member.get_by_id(data['member_id'])
    if not member:
        raise NotFoundError('Member not found')
    if member.is_archived:
        raise BadRequestError('Archived members cannot check in')

    check_in = CheckIn.record(member.id, data.get('check_in_at'))
    current_app.logger.info("Member %s checked in", member.id)
    return jsonify({
        'success': True,
        'message': 'Check-in recorded successfully',
        'data': {'checkIn': check_in.to_dict()},
    }), 201
