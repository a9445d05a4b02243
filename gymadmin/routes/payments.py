from flask import Blueprint, jsonify, request

from gymadmin.models.member import Member
from gymadmin.models.payment import SORT_FIELDS, Payment, PaymentStatus, PaymentType
from gymadmin.utils.decorators import login_required
from gymadmin.utils.errors import BadRequestError, NotFoundError
from gymadmin.utils.helpers import pagination_info, parse_int, parse_pagination, parse_sort
from gymadmin.utils.validators import validate_payment

payments_bp = Blueprint('payments', __name__)


def _get_payment_or_404(payment_id):
    payment = Payment.get_by_id(payment_id)
    if not payment:
        raise NotFoundError('Payment not found')
    return payment


def _enum_arg(name, enum_cls, message):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return enum_cls(value.strip().upper()).value
    except ValueError:
        raise BadRequestError(message)


@payments_bp.route('', methods=['GET'])
@login_required
def list_payments():
    page, limit = parse_pagination(request.args)
    member_id = request.args.get('memberId')
    if member_id:
        member_id = parse_int(member_id, 'Invalid member ID', minimum=1)
    sort_column, sort_order = parse_sort(request.args, SORT_FIELDS, 'createdAt', 'desc')

    payments, total = Payment.search(
        member_id=member_id or None,
        status=_enum_arg('status', PaymentStatus, 'Invalid status'),
        payment_type=_enum_arg('paymentType', PaymentType, 'Invalid payment type'),
        page=page, limit=limit, sort_column=sort_column, sort_order=sort_order,
    )
    return jsonify({
        'success': True,
        'data': {
            'payments': [p.to_dict() for p in payments],
            'pagination': pagination_info(page, limit, total),
        },
    })


@payments_bp.route('/<int:payment_id>', methods=['GET'])
@login_required
def get_payment(payment_id):
    return jsonify({'success': True, 'data': {'payment': _get_payment_or_404(payment_id).to_dict()}})


@payments_bp.route('', methods=['POST'])
@login_required
def create_payment():
    data = validate_payment(request.get_json(silent=True))
    if not Member.get_by_id(data['member_id']):
        raise NotFoundError('Member not found')

    payment = Payment.create(data)
    return jsonify({
        'success': True,
        'message': 'Payment created successfully',
        'data': {'payment': Payment.get_by_id(payment.id).to_dict()},
    }), 201


@payments_bp.route('/<int:payment_id>', methods=['PUT'])
@login_required
def update_payment(payment_id):
    data = validate_payment(request.get_json(silent=True), partial=True)
    payment = _get_payment_or_404(payment_id)
    payment.apply_update(data)
    return jsonify({
        'success': True,
        'message': 'Payment updated successfully',
        'data': {'payment': payment.to_dict()},
    })


@payments_bp.route('/<int:payment_id>', methods=['DELETE'])
@login_required
def delete_payment(payment_id):
    """Only PENDING payments may be removed"""
    _get_payment_or_404(payment_id).delete()
    return jsonify({'success': True, 'message': 'Payment deleted successfully'})


@payments_bp.route('/<int:payment_id>/mark-paid', methods=['PATCH'])
@login_required
def mark_paid(payment_id):
    body = request.get_json(silent=True) or {}
    notes = body.get('notes') if isinstance(body, dict) else None
    if notes is not None and not isinstance(notes, str):
        raise BadRequestError('notes must be a string')

    payment = _get_payment_or_404(payment_id)
    payment.mark_paid(notes=notes.strip() if notes else None)
    return jsonify({
        'success': True,
        'message': 'Payment marked as paid',
        'data': {'payment': payment.to_dict()},
    })


@payments_bp.route('/stats/overview', methods=['GET'])
@login_required
def payment_stats():
    return jsonify({'success': True, 'data': Payment.get_overview()})
