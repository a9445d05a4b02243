# tests/unit/test_models_payment.py
from datetime import timedelta

import pytest

from gymadmin.models.member import Member
from gymadmin.models.payment import Payment
from gymadmin.utils.errors import BadRequestError
from gymadmin.utils.helpers import utcnow


@pytest.fixture
def member_id(flask_app):
    with flask_app.app_context():
        member = Member.create({
            'name': 'Pat Payer', 'age': 40, 'gender': 'MALE', 'email': 'pat@example.com',
            'phone': '5553334444', 'membership_type': 'ONE_MONTH',
            'expiry_date': utcnow() + timedelta(days=90),
        })
    return member.id


def _payment(member_id, days=10, **overrides):
    data = {'member_id': member_id, 'amount': 25.0, 'payment_type': 'MEMBERSHIP',
            'due_date': utcnow() + timedelta(days=days)}
    data.update(overrides)
    return Payment.create(data)


def test_new_payment_pending_or_overdue(flask_app, member_id):
    with flask_app.app_context():
        assert _payment(member_id).status == 'PENDING'
        assert _payment(member_id, days=-1).status == 'OVERDUE'


def test_mark_paid_stamps_once(flask_app, member_id):
    with flask_app.app_context():
        payment = _payment(member_id)
        payment.mark_paid(notes='cash')
        stored = Payment.get_by_id(payment.id)
        assert stored.status == 'PAID'
        assert stored.paid_at is not None
        assert stored.notes == 'cash'
        with pytest.raises(BadRequestError, match='Payment is already marked as paid'):
            stored.mark_paid()


def test_leaving_paid_clears_paid_at(flask_app, member_id):
    with flask_app.app_context():
        payment = _payment(member_id)
        payment.mark_paid()
        payment.apply_update({'status': 'CANCELLED'})
        stored = Payment.get_by_id(payment.id)
        assert stored.status == 'CANCELLED'
        assert stored.paid_at is None


def test_past_due_date_only_overdues_pending(flask_app, member_id):
    past = utcnow() - timedelta(days=3)
    with flask_app.app_context():
        pending = _payment(member_id)
        pending.apply_update({'due_date': past})
        assert Payment.get_by_id(pending.id).status == 'OVERDUE'

        paid = _payment(member_id)
        paid.mark_paid()
        paid.apply_update({'due_date': past})
        assert Payment.get_by_id(paid.id).status == 'PAID'


def test_only_pending_payments_deleted(flask_app, member_id):
    with flask_app.app_context():
        pending = _payment(member_id)
        pending.delete()
        assert Payment.get_by_id(pending.id) is None

        paid = _payment(member_id)
        paid.mark_paid()
        with pytest.raises(BadRequestError, match='Only pending payments can be deleted'):
            paid.delete()


def test_overview_counts(flask_app, member_id):
    with flask_app.app_context():
        _payment(member_id)
        _payment(member_id, days=-2)
        _payment(member_id, amount=100.0, payment_type='CLASS').mark_paid()
        _payment(member_id, payment_type='OTHER').apply_update({'status': 'CANCELLED'})
        overview = Payment.get_overview()
    assert overview['totalPayments'] == 4
    assert overview['pendingPayments'] == 1
    assert overview['overduePayments'] == 1
    assert overview['totalRevenue'] == 100.0
    assert overview['monthlyRevenue'] == 100.0
    assert overview['paymentTypeDistribution'] == [
        {'type': 'CLASS', 'count': 1}, {'type': 'MEMBERSHIP', 'count': 2},
    ]


def test_payment_carries_member_summary(flask_app, member_id):
    with flask_app.app_context():
        payment = Payment.get_by_id(_payment(member_id).id)
    data = payment.to_dict()
    assert data['member']['name'] == 'Pat Payer'
    assert data['amount'] == 25.0
