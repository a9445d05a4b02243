from flask import Blueprint, jsonify, request

from gymadmin.models import statistics
from gymadmin.utils.decorators import login_required

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('/overview', methods=['GET'])
@login_required
def overview():
    return jsonify({'success': True, 'data': statistics.get_overview()})


@dashboard_bp.route('/monthly-stats', methods=['GET'])
@login_required
def monthly_stats():
    """Twelve zero-filled monthly buckets for ?year= (default: this year)"""
    return jsonify({'success': True, 'data': statistics.get_monthly_stats(request.args.get('year'))})


@dashboard_bp.route('/membership-distribution', methods=['GET'])
@login_required
def membership_distribution():
    return jsonify({'success': True, 'data': statistics.get_membership_distribution()})


@dashboard_bp.route('/gender-distribution', methods=['GET'])
@login_required
def gender_distribution():
    return jsonify({'success': True, 'data': statistics.get_gender_distribution()})


@dashboard_bp.route('/age-distribution', methods=['GET'])
@login_required
def age_distribution():
    return jsonify({'success': True, 'data': statistics.get_age_distribution()})


@dashboard_bp.route('/recent-activities', methods=['GET'])
@login_required
def recent_activities():
    limit = statistics.parse_activity_limit(request.args.get('limit'))
    return jsonify({'success': True, 'data': statistics.get_recent_activities(limit)})
