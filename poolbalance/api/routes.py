from flask import Blueprint, jsonify, request
from poolbalance.core.decorators import api_safe, InvalidInputError
from poolbalance.services import standards
from poolbalance.services.calculator import calculate_pool_report
from dataclasses import asdict
import logging

api_bp = Blueprint('api', __name__)
logger = logging.getLogger(__name__)

@api_bp.route('/api/calculate', methods=['POST'])
@api_safe
def calculate():
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        raise InvalidInputError(payload={"fields": ["body"]})

    logger.debug(f"Calculate request: state={data.get('state')!r}, pool_type={data.get('pool_type')!r}")

    report = calculate_pool_report(data)
    return jsonify(report.to_dict())

@api_bp.route('/api/standards', methods=['GET'])
@api_safe
def get_standards():
    return jsonify(standards.get_all_standards())

@api_bp.route('/api/standards/<jurisdiction>/<pool_type>', methods=['GET'])
@api_safe
def get_standard(jurisdiction, pool_type):
    standard = standards.get_standard(jurisdiction, pool_type)
    return jsonify(asdict(standard))

@api_bp.route('/api/chlorine_products', methods=['GET'])
@api_safe
def get_chlorine_products():
    return jsonify(standards.get_all_chlorine_products())
