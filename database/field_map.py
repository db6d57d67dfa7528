"""API（camelCase）与数据库列（snake_case）之间的字段名映射

只有下列 7 个字段需要转换，其余字段（id、date、status、address、
observations）原样通过。
"""
from typing import Any, Dict, Mapping

API_TO_DB = {
    "orderNumber": "order_number",
    "clientName": "client_name",
    "clientPhone": "client_phone",
    "orderValue": "order_value",
    "commissionRate": "commission_rate",
    "commissionPaid": "commission_paid",
    "requesterName": "requester_name",
}

DB_TO_API = {db: api for api, db in API_TO_DB.items()}


def to_db_name(name: str) -> str:
    return API_TO_DB.get(name, name)


def to_api_name(name: str) -> str:
    return DB_TO_API.get(name, name)


def to_api_fields(row: Mapping[str, Any]) -> Dict[str, Any]:
    """数据库列字典 -> camelCase 字典"""
    return {to_api_name(key): value for key, value in row.items()}
