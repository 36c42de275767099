"""
商家套餐目录：starter < growth < enterprise
"""
from typing import Dict, List

PLAN_CATALOG: List[Dict] = [
    {
        "id": "starter",
        "name": "Starter",
        "price": 0,
        "period": "forever",
        "features": ["1 个场馆", "每月 50 次预约", "基础数据分析", "邮件支持"],
    },
    {
        "id": "growth",
        "name": "Growth",
        "price": 3999,
        "period": "month",
        "features": ["3 个场馆", "不限预约", "高级数据分析", "优先支持", "智能排班", "在线收款"],
    },
    {
        "id": "enterprise",
        "name": "Enterprise",
        "price": 9999,
        "period": "month",
        "features": ["不限场馆", "不限预约", "白标定制", "专属客户经理", "API 接入", "定制集成", "SLA 保障"],
    },
]

PLAN_ORDER: Dict[str, int] = {"starter": 0, "growth": 1, "enterprise": 2}


def get_plan_details(tier: str) -> Dict:
    for plan in PLAN_CATALOG:
        if plan["id"] == tier:
            return plan
    raise ValueError(f"套餐不存在: {tier}")


def plan_rank(tier: str) -> int:
    if tier not in PLAN_ORDER:
        raise ValueError(f"套餐不存在: {tier}")
    return PLAN_ORDER[tier]


def is_plan_upgrade(from_plan: str, to_plan: str) -> bool:
    return plan_rank(to_plan) > plan_rank(from_plan)


def is_plan_downgrade(from_plan: str, to_plan: str) -> bool:
    return plan_rank(to_plan) < plan_rank(from_plan)
