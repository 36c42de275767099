"""
通行证配置与审批服务

某类通行证只有在商家开启（enabled）且管理员审批（admin_approved）后才可售卖、可预约。
pending_approval 为派生值，每次读取时由各类型的两个标志计算，不落库。
"""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitpass.core.config import settings
from fitpass.models.pass_config import PassConfig, PASS_TYPES
from fitpass.repositories.pass_config import PassConfigRepository
from fitpass.schemas.pass_config import PassConfigResponse, PassConfigUpdate

logger = logging.getLogger(__name__)


def _check_pass_type(pass_type: str) -> None:
    if pass_type not in PASS_TYPES:
        raise ValueError(f"不支持的通行证类型: {pass_type}")


def default_config(business_id: int) -> PassConfig:
    """新商家的默认配置：全部关闭、未审批"""
    prices = settings.DEFAULT_PASS_PRICES
    return PassConfig(
        business_id=business_id,
        daily_enabled=False,
        weekly_enabled=False,
        monthly_enabled=False,
        daily_admin_approved=False,
        weekly_admin_approved=False,
        monthly_admin_approved=False,
        daily_price=prices["daily"],
        weekly_price=prices["weekly"],
        monthly_price=prices["monthly"],
    )


def is_active(config: PassConfig, pass_type: str) -> bool:
    _check_pass_type(pass_type)
    return config.is_enabled(pass_type) and config.is_approved(pass_type)


def to_response(config: PassConfig) -> PassConfigResponse:
    return PassConfigResponse(
        business_id=config.business_id,
        daily_enabled=config.is_enabled("daily"),
        weekly_enabled=config.is_enabled("weekly"),
        monthly_enabled=config.is_enabled("monthly"),
        daily_admin_approved=config.is_approved("daily"),
        weekly_admin_approved=config.is_approved("weekly"),
        monthly_admin_approved=config.is_approved("monthly"),
        daily_price=config.price_of("daily"),
        weekly_price=config.price_of("weekly"),
        monthly_price=config.price_of("monthly"),
        pending_approval=config.pending_approval,
        active_pass_types=[t for t in PASS_TYPES if is_active(config, t)],
    )


class PassConfigService:
    """通行证配置服务类"""

    def __init__(self, db: AsyncSession, configs: Optional[PassConfigRepository] = None):
        self.db = db
        self.configs = configs or PassConfigRepository(db)

    async def get_config(self, business_id: int) -> PassConfig:
        """获取配置，未保存过时返回默认值（不落库）"""
        existing = await self.configs.get_by_business(business_id)
        return existing or default_config(business_id)

    async def _get_or_create(self, business_id: int) -> PassConfig:
        existing = await self.configs.get_by_business(business_id)
        if existing:
            return existing
        return await self.configs.add(default_config(business_id))

    async def is_pass_type_active(self, business_id: int, pass_type: str) -> bool:
        return is_active(await self.get_config(business_id), pass_type)

    async def has_pending_approval(self, business_id: int) -> bool:
        return (await self.get_config(business_id)).pending_approval

    async def list_pending_approvals(self) -> List[PassConfig]:
        return [c for c in await self.configs.list_all() if c.pending_approval]

    # ---------- 商家操作 ---------- #
    async def update_pass_config(self, business_id: int, updates: PassConfigUpdate) -> PassConfig:
        """更新开关与价格。关闭某类型会同时撤销其审批，重新开启需再次审批。"""
        config = await self._get_or_create(business_id)
        data = updates.model_dump(exclude_unset=True, exclude_none=True)
        for pass_type in PASS_TYPES:
            enabled = data.get(f"{pass_type}_enabled")
            if enabled is not None:
                setattr(config, f"{pass_type}_enabled", enabled)
                if not enabled:
                    setattr(config, f"{pass_type}_admin_approved", False)
            price = data.get(f"{pass_type}_price")
            if price is not None:
                if price <= 0:
                    raise ValueError("价格必须大于 0")
                setattr(config, f"{pass_type}_price", price)
        await self.configs.commit()
        logger.info("商家 %s 更新通行证配置: %s", business_id, data)
        return config

    async def request_pass_approval(self, business_id: int, pass_type: str) -> PassConfig:
        """商家申请开通某类通行证"""
        _check_pass_type(pass_type)
        config = await self._get_or_create(business_id)
        setattr(config, f"{pass_type}_enabled", True)
        await self.configs.commit()
        logger.info("商家 %s 申请开通 %s 通行证", business_id, pass_type)
        return config

    # ---------- 管理员操作 ---------- #
    async def set_admin_approval(self, business_id: int, pass_type: str, approved: bool) -> PassConfig:
        """管理员切换审批标志"""
        _check_pass_type(pass_type)
        config = await self._get_or_create(business_id)
        setattr(config, f"{pass_type}_admin_approved", approved)
        await self.configs.commit()
        logger.info("管理员设置商家 %s 的 %s 审批为 %s", business_id, pass_type, approved)
        return config

    async def approve_pass(self, business_id: int, pass_type: str) -> PassConfig:
        return await self.set_admin_approval(business_id, pass_type, True)

    async def reject_pass(self, business_id: int, pass_type: str) -> PassConfig:
        """驳回：同时关闭该类型"""
        _check_pass_type(pass_type)
        config = await self._get_or_create(business_id)
        setattr(config, f"{pass_type}_enabled", False)
        setattr(config, f"{pass_type}_admin_approved", False)
        await self.configs.commit()
        logger.info("管理员驳回商家 %s 的 %s 通行证", business_id, pass_type)
        return config

    async def approve_all_pending(self, business_id: int) -> PassConfig:
        """审批全部已开启类型"""
        config = await self._get_or_create(business_id)
        for pass_type in PASS_TYPES:
            setattr(config, f"{pass_type}_admin_approved", config.is_enabled(pass_type))
        await self.configs.commit()
        return config

    async def reject_all_pending(self, business_id: int) -> PassConfig:
        """驳回全部待审批类型：未审批的类型被关闭"""
        config = await self._get_or_create(business_id)
        for pass_type in PASS_TYPES:
            setattr(config, f"{pass_type}_enabled", config.is_enabled(pass_type) and config.is_approved(pass_type))
        await self.configs.commit()
        return config
