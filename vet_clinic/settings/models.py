"""诊所设置数据模型。"""
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vet_clinic.config import DEFAULT_MED_INTERVAL_DAYS, LUNCH_END_TIME, LUNCH_START_TIME

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ClinicSettings(BaseModel):
    """诊所级设置：启动时加载，修改时保存。"""
    lunch_start_time: str = Field(LUNCH_START_TIME, description="午休开始 HH:MM")
    lunch_end_time: str = Field(LUNCH_END_TIME, description="午休结束 HH:MM")
    is_lunch_enabled: bool = Field(True, description="是否在预约表中保留午休")
    image_server_url: str = Field("", description="院内图片服务器地址")
    default_med_interval_days: int = Field(
        DEFAULT_MED_INTERVAL_DAYS, gt=0, description="长期用药默认间隔（天）"
    )

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("lunch_start_time", "lunch_end_time")
    @classmethod
    def _check_time(cls, v: str) -> str:
        if not _HHMM.match(v):
            raise ValueError(f"时间格式应为 HH:MM: {v}")
        return v
