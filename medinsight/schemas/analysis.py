"""
分析相关数据模型
"""
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum


class Modality(str, Enum):
    """影像模态"""
    MRI = "mri"
    XRAY = "xray"

    @property
    def label(self) -> str:
        return self.value.upper()


class UploadedImage(BaseModel):
    """上传的原始图像 (仅在单次请求内存在)"""
    data: bytes = Field(..., description="原始字节")
    content_type: str = Field(..., description="声明的 MIME 类型")
    modality: Modality = Field(..., description="影像模态")
    filename: Optional[str] = Field(None, description="原始文件名")


class PreparedImage(BaseModel):
    """预处理后的固定尺寸 JPEG 图像"""
    data: bytes = Field(..., description="JPEG 编码字节")
    width: int = Field(..., description="宽度(像素)")
    height: int = Field(..., description="高度(像素)")
    content_type: str = Field(default="image/jpeg", description="MIME 类型")


class Prediction(BaseModel):
    """单个分类预测"""
    label: str
    score: float = Field(..., ge=0.0, le=1.0)


class ClassificationResult(BaseModel):
    """分类结果，按置信度降序排列"""
    model_id: str = Field(..., description="分类模型 ID")
    predictions: List[Prediction] = Field(..., description="预测列表")

    @field_validator("predictions")
    @classmethod
    def sort_predictions(cls, value: List[Prediction]) -> List[Prediction]:
        if not value:
            raise ValueError("分类结果不能为空")
        return sorted(value, key=lambda p: p.score, reverse=True)

    def top(self, n: int = 3) -> List[Prediction]:
        return self.predictions[:n]

    def average_confidence(self, n: int = 3) -> float:
        """
        前 n 个预测的平均置信度 (百分比)

        每个分数先换算为保留两位小数的百分比，再取平均。
        """
        percentages = [round(p.score * 100, 2) for p in self.top(n)]
        return sum(percentages) / len(percentages)


class AnalysisReport(BaseModel):
    """最终分析报告 (不可变)"""
    model_config = ConfigDict(frozen=True)

    modality: Modality
    summary: str
    narrative: str
    disclaimer: str

    @property
    def text(self) -> str:
        return (
            f"{self.summary}\n\n\n"
            f"Patient-Friendly Analysis:\n{self.narrative}\n\n"
            f"Important Note: {self.disclaimer}"
        )


class AnalyzeResponse(BaseModel):
    """分析接口响应"""
    analysis: str


class ErrorResponse(BaseModel):
    """错误响应"""
    error: str
    code: str = "UNKNOWN_ERROR"
    stage: Optional[str] = None
