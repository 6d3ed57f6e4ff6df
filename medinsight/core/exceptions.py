"""
自定义异常类

每个异常都携带错误码、所属流水线阶段以及对应的 HTTP 状态码，
API 层据此直接映射响应，无需解析错误信息文本。
"""
from enum import Enum
from typing import Optional


class PipelineStage(str, Enum):
    """分析流水线阶段"""
    CONFIG = "config"
    VALIDATE = "validate"
    PREPROCESS = "preprocess"
    CLASSIFY = "classify"
    BUILD_PROMPT = "build_prompt"
    NARRATE = "narrate"
    COMPOSE = "compose"


class MedInsightException(Exception):
    """MedInsight 基础异常"""
    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        stage: Optional[PipelineStage] = None
    ):
        self.message = message
        self.code = code
        self.stage = stage
        super().__init__(self.message)


class InputValidationError(MedInsightException):
    """上传参数无效 (缺失、类型错误、超出大小限制)"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_INPUT", stage=PipelineStage.VALIDATE)


class ImageDecodeError(MedInsightException):
    """图像无法解码"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="IMAGE_DECODE_ERROR", stage=PipelineStage.PREPROCESS)


class ClassificationServiceError(MedInsightException):
    """远程图像分类服务错误"""
    status_code = 502

    def __init__(self, message: str):
        super().__init__(message, code="CLASSIFICATION_SERVICE_ERROR", stage=PipelineStage.CLASSIFY)


class NarrativeServiceError(MedInsightException):
    """远程对话补全服务错误"""
    status_code = 502

    def __init__(self, message: str):
        super().__init__(message, code="NARRATIVE_SERVICE_ERROR", stage=PipelineStage.NARRATE)


class ConfigurationError(MedInsightException):
    """配置缺失 (例如 API 密钥未设置)"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION_ERROR", stage=PipelineStage.CONFIG)


class AnalysisError(MedInsightException):
    """未分类的分析错误"""
    status_code = 500

    def __init__(self, message: str, stage: Optional[PipelineStage] = None):
        super().__init__(message, code="ANALYSIS_ERROR", stage=stage)
