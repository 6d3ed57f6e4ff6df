"""Core module - 配置, 日志, 异常处理"""
from .config import settings
from .logging import logger
from .exceptions import (
    PipelineStage,
    MedInsightException,
    InputValidationError,
    ImageDecodeError,
    ClassificationServiceError,
    NarrativeServiceError,
    ConfigurationError,
    AnalysisError
)
