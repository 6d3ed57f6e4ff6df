"""
应用配置管理
"""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import model_validator

from .exceptions import ConfigurationError


# 获取项目根目录
_BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """应用配置"""
    
    # 应用基础配置
    APP_NAME: str = "MedInsight"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    
    # 路径配置
    BASE_DIR: Path = _BASE_DIR
    LOG_DIR: Path = _BASE_DIR / "logs"
    
    # 服务配置
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True
    
    # API 配置
    API_PREFIX: str = "/api"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB
    
    # 图像分类 (Hugging Face Inference)
    HUGGINGFACE_API_KEY: Optional[str] = None
    HF_INFERENCE_PROVIDER: str = "hf-inference"
    MRI_CLASSIFIER_MODEL: str = "microsoft/resnet-50"
    XRAY_CLASSIFIER_MODEL: str = "microsoft/resnet-50"
    
    # LLM 配置 (Groq OpenAI 兼容接口)
    GROQ_API_KEY: Optional[str] = None
    LLM_MODEL: str = "llama-3.3-70b-versatile"
    LLM_BASE_URL: str = "https://api.groq.com/openai/v1"
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 700
    
    # 图像预处理配置
    IMAGE_SIZE: int = 224
    IMAGE_NORMALIZE: bool = True
    JPEG_QUALITY: int = 90
    
    # 前端配置
    FRONTEND_API_URL: str = "http://localhost:8000"
    
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }
    
    @model_validator(mode='after')
    def create_directories(self):
        """确保日志目录存在"""
        self.LOG_DIR.mkdir(parents=True, exist_ok=True)
        return self
    
    def require_credentials(self) -> None:
        """检查远程服务凭证，缺失时抛出 ConfigurationError"""
        missing = [
            name for name in ("HUGGINGFACE_API_KEY", "GROQ_API_KEY")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )
    
    def classifier_model(self, modality) -> str:
        """根据影像模态返回分类模型 ID"""
        value = getattr(modality, "value", modality)
        if value == "mri":
            return self.MRI_CLASSIFIER_MODEL
        if value == "xray":
            return self.XRAY_CLASSIFIER_MODEL
        raise ValueError(f"未知的影像模态: {value}")


settings = Settings()
