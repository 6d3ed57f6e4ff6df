"""
图像分类客户端 (Hugging Face Inference)
"""
from typing import Any, Optional

from huggingface_hub import InferenceClient

from medinsight.core.config import settings, Settings
from medinsight.core.logging import logger
from medinsight.core.exceptions import ClassificationServiceError
from medinsight.schemas.analysis import (
    ClassificationResult,
    Modality,
    PreparedImage,
    Prediction
)


class ClassificationClient:
    """
    远程图像分类客户端
    
    MRI 与 X-ray 目前使用同一个通用分类模型，模型 ID 通过配置切换。
    """
    
    def __init__(self, client: Any = None, config: Optional[Settings] = None):
        """
        初始化分类客户端
        
        Args:
            client: 带 image_classification 方法的推理客户端 (可选)
            config: 配置 (默认全局 settings)
        """
        self.config = config or settings
        if client is None:
            self.client = InferenceClient(
                provider=self.config.HF_INFERENCE_PROVIDER,
                token=self.config.HUGGINGFACE_API_KEY
            )
        else:
            self.client = client
    
    def classify(self, image: PreparedImage, modality: Modality) -> ClassificationResult:
        """
        调用远程分类模型
        
        Args:
            image: 预处理后的图像
            modality: 影像模态
            
        Returns:
            按置信度降序排列的分类结果
        """
        model_id = self.config.classifier_model(modality)
        logger.info(f"调用分类模型: {model_id}")
        
        try:
            outputs = self.client.image_classification(image.data, model=model_id)
        except Exception as e:
            logger.error(f"Hugging Face API 调用失败: {e}")
            raise ClassificationServiceError(f"Hugging Face API error: {e}") from e
        
        if not outputs:
            raise ClassificationServiceError("Hugging Face API error: no predictions returned")
        
        result = ClassificationResult(
            model_id=model_id,
            predictions=[Prediction(label=o.label, score=o.score) for o in outputs]
        )
        logger.debug(f"分类结果: {[(p.label, p.score) for p in result.top()]}")
        
        return result
