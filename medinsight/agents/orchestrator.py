"""
Orchestrator - 分析流水线调度器
预处理 → 分类 → 构建指令 → 生成解读 → 合成报告
"""
from typing import Optional, TypedDict

from langgraph.graph import StateGraph, END

from medinsight.core.config import settings, Settings
from medinsight.core.logging import logger
from medinsight.core.exceptions import MedInsightException
from medinsight.schemas.analysis import (
    AnalysisReport,
    ClassificationResult,
    PreparedImage,
    UploadedImage
)
from medinsight.services.imaging import ImagePreprocessor
from medinsight.services.classification import ClassificationClient
from medinsight.services.report import compose_report
from .narrative_agent import NarrativeAgent, create_chat_llm
from .prompts import build_instruction


class OrchestratorState(TypedDict, total=False):
    """Orchestrator 状态"""
    upload: UploadedImage
    prepared: PreparedImage
    classification: ClassificationResult
    instruction: str
    narrative: str
    report: AnalysisReport


class AnalysisOrchestrator:
    """
    分析流水线调度器
    
    线性执行，不分支、不重试。任一阶段抛出的异常直接终止流水线，
    不返回部分结果。
    """
    
    def __init__(
        self,
        classifier: ClassificationClient,
        narrator: NarrativeAgent,
        preprocessor: Optional[ImagePreprocessor] = None
    ):
        """
        初始化调度器
        
        Args:
            classifier: 分类客户端
            narrator: 解读 Agent
            preprocessor: 图像预处理器 (可选)
        """
        self.classifier = classifier
        self.narrator = narrator
        self.preprocessor = preprocessor or ImagePreprocessor()
        
        self.workflow = self._build_workflow()
    
    @classmethod
    def from_settings(cls, config: Settings = None) -> "AnalysisOrchestrator":
        """按配置构建默认客户端，凭证缺失时抛出 ConfigurationError"""
        config = config or settings
        config.require_credentials()
        
        return cls(
            classifier=ClassificationClient(config=config),
            narrator=NarrativeAgent(create_chat_llm(config)),
            preprocessor=ImagePreprocessor(
                size=config.IMAGE_SIZE,
                normalize=config.IMAGE_NORMALIZE,
                quality=config.JPEG_QUALITY
            )
        )
    
    def _build_workflow(self):
        """构建分析工作流"""
        workflow = StateGraph(OrchestratorState)
        
        workflow.add_node("preprocess", self._preprocess)
        workflow.add_node("classify", self._classify)
        workflow.add_node("build_prompt", self._build_prompt)
        workflow.add_node("narrate", self._narrate)
        workflow.add_node("compose", self._compose)
        
        workflow.set_entry_point("preprocess")
        workflow.add_edge("preprocess", "classify")
        workflow.add_edge("classify", "build_prompt")
        workflow.add_edge("build_prompt", "narrate")
        workflow.add_edge("narrate", "compose")
        workflow.add_edge("compose", END)
        
        return workflow.compile()
    
    def _preprocess(self, state: OrchestratorState) -> OrchestratorState:
        upload = state["upload"]
        logger.info(f"预处理图像: {upload.filename or 'upload'} ({upload.content_type})")
        return {"prepared": self.preprocessor.prepare(upload.data, upload.content_type)}
    
    def _classify(self, state: OrchestratorState) -> OrchestratorState:
        logger.info("运行图像分类...")
        return {"classification": self.classifier.classify(state["prepared"], state["upload"].modality)}
    
    def _build_prompt(self, state: OrchestratorState) -> OrchestratorState:
        return {"instruction": build_instruction(state["upload"].modality)}
    
    def _narrate(self, state: OrchestratorState) -> OrchestratorState:
        # TODO: 将分类结果写入解读指令 (目前 LLM 不会看到分类输出)
        logger.info("生成患者解读...")
        return {"narrative": self.narrator.narrate(state["instruction"])}
    
    def _compose(self, state: OrchestratorState) -> OrchestratorState:
        logger.info("合成最终报告...")
        report = compose_report(
            state["classification"],
            state["narrative"],
            state["upload"].modality
        )
        return {"report": report}
    
    def analyze(self, upload: UploadedImage) -> AnalysisReport:
        """
        执行完整分析
        
        Args:
            upload: 上传图像
            
        Returns:
            最终报告
        """
        logger.info(f"开始分析 {upload.modality.label} 图像, {len(upload.data)} 字节")
        
        try:
            result = self.workflow.invoke({"upload": upload})
        except MedInsightException as e:
            stage = e.stage.value if e.stage else "unknown"
            logger.error(f"分析流水线在 {stage} 阶段失败: {e.message}")
            raise
        
        logger.info("分析完成")
        return result["report"]
